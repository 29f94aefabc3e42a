from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from socialfeed.db.base import Base

class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    user = relationship("User", back_populates="posts")
    likes = relationship("Like", back_populates="post", passive_deletes=True)
    comments = relationship("Comment", back_populates="post", passive_deletes=True)

    __table_args__ = (
        Index("idx_posts_user_created", "user_id", "created_at"),
    )
