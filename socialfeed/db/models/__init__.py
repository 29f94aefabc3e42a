from socialfeed.db.models.user import User
from socialfeed.db.models.post import Post
from socialfeed.db.models.comment import Comment
from socialfeed.db.models.like import Like
from socialfeed.db.models.follow import Follow
