"""Flip join-table rows (likes, follows) on and off.

A toggle deletes the row if it exists and inserts it otherwise. The unique
constraint on the join table is what keeps concurrent toggles honest: when two
requests both find nothing to delete and both insert, the loser's insert fails
and is reported as the state it was trying to reach.
"""

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session


def insert_edge(db: Session, model, **key) -> bool:
    db.add(model(**key))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if db.query(model).filter_by(**key).first() is None:
            # not a duplicate, e.g. the parent row vanished
            raise
    return True


def toggle_edge(db: Session, model, **key) -> bool:
    """Returns the new state: True if the row now exists."""
    try:
        removed = db.query(model).filter_by(**key).delete(synchronize_session=False)
        if removed:
            db.commit()
            return False
    except SQLAlchemyError:
        db.rollback()
        raise
    return insert_edge(db, model, **key)
