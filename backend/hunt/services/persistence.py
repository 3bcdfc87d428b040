from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from hunt import db
from hunt.errors import Conflict


def commit(*objects, conflict_message: str = 'Duplicate value for a unique field') -> None:
    """Add ``objects`` and commit, translating races into :class:`Conflict`.

    Teams and rounds carry a version counter; a writer whose snapshot is
    older than the stored row gets a StaleDataError here instead of
    overwriting the newer state.
    """
    for obj in objects:
        db.session.add(obj)
    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        current_app.logger.info("[conflict] stale write rejected")
        raise Conflict('The record was modified concurrently, retry the request')
    except IntegrityError as exc:
        db.session.rollback()
        current_app.logger.info(f"[conflict] integrity error: {exc.orig}")
        raise Conflict(conflict_message)


def delete(obj) -> None:
    db.session.delete(obj)
    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise Conflict('The record was modified concurrently, retry the request')
