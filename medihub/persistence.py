from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from medihub import db
from medihub.errors import InternalError


def commit(action: str, conflict=None):
    """Commit the session, rolling back and translating storage failures.

    ``conflict`` is the error raised when a unique index rejects the write;
    without it an integrity failure is reported like any other storage error.
    """
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        if conflict is not None:
            current_app.logger.warning('Unique constraint rejected %s: %s', action, exc.orig)
            raise conflict from exc
        current_app.logger.error('Unable to %s: %s', action, exc)
        raise InternalError(details=f'Unable to {action}') from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error('Unable to %s: %s', action, exc)
        raise InternalError(details=f'Unable to {action}') from exc
