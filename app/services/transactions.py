from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.errors import ConflictError, TransientStoreError


@contextmanager
def atomic(
    db: Session, conflict_message: str, conflicts: str | None = None
) -> Iterator[Session]:
    """Commit everything issued inside the block as one unit, or roll it all back."""
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(conflict_message, conflicts=conflicts) from exc
    except OperationalError as exc:
        db.rollback()
        raise TransientStoreError("Database is unavailable; retry later.") from exc
    except Exception:
        db.rollback()
        raise
