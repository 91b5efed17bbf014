"""Two-state toggles for likes and subscriptions."""

from typing import Callable, Dict, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clipnest.utils.api_error import ApiError


def _conflict(db: Session) -> ApiError:
    db.rollback()
    return ApiError(status.HTTP_409_CONFLICT, "Concurrent toggle, please retry")


def toggle_row(
    db: Session,
    model,
    criteria: Dict,
    on_change: Optional[Callable[[int], None]] = None
) -> bool:
    """
    Delete the row matching criteria if it exists, insert it otherwise.

    on_change receives +1 or -1 and runs inside the same transaction, so any
    counter it adjusts is committed together with the row. It only runs for a
    write that actually happened: an insert that passed the unique constraint
    or a delete that matched exactly one row.

    Returns:
        True if the row exists after the call

    Raises:
        ApiError: 409 when a concurrent toggle of the same pair got there first
    """
    exists = db.query(model.id).filter_by(**criteria).first() is not None

    try:
        if exists:
            result = db.execute(
                delete(model).filter_by(**criteria).execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # Removed by another request between the read and this delete
                raise _conflict(db)
            delta = -1
        else:
            db.add(model(**criteria))
            db.flush()
            delta = 1

        if on_change is not None:
            on_change(delta)

        db.commit()
    except IntegrityError:
        # Another request inserted the same pair first
        raise _conflict(db)

    return delta > 0


def counter_adjuster(db: Session, counter_model, subject_id: UUID) -> Callable[[int], None]:
    """Build an on_change hook that shifts counter_model.likes for one row."""

    def adjust(delta: int):
        db.execute(
            update(counter_model)
            .where(counter_model.id == subject_id)
            .values(likes=counter_model.likes + delta)
            .execution_options(synchronize_session=False)
        )

    return adjust
