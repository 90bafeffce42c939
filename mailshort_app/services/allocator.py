"""
Short-code allocation with bounded retry.

The allocator never checks whether a code exists before inserting it: a
check-then-insert leaves a window where two writers can claim the same code.
Instead it inserts directly and lets the primary key on links.code reject
duplicates, drawing a fresh code after each rejection.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mailshort_app.logging_config import get_logger
from mailshort_app.models.link import Link
from mailshort_app.services.short_code_strategies import ShortCodeStrategy

log = get_logger(__name__)


@dataclass(frozen=True)
class AllocationResult:
    """Outcome of allocating a code for one URL: either code or error is set"""
    original: str
    code: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.code is not None


def _store_error_message(exc: SQLAlchemyError) -> str:
    # IntegrityError and friends wrap the driver error in .orig
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class LinkAllocator:
    """
    Persists code -> URL records.

    Each URL gets at most max_attempts insert attempts, made strictly one
    after another. A failure is returned as a value so the caller can keep
    going with the rest of its batch.
    """

    def __init__(self, db: Session, strategy: ShortCodeStrategy, max_attempts: int = 3):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.db = db
        self.strategy = strategy
        self.max_attempts = max_attempts

    def allocate(self, original_url: str, owner_id: Optional[str] = None) -> AllocationResult:
        """
        Insert a Link for *original_url* under a fresh random code.

        Returns:
            AllocationResult with the code actually stored, or with the last
            store error message after max_attempts failed inserts.
        """
        last_error: Optional[str] = None

        for attempt in range(1, self.max_attempts + 1):
            code = self.strategy.generate()
            try:
                self.db.add(Link(code=code, original_url=original_url, owner_id=owner_id))
                self.db.commit()
            except SQLAlchemyError as exc:
                self.db.rollback()
                last_error = _store_error_message(exc)
                log.info(
                    "link_insert_rejected",
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    error=last_error,
                )
                continue

            return AllocationResult(original=original_url, code=code, attempts=attempt)

        log.warning(
            "link_allocation_failed",
            attempts=self.max_attempts,
            error=last_error,
        )
        return AllocationResult(
            original=original_url, error=last_error, attempts=self.max_attempts
        )
