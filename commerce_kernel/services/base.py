"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every write-side service.  Services use ``session.flush()`` -- never
    ``session.commit()``.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or rollback themselves.  The caller (AdminApi,
    PaymentEventHandler, or the test harness) owns commit/rollback, which
    is what makes a fulfillment's status change and its stock decrements
    one atomic unit.
"""

from abc import ABC

from sqlalchemy.orm import Session

from commerce_kernel.domain.clock import Clock, SystemClock


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide dashboard read models -- those belong
          in ``commerce_kernel/selectors/``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        """
        Args:
            session: SQLAlchemy session for database operations.
            clock: Time source for timestamps. Defaults to SystemClock.
        """
        self.session = session
        self.clock = clock or SystemClock()
