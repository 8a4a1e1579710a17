"""
Module: commerce_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.  Selectors
    form the "Q" side of the CQRS-lite pattern, providing structured read access
    to orders, inventory and dashboard aggregates without mutation capability.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors MUST NOT call session.add(), session.delete(),
      session.commit(), or session.flush().
    - DTO return convention: selectors return frozen dataclasses, NOT ORM
      instances.
    - No hidden state: two calls over the same data return the same result,
      whatever else was called in between.  Nothing is cached.
"""

from abc import ABC

from sqlalchemy.orm import Session

from commerce_kernel.domain.clock import Clock, SystemClock

# Largest page a dashboard query may request
DEFAULT_MAX_LIMIT = 50


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  The caller owns the session and its snapshot.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        max_limit: int = DEFAULT_MAX_LIMIT,
    ):
        self.session = session
        self.clock = clock or SystemClock()
        self.max_limit = max_limit
