"""
InventoryLedger -- gram stock per strain.

Responsibility:
    The ONLY writer of ``Strain.available_grams``.  Serves stock reads and
    low-stock flags to the dashboard, applies fulfillment decrements for
    the transition service, and applies admin stock/price edits.

Architecture position:
    Kernel > Services -- imperative shell.  Called by TransitionService
    (decrement) and by the admin facade (set_stock / restock).

Invariants enforced:
    - Stock never goes negative: every write locks the strain row
      (``SELECT ... FOR UPDATE``) and checks the resulting value before
      assigning it.
    - Flush-only: the caller owns the transaction.

Failure modes:
    - StrainNotFoundError: unknown strain id.
    - InsufficientStockError: decrement larger than available grams.
    - InvalidArgumentError: non-positive decrement/restock grams, negative
      stock or price.

Audit relevance:
    Every stock change is logged with strain id, delta and resulting grams.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from commerce_kernel.domain.clock import Clock
from commerce_kernel.domain.dtos import StrainInfo
from commerce_kernel.domain.validation import validate_non_negative, validate_positive_grams
from commerce_kernel.exceptions import InsufficientStockError, StrainNotFoundError
from commerce_kernel.logging_config import get_logger
from commerce_kernel.models.strain import Strain
from commerce_kernel.services.base import BaseService

logger = get_logger("services.inventory_ledger")

DEFAULT_LOW_STOCK_THRESHOLD_GRAMS = 10


@dataclass(frozen=True)
class StockUpdate:
    """Admin edit of one strain's stock and/or price.  None leaves a field unchanged."""

    strain_id: UUID
    grams: int | None = None
    price_per_gram_cents: int | None = None


class InventoryLedger(BaseService):
    """
    Gram-level stock ledger.

    Contract:
        Reads never lock; writes lock the strain row for the rest of the
        caller's transaction.

    Non-goals:
        - Does NOT know about orders.  Exactly-once decrement per
          (order, strain) is the transition service's responsibility.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD_GRAMS,
    ):
        super().__init__(session, clock)
        self.low_stock_threshold = low_stock_threshold

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_available(self, strain_id: UUID) -> int:
        """Current available grams of ``strain_id``."""
        grams = self.session.execute(
            select(Strain.available_grams).where(Strain.id == strain_id)
        ).scalar_one_or_none()
        if grams is None:
            raise StrainNotFoundError(str(strain_id))
        return grams

    def is_low_stock(self, strain_id: UUID, threshold: int | None = None) -> bool:
        """True iff available grams are strictly below ``threshold``."""
        limit = self.low_stock_threshold if threshold is None else threshold
        return self.get_available(strain_id) < limit

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def lock_strain(self, strain_id: UUID) -> Strain:
        """Load ``strain_id`` under a row lock, refreshing any cached copy."""
        strain = self.session.execute(
            select(Strain)
            .where(Strain.id == strain_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if strain is None:
            raise StrainNotFoundError(str(strain_id))
        return strain

    def ensure_available(self, strain_id: UUID, grams: int) -> Strain:
        """Lock ``strain_id`` and check that ``grams`` can be taken from it.

        Returns the locked strain.  Nothing is written.
        """
        validate_positive_grams(grams)
        strain = self.lock_strain(strain_id)
        if strain.available_grams < grams:
            raise InsufficientStockError(str(strain_id), grams, strain.available_grams)
        return strain

    def decrement(self, strain_id: UUID, grams: int) -> int:
        """
        Subtract ``grams`` from the strain's stock.

        Postconditions:
            - available_grams decreased by exactly ``grams`` and is >= 0.

        Returns:
            The remaining available grams.
        """
        strain = self.ensure_available(strain_id, grams)
        strain.available_grams -= grams
        strain.updated_at = self.clock.now()
        self.session.flush()
        logger.info(
            "inventory_decremented",
            extra={
                "strain_id": str(strain_id),
                "grams": grams,
                "remaining_grams": strain.available_grams,
            },
        )
        return strain.available_grams

    def restock(self, strain_id: UUID, grams: int) -> int:
        """Add ``grams`` to the strain's stock and return the new total."""
        validate_positive_grams(grams)
        strain = self.lock_strain(strain_id)
        strain.available_grams += grams
        strain.updated_at = self.clock.now()
        self.session.flush()
        logger.info(
            "inventory_restocked",
            extra={
                "strain_id": str(strain_id),
                "grams": grams,
                "available_grams": strain.available_grams,
            },
        )
        return strain.available_grams

    def set_stock(
        self,
        strain_id: UUID,
        grams: int | None = None,
        price_per_gram_cents: int | None = None,
    ) -> StrainInfo:
        """Overwrite stock and/or current price of one strain."""
        update = self._validated(StockUpdate(strain_id, grams, price_per_gram_cents))
        strain = self.lock_strain(strain_id)
        self._write(strain, update)
        self.session.flush()
        return StrainInfo.from_model(strain, self.low_stock_threshold)

    def bulk_set_stock(self, updates: list[StockUpdate]) -> int:
        """
        Apply several admin edits, all or nothing.

        Every update is validated and every strain locked before the first
        write, so an invalid entry leaves all strains untouched.

        Returns:
            Number of strains updated.
        """
        for update in updates:
            self._validated(update)
        # Lock in id order so concurrent bulk edits cannot deadlock
        locked = {
            strain_id: self.lock_strain(strain_id)
            for strain_id in sorted({u.strain_id for u in updates}, key=str)
        }
        for update in updates:
            self._write(locked[update.strain_id], update)
        self.session.flush()
        logger.info("inventory_bulk_updated", extra={"updated": len(updates)})
        return len(updates)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validated(update: StockUpdate) -> StockUpdate:
        if update.grams is not None:
            validate_non_negative(update.grams, "grams")
        if update.price_per_gram_cents is not None:
            validate_non_negative(update.price_per_gram_cents, "price_per_gram_cents")
        return update

    def _write(self, strain: Strain, update: StockUpdate) -> None:
        previous = strain.available_grams
        if update.grams is not None:
            strain.available_grams = update.grams
        if update.price_per_gram_cents is not None:
            strain.price_per_gram_cents = update.price_per_gram_cents
        strain.updated_at = self.clock.now()
        logger.info(
            "inventory_set",
            extra={
                "strain_id": str(strain.id),
                "previous_grams": previous,
                "available_grams": strain.available_grams,
                "price_per_gram_cents": strain.price_per_gram_cents,
            },
        )
