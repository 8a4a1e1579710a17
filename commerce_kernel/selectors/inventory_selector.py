"""
Module: commerce_kernel.selectors.inventory_selector
Responsibility: Read access to the strain catalog and its stock levels for
    the admin inventory page.
Architecture position: Kernel > Selectors.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from commerce_kernel.domain.clock import Clock
from commerce_kernel.domain.dtos import StrainInfo
from commerce_kernel.exceptions import StrainNotFoundError
from commerce_kernel.models.strain import Strain
from commerce_kernel.selectors.base import BaseSelector


class InventorySelector(BaseSelector):
    """Strain listings with low-stock flags."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        low_stock_threshold: int = 10,
    ):
        super().__init__(session, clock)
        self.low_stock_threshold = low_stock_threshold

    def get_strain(self, strain_id: UUID) -> StrainInfo:
        strain = self.session.get(Strain, strain_id, populate_existing=True)
        if strain is None:
            raise StrainNotFoundError(str(strain_id))
        return StrainInfo.from_model(strain, self.low_stock_threshold)

    def list_inventory(self, low_stock_only: bool = False) -> list[StrainInfo]:
        """All strains ordered by name, optionally only those below the threshold."""
        stmt = select(Strain).order_by(Strain.name, Strain.id)
        if low_stock_only:
            stmt = stmt.where(Strain.available_grams < self.low_stock_threshold)
        strains = self.session.execute(
            stmt.execution_options(populate_existing=True)
        ).scalars()
        return [StrainInfo.from_model(s, self.low_stock_threshold) for s in strains]
