"""
Module: commerce_kernel.models.strain
Responsibility: ORM persistence for catalog strains and their gram stock.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/.  MUST NOT import from services/, selectors/, or outer layers.

Invariants enforced:
    - available_grams >= 0 (CHECK constraint ck_strain_stock_non_negative);
      the inventory ledger additionally refuses decrements that would cross
      zero, so the constraint is the last line of defence.
    - price_per_gram_cents >= 0, integer cents.
    - slug is unique.

Failure modes:
    - IntegrityError on duplicate slug or on a write that violates a CHECK.

Audit relevance:
    available_grams changes only through InventoryLedger (fulfillment
    decrements and admin stock edits).  Order history never depends on the
    current row: line items carry their own name and price snapshots.
"""

from enum import Enum

from sqlalchemy import CheckConstraint, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from commerce_kernel.db.base import TrackedBase


class StrainType(str, Enum):
    """Botanical classification shown in the catalog."""

    INDICA = "INDICA"
    SATIVA = "SATIVA"
    HYBRID = "HYBRID"


class Strain(TrackedBase):
    """
    A catalog product sold by the gram.

    Guarantees:
        - available_grams never negative (CHECK).
        - price_per_gram_cents is the CURRENT price; past purchases keep
          their own snapshot on OrderItem.
    """

    __tablename__ = "strains"

    __table_args__ = (
        UniqueConstraint("slug", name="uq_strain_slug"),
        CheckConstraint("available_grams >= 0", name="ck_strain_stock_non_negative"),
        CheckConstraint("price_per_gram_cents >= 0", name="ck_strain_price_non_negative"),
        Index("idx_strain_name", "name"),
        Index("idx_strain_available", "available_grams"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    slug: Mapped[str] = mapped_column(String(255), nullable=False)

    strain_type: Mapped[StrainType] = mapped_column(
        String(20),
        nullable=False,
        default=StrainType.HYBRID.value,
    )

    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    price_per_gram_cents: Mapped[int] = mapped_column(nullable=False, default=0)

    available_grams: Mapped[int] = mapped_column(nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Strain {self.slug}: {self.available_grams}g @ {self.price_per_gram_cents}c>"
