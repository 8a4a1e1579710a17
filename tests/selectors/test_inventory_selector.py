"""Tests for inventory reads (commerce_kernel/selectors/inventory_selector.py)."""

from uuid import uuid4

import pytest

from commerce_kernel.exceptions import StrainNotFoundError
from commerce_kernel.models.strain import StrainType
from commerce_kernel.selectors.inventory_selector import InventorySelector


@pytest.fixture
def inventory(session, deterministic_clock) -> InventorySelector:
    return InventorySelector(session, deterministic_clock)


class TestListInventory:

    def test_ordered_by_name(self, inventory, strain_factory):
        strain_factory(name="Zkittlez")
        strain_factory(name="Afghan Kush", strain_type=StrainType.INDICA)
        strain_factory(name="Maui Wowie", strain_type=StrainType.SATIVA)

        names = [s.name for s in inventory.list_inventory()]

        assert names == ["Afghan Kush", "Maui Wowie", "Zkittlez"]

    def test_low_stock_only(self, inventory, strain_factory):
        strain_factory(name="Plenty", available_grams=10)
        strain_factory(name="Short", available_grams=9)
        strain_factory(name="Out", available_grams=0)

        low = inventory.list_inventory(low_stock_only=True)

        assert [s.name for s in low] == ["Out", "Short"]
        assert all(s.is_low_stock for s in low)

    def test_custom_threshold(self, session, strain_factory):
        strain_factory(name="Twenty", available_grams=20)
        selector = InventorySelector(session, low_stock_threshold=25)
        assert [s.name for s in selector.list_inventory(low_stock_only=True)] == ["Twenty"]


class TestGetStrain:

    def test_strain_info(self, inventory, strain_factory):
        strain = strain_factory(name="Alpha", price_per_gram_cents=1200, available_grams=3,
                                strain_type=StrainType.SATIVA)
        info = inventory.get_strain(strain.id)
        assert info.price_per_gram_cents == 1200
        assert info.strain_type == "SATIVA"
        assert info.is_low_stock

    def test_missing(self, inventory):
        with pytest.raises(StrainNotFoundError):
            inventory.get_strain(uuid4())
