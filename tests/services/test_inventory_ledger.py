"""Tests for InventoryLedger (commerce_kernel/services/inventory_ledger.py)."""

from uuid import uuid4

import pytest

from commerce_kernel.exceptions import (
    InsufficientStockError,
    InvalidArgumentError,
    StrainNotFoundError,
)
from commerce_kernel.services.inventory_ledger import StockUpdate


class TestReads:

    def test_get_available(self, inventory_ledger, strain_factory):
        strain = strain_factory(available_grams=42)
        assert inventory_ledger.get_available(strain.id) == 42

    def test_unknown_strain(self, inventory_ledger):
        with pytest.raises(StrainNotFoundError):
            inventory_ledger.get_available(uuid4())

    @pytest.mark.parametrize("grams,low", [(0, True), (9, True), (10, False), (50, False)])
    def test_low_stock_below_ten_grams(self, inventory_ledger, strain_factory, grams, low):
        strain = strain_factory(available_grams=grams)
        assert inventory_ledger.is_low_stock(strain.id) is low

    def test_low_stock_custom_threshold(self, inventory_ledger, strain_factory):
        strain = strain_factory(available_grams=20)
        assert inventory_ledger.is_low_stock(strain.id, threshold=25)


class TestDecrement:

    def test_decrement_returns_remaining(self, inventory_ledger, strain_factory):
        strain = strain_factory(available_grams=100)
        assert inventory_ledger.decrement(strain.id, 30) == 70
        assert inventory_ledger.get_available(strain.id) == 70

    def test_decrement_to_zero(self, inventory_ledger, strain_factory):
        strain = strain_factory(available_grams=5)
        assert inventory_ledger.decrement(strain.id, 5) == 0

    def test_insufficient_stock_leaves_stock(self, inventory_ledger, strain_factory):
        strain = strain_factory(available_grams=4)
        with pytest.raises(InsufficientStockError) as exc_info:
            inventory_ledger.decrement(strain.id, 5)
        assert exc_info.value.requested_grams == 5
        assert exc_info.value.available_grams == 4
        assert inventory_ledger.get_available(strain.id) == 4

    @pytest.mark.parametrize("grams", [0, -3])
    def test_non_positive_decrement_rejected(self, inventory_ledger, strain_factory, grams):
        strain = strain_factory()
        with pytest.raises(InvalidArgumentError):
            inventory_ledger.decrement(strain.id, grams)

    def test_decrement_unknown_strain(self, inventory_ledger):
        with pytest.raises(StrainNotFoundError):
            inventory_ledger.decrement(uuid4(), 1)

    def test_decrement_logged(self, inventory_ledger, strain_factory, captured_logs):
        strain = strain_factory(available_grams=10)
        inventory_ledger.decrement(strain.id, 3)
        records = [r for r in captured_logs() if r["message"] == "inventory_decremented"]
        assert records[-1]["strain_id"] == str(strain.id)
        assert records[-1]["remaining_grams"] == 7


class TestAdminEdits:

    def test_restock(self, inventory_ledger, strain_factory):
        strain = strain_factory(available_grams=3)
        assert inventory_ledger.restock(strain.id, 7) == 10

    def test_set_stock_and_price(self, inventory_ledger, strain_factory, deterministic_clock):
        strain = strain_factory(available_grams=3, price_per_gram_cents=1000)
        deterministic_clock.advance(60)

        info = inventory_ledger.set_stock(strain.id, grams=25, price_per_gram_cents=1200)

        assert info.available_grams == 25
        assert info.price_per_gram_cents == 1200
        assert info.is_low_stock is False
        assert strain.updated_at == deterministic_clock.now()

    def test_set_stock_price_only(self, inventory_ledger, strain_factory):
        strain = strain_factory(available_grams=8)
        info = inventory_ledger.set_stock(strain.id, price_per_gram_cents=900)
        assert info.available_grams == 8
        assert info.is_low_stock is True

    def test_set_negative_stock_rejected(self, inventory_ledger, strain_factory):
        strain = strain_factory(available_grams=8)
        with pytest.raises(InvalidArgumentError):
            inventory_ledger.set_stock(strain.id, grams=-1)
        assert inventory_ledger.get_available(strain.id) == 8

    def test_bulk_set_stock(self, inventory_ledger, strain_factory):
        a = strain_factory(name="Alpha", available_grams=1)
        b = strain_factory(name="Beta", available_grams=2)

        updated = inventory_ledger.bulk_set_stock(
            [StockUpdate(a.id, grams=50), StockUpdate(b.id, price_per_gram_cents=700)]
        )

        assert updated == 2
        assert inventory_ledger.get_available(a.id) == 50
        assert b.price_per_gram_cents == 700

    def test_bulk_set_stock_is_all_or_nothing(self, inventory_ledger, strain_factory):
        a = strain_factory(name="Alpha", available_grams=1)
        b = strain_factory(name="Beta", available_grams=2)

        with pytest.raises(InvalidArgumentError):
            inventory_ledger.bulk_set_stock(
                [StockUpdate(a.id, grams=50), StockUpdate(b.id, grams=-5)]
            )

        assert inventory_ledger.get_available(a.id) == 1
        assert inventory_ledger.get_available(b.id) == 2

    def test_bulk_unknown_strain_writes_nothing(self, inventory_ledger, strain_factory):
        a = strain_factory(name="Alpha", available_grams=1)
        with pytest.raises(StrainNotFoundError):
            inventory_ledger.bulk_set_stock(
                [StockUpdate(a.id, grams=50), StockUpdate(uuid4(), grams=5)]
            )
        assert inventory_ledger.get_available(a.id) == 1
