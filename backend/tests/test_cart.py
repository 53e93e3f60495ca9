# Overview: Pytest coverage for the cart calculator and its state machine.

import re
from decimal import Decimal

import pytest

from retailpos.cart import (
    Cart,
    CartError,
    CartProduct,
    CartSnapshot,
    CartStatus,
    change,
    subtotal,
    tax,
    total,
)

COFFEE = CartProduct(id="p1", name="Coffee", price=Decimal("10.00"), sku="COF-1")
MUFFIN = CartProduct(id="p2", name="Muffin", price=Decimal("3.33"), sku="MUF-1")


class TestSnapshotImmutability:

    def test_add_item_returns_new_snapshot(self):
        empty = CartSnapshot()
        one = empty.add_item(COFFEE, 2)

        assert empty.is_empty
        assert one.item_count == 2
        assert one is not empty

    def test_adding_same_product_merges_line(self):
        snap = CartSnapshot().add_item(COFFEE, 1).add_item(COFFEE, 2)
        assert len(snap.lines) == 1
        assert snap.find("p1").quantity == 3

    def test_set_quantity_zero_removes_line(self):
        snap = CartSnapshot().add_item(COFFEE).add_item(MUFFIN)
        snap = snap.set_quantity("p1", 0)
        assert snap.find("p1") is None
        assert snap.item_count == 1

    def test_set_quantity_unknown_product_raises(self):
        with pytest.raises(CartError):
            CartSnapshot().set_quantity("missing", 2)

    def test_add_item_rejects_non_positive_quantity(self):
        with pytest.raises(CartError):
            CartSnapshot().add_item(COFFEE, 0)

    def test_customer_attach_and_detach(self):
        snap = CartSnapshot().attach_customer("c1")
        assert snap.customer_id == "c1"
        assert snap.detach_customer().customer_id is None
        assert snap.customer_id == "c1"

    def test_clear_drops_lines_and_customer(self):
        snap = CartSnapshot().add_item(COFFEE).attach_customer("c1").clear()
        assert snap.is_empty
        assert snap.customer_id is None


class TestMoneyMath:

    def test_totals(self):
        snap = CartSnapshot().add_item(COFFEE, 2).add_item(MUFFIN, 3)

        assert subtotal(snap) == Decimal("29.99")
        # 29.99 * 0.08 = 2.3992
        assert tax(snap, Decimal("0.08")) == Decimal("2.40")
        assert total(snap, Decimal("0.08")) == Decimal("32.39")

    def test_tax_rounds_half_up(self):
        dime = CartProduct(id="d", name="Gum", price=Decimal("0.10"), sku="GUM")
        snap = CartSnapshot().add_item(dime)
        # 0.10 * 0.05 = 0.005
        assert tax(snap, Decimal("0.05")) == Decimal("0.01")

    def test_change_may_be_negative(self):
        assert change(Decimal("30"), Decimal("32.39")) == Decimal("-2.39")
        assert change(Decimal("40"), Decimal("32.39")) == Decimal("7.61")

    def test_two_lines_at_eight_percent(self):
        scarf = CartProduct(id="p3", name="Scarf", price=Decimal("5.00"), sku="SCF-1")
        snap = CartSnapshot().add_item(COFFEE, 2).add_item(scarf, 1)

        assert subtotal(snap) == Decimal("25.00")
        assert tax(snap, Decimal("0.08")) == Decimal("2.00")
        assert total(snap, Decimal("0.08")) == Decimal("27.00")
        assert change(Decimal("30"), Decimal("27.00")) == Decimal("3.00")
        assert change(Decimal("20"), Decimal("27.00")) == Decimal("-7.00")

    def test_empty_cart_totals_are_zero(self):
        snap = CartSnapshot()
        assert subtotal(snap) == Decimal("0.00")
        assert total(snap, Decimal("0.08")) == Decimal("0.00")


class TestCartStateMachine:

    def test_status_follows_lines(self):
        cart = Cart(tax_rate=Decimal("0.08"))
        assert cart.status == CartStatus.EMPTY

        cart.add_item(COFFEE)
        assert cart.status == CartStatus.BUILDING

        cart.remove_item("p1")
        assert cart.status == CartStatus.EMPTY

    def test_clear_marks_cleared(self):
        cart = Cart()
        cart.add_item(COFFEE)
        cart.clear()
        assert cart.status == CartStatus.CLEARED
        assert cart.snapshot.is_empty

    def test_derived_values_recomputed_on_read(self):
        cart = Cart(tax_rate=Decimal("0.10"))
        cart.add_item(COFFEE)
        assert cart.total == Decimal("11.00")

        cart.set_quantity("p1", 3)
        assert cart.subtotal == Decimal("30.00")
        assert cart.total == Decimal("33.00")
        assert cart.change(Decimal("50")) == Decimal("17.00")

    def test_complete_snapshots_lines_and_resets(self):
        cart = Cart(tax_rate=Decimal("0.08"), id_factory=lambda: "TXN-1")
        cart.add_item(COFFEE, 2)
        cart.attach_customer("c1")

        sale = cart.complete("cash", Decimal("25"))

        assert sale.transaction_id == "TXN-1"
        assert sale.customer_id == "c1"
        assert sale.subtotal == Decimal("20.00")
        assert sale.tax == Decimal("1.60")
        assert sale.total == Decimal("21.60")
        assert sale.change == Decimal("3.40")
        line = sale.lines[0]
        assert (line.name, line.price, line.sku) == ("Coffee", Decimal("10.00"), "COF-1")
        assert line.total_price == Decimal("20.00")

        assert cart.status == CartStatus.COMPLETED
        assert cart.snapshot.is_empty

    def test_complete_stamps_generated_id_by_default(self):
        cart = Cart()
        cart.add_item(COFFEE)

        first = cart.complete("cash", Decimal("20"))
        cart.add_item(COFFEE)
        second = cart.complete("cash", Decimal("20"))

        assert re.fullmatch(r"[0-9a-f]{24}", first.transaction_id)
        assert first.transaction_id != second.transaction_id

    def test_explicit_transaction_id_wins(self):
        cart = Cart(id_factory=lambda: "unused")
        cart.add_item(COFFEE)
        assert cart.complete("card", Decimal("20"), transaction_id="TXN-9").transaction_id == "TXN-9"

    def test_complete_requires_items(self):
        with pytest.raises(CartError):
            Cart(id_factory=lambda: "X").complete("cash", Decimal("0"))

    def test_complete_rejects_unknown_payment_method(self):
        cart = Cart(id_factory=lambda: "X")
        cart.add_item(COFFEE)
        with pytest.raises(CartError):
            cart.complete("barter", Decimal("100"))
        assert cart.status == CartStatus.BUILDING

    def test_next_add_after_completion_starts_new_sale(self):
        cart = Cart(id_factory=lambda: "X")
        cart.add_item(COFFEE)
        cart.complete("card", Decimal("20"))
        cart.add_item(MUFFIN)
        assert cart.status == CartStatus.BUILDING
        assert cart.snapshot.item_count == 1
