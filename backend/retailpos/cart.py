# Overview: Client-side cart state machine and its pure money math.

"""
Cart / Transaction Calculator

A CartSnapshot is immutable: every operation returns a new snapshot, so a UI
can keep history or compare states cheaply. Derived values (subtotal, tax,
total, change) are plain functions of a snapshot and are recomputed on every
read; nothing is cached.

Cart is the only mutable piece: it holds the current snapshot, the tax rate
and the lifecycle status.

    EMPTY --add--> BUILDING --complete--> COMPLETED
                      |  \\--clear-----> CLEARED
                      \\--remove last--> EMPTY

COMPLETED and CLEARED end a sale; the cart itself is reset to an empty
snapshot and the next add starts a new sale (BUILDING).

Money is Decimal, quantized to cents with half-up rounding.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Callable

from .ids import new_object_id
from .money import ZERO, to_money, to_rate
from .time_utils import utcnow

PAYMENT_METHODS = ("cash", "card", "digital")


class CartError(ValueError):
    """Invalid cart operation (unknown line, empty cart, bad quantity)."""


class CartStatus(str, Enum):
    EMPTY = "empty"
    BUILDING = "building"
    COMPLETED = "completed"
    CLEARED = "cleared"


@dataclass(frozen=True)
class CartProduct:
    id: str
    name: str
    price: Decimal
    sku: str

    @classmethod
    def from_model(cls, product) -> "CartProduct":
        return cls(id=product.id, name=product.name, price=to_money(product.price), sku=product.sku)


@dataclass(frozen=True)
class CartLine:
    product: CartProduct
    quantity: int

    @property
    def unit_price(self) -> Decimal:
        return to_money(self.product.price)

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


@dataclass(frozen=True)
class CartSnapshot:
    lines: tuple[CartLine, ...] = ()
    customer_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def find(self, product_id: str) -> CartLine | None:
        for line in self.lines:
            if line.product.id == product_id:
                return line
        return None

    def add_item(self, product: CartProduct, quantity: int = 1) -> "CartSnapshot":
        """Increment an existing line, else append a new one."""
        if quantity < 1:
            raise CartError("Quantity must be at least 1")
        if self.find(product.id) is None:
            return replace(self, lines=self.lines + (CartLine(product, quantity),))
        return replace(self, lines=tuple(
            CartLine(line.product, line.quantity + quantity) if line.product.id == product.id else line
            for line in self.lines
        ))

    def set_quantity(self, product_id: str, quantity: int) -> "CartSnapshot":
        """Replace a line's quantity; zero or below removes the line."""
        if self.find(product_id) is None:
            raise CartError(f"Product {product_id} is not in the cart")
        if quantity <= 0:
            return self.remove_item(product_id)
        return replace(self, lines=tuple(
            CartLine(line.product, quantity) if line.product.id == product_id else line
            for line in self.lines
        ))

    def remove_item(self, product_id: str) -> "CartSnapshot":
        return replace(self, lines=tuple(line for line in self.lines if line.product.id != product_id))

    def attach_customer(self, customer_id: str) -> "CartSnapshot":
        return replace(self, customer_id=customer_id)

    def detach_customer(self) -> "CartSnapshot":
        return replace(self, customer_id=None)

    def clear(self) -> "CartSnapshot":
        return CartSnapshot()


def subtotal(snapshot: CartSnapshot) -> Decimal:
    return to_money(sum((line.line_total for line in snapshot.lines), ZERO))


def tax(snapshot: CartSnapshot, tax_rate) -> Decimal:
    return to_money(subtotal(snapshot) * to_rate(tax_rate))


def total(snapshot: CartSnapshot, tax_rate) -> Decimal:
    return to_money(subtotal(snapshot) + tax(snapshot, tax_rate))


def change(amount_paid, total_due) -> Decimal:
    """Negative change means the payment falls short; callers decide whether that is allowed."""
    return to_money(to_money(amount_paid) - to_money(total_due))


@dataclass(frozen=True)
class LineSnapshot:
    """A sold line frozen at completion time."""
    product_id: str
    name: str
    price: Decimal
    sku: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


@dataclass(frozen=True)
class CompletedSale:
    transaction_id: str
    lines: tuple[LineSnapshot, ...]
    customer_id: str | None
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    payment_method: str
    amount_paid: Decimal
    change: Decimal
    completed_at: datetime = field(default_factory=utcnow)


def snapshot_lines(snapshot: CartSnapshot) -> tuple[LineSnapshot, ...]:
    return tuple(
        LineSnapshot(
            product_id=line.product.id,
            name=line.product.name,
            price=to_money(line.product.price),
            sku=line.product.sku,
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.line_total,
        )
        for line in snapshot.lines
    )


class Cart:
    """State container for one in-progress sale."""

    def __init__(self, tax_rate=Decimal("0.08"), id_factory: Callable[[], str] = new_object_id):
        self.tax_rate = to_rate(tax_rate)
        self.snapshot = CartSnapshot()
        self.status = CartStatus.EMPTY
        self._id_factory = id_factory

    def _apply(self, snapshot: CartSnapshot) -> CartSnapshot:
        self.snapshot = snapshot
        self.status = CartStatus.EMPTY if snapshot.is_empty else CartStatus.BUILDING
        return snapshot

    def add_item(self, product: CartProduct, quantity: int = 1) -> CartSnapshot:
        return self._apply(self.snapshot.add_item(product, quantity))

    def set_quantity(self, product_id: str, quantity: int) -> CartSnapshot:
        return self._apply(self.snapshot.set_quantity(product_id, quantity))

    def remove_item(self, product_id: str) -> CartSnapshot:
        return self._apply(self.snapshot.remove_item(product_id))

    def attach_customer(self, customer_id: str) -> CartSnapshot:
        self.snapshot = self.snapshot.attach_customer(customer_id)
        return self.snapshot

    def detach_customer(self) -> CartSnapshot:
        self.snapshot = self.snapshot.detach_customer()
        return self.snapshot

    def clear(self) -> CartSnapshot:
        self.snapshot = self.snapshot.clear()
        self.status = CartStatus.CLEARED
        return self.snapshot

    @property
    def subtotal(self) -> Decimal:
        return subtotal(self.snapshot)

    @property
    def tax(self) -> Decimal:
        return tax(self.snapshot, self.tax_rate)

    @property
    def total(self) -> Decimal:
        return total(self.snapshot, self.tax_rate)

    def change(self, amount_paid) -> Decimal:
        return change(amount_paid, self.total)

    def complete(self, payment_method: str, amount_paid, transaction_id: str | None = None) -> CompletedSale:
        """
        Freeze the current lines into a CompletedSale and reset to an empty cart.

        The product name/price/SKU captured here never change afterwards.
        Without an explicit transaction_id the cart stamps one from id_factory
        (a fresh object id unless another factory was given).
        """
        if self.snapshot.is_empty:
            raise CartError("Cart is empty")
        if payment_method not in PAYMENT_METHODS:
            raise CartError(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")
        if transaction_id is None:
            transaction_id = self._id_factory()

        paid = to_money(amount_paid)
        sale = CompletedSale(
            transaction_id=transaction_id,
            lines=snapshot_lines(self.snapshot),
            customer_id=self.snapshot.customer_id,
            subtotal=self.subtotal,
            tax=self.tax,
            total=self.total,
            payment_method=payment_method,
            amount_paid=paid,
            change=change(paid, self.total),
        )
        self.snapshot = CartSnapshot()
        self.status = CartStatus.COMPLETED
        return sale
