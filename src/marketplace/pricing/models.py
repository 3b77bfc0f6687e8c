"""Inputs and results of the pricing engine.

The engine never touches repositories: checkout translates catalogue and
configuration records into these frozen dataclasses first, which keeps every
calculation reproducible from plain values in tests.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from marketplace.pricing.money import ZERO, to_decimal


@dataclass(frozen=True)
class PricedLine:
    """One cart or order line after the unit price has been resolved."""

    product_id: str
    quantity: int
    unit_price: Decimal
    base_price: Decimal | None = None
    store_id: str | None = None
    variant_sku: str | None = None
    category_id: str | None = None
    offer_id: str | None = None
    tax_exempt: bool = False
    variant_tax_rate: Decimal | None = None
    weight_kg: Decimal | None = None
    length_cm: Decimal | None = None
    width_cm: Decimal | None = None
    height_cm: Decimal | None = None

    def __post_init__(self):
        if self.quantity is None or self.quantity < 0:
            raise ValueError(f"Quantity must be zero or more for product {self.product_id}")

    @property
    def line_total(self) -> Decimal:
        return to_decimal(self.unit_price) * self.quantity

    @property
    def savings(self) -> Decimal:
        """Amount knocked off by a vendor offer across the whole line."""
        if self.base_price is None:
            return ZERO
        return (to_decimal(self.base_price) - to_decimal(self.unit_price)) * self.quantity


@dataclass(frozen=True)
class TaxRate:
    rate: Decimal
    category: str | None = None
    province: str | None = None
    exempt: bool = False
    enabled: bool = True
    priority: int = 0
    name: str | None = None


@dataclass(frozen=True)
class TaxLine:
    product_id: str
    rate: Decimal
    tax: Decimal


@dataclass(frozen=True)
class TaxResult:
    amount: Decimal
    breakdown: tuple[TaxLine, ...] = ()


@dataclass(frozen=True)
class ShippingRate:
    """A weight band for one carrier, method and zone."""

    carrier: str = "internal"
    method: str = "standard"
    zone: str = "PK"
    min_weight_kg: Decimal = Decimal("0")
    max_weight_kg: Decimal = Decimal("999")
    base_rate: Decimal = Decimal("0")
    per_kg_rate: Decimal = Decimal("0")
    surcharge: Decimal = Decimal("0")
    dimensional_factor: Decimal | None = None
    enabled: bool = True
    priority: int = 0
    name: str | None = None


@dataclass(frozen=True)
class ShippingLine:
    product_id: str
    weight_kg: Decimal


@dataclass(frozen=True)
class ShippingQuote:
    amount: Decimal
    carrier: str
    method: str
    total_weight_kg: Decimal = Decimal("0")
    breakdown: tuple[ShippingLine, ...] = ()


@dataclass(frozen=True)
class OfferTerms:
    """A store's time-boxed discount, scoped to all, some products, categories or variants."""

    offer_id: str
    discount_type: str
    discount_value: Decimal
    scope_type: str = "products"
    scope_products: tuple[str, ...] = ()
    scope_categories: tuple[str, ...] = ()
    scope_variants: tuple[str, ...] = ()
    start_at: datetime | None = None
    end_at: datetime | None = None
    is_active: bool = True


@dataclass(frozen=True)
class OfferPrice:
    price: Decimal
    base_price: Decimal
    offer_id: str | None = None


@dataclass(frozen=True)
class PromotionRuleTerms:
    rule_type: str
    operator: str = "gte"
    value: object = None


@dataclass(frozen=True)
class PromotionActionTerms:
    action_type: str
    value: Decimal = Decimal("0")
    target: str = "order_total"


@dataclass(frozen=True)
class PromotionTerms:
    promotion_id: str
    name: str = ""
    type: str | None = None
    value: Decimal = Decimal("0")
    priority: int = 0
    stackable: bool = False
    status: str = "active"
    start_at: datetime | None = None
    end_at: datetime | None = None
    rules: tuple[PromotionRuleTerms, ...] = ()
    actions: tuple[PromotionActionTerms, ...] = ()


@dataclass(frozen=True)
class DiscountResult:
    promotion_id: str
    amount: Decimal
    free_shipping: bool = False
    name: str = ""


@dataclass(frozen=True)
class PromotionOutcome:
    applied: tuple[DiscountResult, ...] = field(default_factory=tuple)
    total_discount: Decimal = Decimal("0")
    final_total: Decimal = Decimal("0")

    @property
    def free_shipping(self) -> bool:
        return any(result.free_shipping for result in self.applied)
