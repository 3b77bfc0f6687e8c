"""Platform promotion engine.

Promotions are evaluated in priority order against a running total. Each
eligible promotion's rules must all pass; its actions (or, without actions,
its own type and value) produce a discount that is capped at what is left
to pay. A non-stackable promotion that applies ends the evaluation.
"""

import operator
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

import structlog

from marketplace.pricing.clock import utc_now, within_window
from marketplace.pricing.models import (
    DiscountResult,
    PricedLine,
    PromotionOutcome,
    PromotionRuleTerms,
    PromotionTerms,
)
from marketplace.pricing.money import ZERO, round_money, to_decimal

logger = structlog.get_logger(__name__)

RULE_MIN_ORDER_VALUE = "min_order_value"
RULE_MIN_QUANTITY = "min_quantity"
RULE_SPECIFIC_PRODUCT = "specific_product"
RULE_CUSTOMER_GROUP = "customer_group"
RULE_TYPES = (RULE_MIN_ORDER_VALUE, RULE_MIN_QUANTITY, RULE_SPECIFIC_PRODUCT, RULE_CUSTOMER_GROUP)

ACTION_PERCENTAGE = "percentage_discount"
ACTION_FIXED = "fixed_amount"
ACTION_FREE_SHIPPING = "free_shipping"
ACTION_TYPES = (ACTION_PERCENTAGE, ACTION_FIXED, ACTION_FREE_SHIPPING)

TARGET_ORDER_TOTAL = "order_total"

OPERATORS = {
    "eq": operator.eq,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}


@dataclass(frozen=True)
class CartContext:
    """What a promotion gets to look at."""

    lines: Sequence[PricedLine]
    total: Decimal
    shipping_cost: Decimal = Decimal("0")
    buyer_id: str | None = None

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)


class PromotionEngine:
    def __init__(self, now: datetime | None = None):
        self.now = now

    def active_promotions(self, promotions: Sequence[PromotionTerms]) -> list[PromotionTerms]:
        """Active promotions inside their window, highest priority first."""
        now = self.now or utc_now()
        live = [
            p for p in promotions if (p.status or "").lower() == "active" and within_window(now, p.start_at, p.end_at)
        ]
        return sorted(live, key=lambda p: -(p.priority or 0))

    def validate_rules(self, rules: Sequence[PromotionRuleTerms], context: CartContext) -> bool:
        # A promotion without rules applies to every cart
        return all(self.evaluate_rule(rule, context) for rule in rules)

    def evaluate_rule(self, rule: PromotionRuleTerms, context: CartContext) -> bool:
        if rule.rule_type == RULE_MIN_ORDER_VALUE:
            return self.compare(context.total, rule.operator, to_decimal(rule.value))
        if rule.rule_type == RULE_MIN_QUANTITY:
            return self.compare(Decimal(context.total_quantity), rule.operator, to_decimal(rule.value))
        if rule.rule_type == RULE_SPECIFIC_PRODUCT:
            wanted = rule.value if isinstance(rule.value, (list, tuple, set)) else [rule.value]
            wanted = {str(v) for v in wanted if v is not None}
            return any(str(line.product_id) in wanted for line in context.lines)
        if rule.rule_type == RULE_CUSTOMER_GROUP:
            # Buyer segments are not modelled; group rules never exclude anyone
            return True
        return False

    @staticmethod
    def compare(actual: Decimal, op: str, target: Decimal) -> bool:
        func = OPERATORS.get((op or "").lower())
        if func is None:
            return False
        return func(actual, target)

    def calculate_discount(self, promotion: PromotionTerms, context: CartContext) -> DiscountResult:
        total = to_decimal(context.total)
        discount = ZERO
        free_shipping = False

        if not promotion.actions:
            kind = (promotion.type or "").lower()
            if kind == "percentage":
                discount = total * to_decimal(promotion.value) / 100
            elif kind == "fixed":
                discount = to_decimal(promotion.value)
        else:
            for action in promotion.actions:
                if action.action_type == ACTION_PERCENTAGE:
                    if (action.target or TARGET_ORDER_TOTAL) == TARGET_ORDER_TOTAL:
                        discount += total * to_decimal(action.value) / 100
                elif action.action_type == ACTION_FIXED:
                    discount += to_decimal(action.value)
                elif action.action_type == ACTION_FREE_SHIPPING:
                    free_shipping = True
                    discount += to_decimal(context.shipping_cost)

        discount = min(discount, total)
        return DiscountResult(
            promotion_id=promotion.promotion_id,
            amount=round_money(discount),
            free_shipping=free_shipping,
            name=promotion.name,
        )

    def apply(self, promotions: Sequence[PromotionTerms], context: CartContext) -> PromotionOutcome:
        original = to_decimal(context.total)
        running = original
        applied = []

        for promotion in self.active_promotions(promotions):
            if not self.validate_rules(promotion.rules, context):
                continue

            result = self.calculate_discount(promotion, replace(context, total=running))
            if result.amount > 0 or result.free_shipping:
                applied.append(result)
                running -= result.amount
                logger.debug(
                    "promotion_applied",
                    promotion_id=result.promotion_id,
                    amount=str(result.amount),
                    free_shipping=result.free_shipping,
                )
                if not promotion.stackable:
                    break

        final_total = max(ZERO, running)
        return PromotionOutcome(
            applied=tuple(applied),
            total_discount=round_money(original - final_total),
            final_total=round_money(final_total),
        )
