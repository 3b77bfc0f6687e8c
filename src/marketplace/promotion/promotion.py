"""Promotion aggregate: a platform-wide discount with rules and actions.

Rules decide whether a cart qualifies; actions decide what it gets. A
promotion without actions falls back to its own ``type`` and ``value``.
Rule values are JSON so a rule can hold a number or a list of product ids.
"""

import json
from datetime import datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.pricing.clock import as_utc
from marketplace.pricing.promotions import ACTION_TYPES, OPERATORS, RULE_TYPES, TARGET_ORDER_TOTAL


class PromotionType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class PromotionStatus(Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    EXPIRED = "expired"


@marketplace.entity(part_of="Promotion")
class PromotionRule:
    rule_type: String(required=True, choices=tuple(RULE_TYPES))
    operator: String(choices=tuple(OPERATORS), default="gte")
    value: Text()

    @property
    def parsed_value(self):
        if self.value is None:
            return None
        try:
            return json.loads(self.value)
        except (json.JSONDecodeError, TypeError):
            return self.value


@marketplace.entity(part_of="Promotion")
class PromotionAction:
    action_type: String(required=True, choices=tuple(ACTION_TYPES))
    value: Float(default=0.0, min_value=0.0)
    target: String(max_length=50, default=TARGET_ORDER_TOTAL)


@marketplace.aggregate
class Promotion:
    name: String(required=True, max_length=150)
    code: String(max_length=50)
    type: String(choices=PromotionType, default=PromotionType.PERCENTAGE.value)
    value: Float(default=0.0, min_value=0.0)
    priority: Integer(default=0, min_value=0)
    stackable: Boolean(default=False)
    status: String(choices=PromotionStatus, default=PromotionStatus.ACTIVE.value)
    start_at: DateTime()
    end_at: DateTime()
    rules: HasMany(PromotionRule)
    actions: HasMany(PromotionAction)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime()

    @invariant.post
    def window_must_not_end_before_it_starts(self):
        if self.start_at and self.end_at and as_utc(self.start_at) > as_utc(self.end_at):
            raise ValidationError({"end_at": ["Promotion cannot end before it starts"]})

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.type == PromotionType.PERCENTAGE.value and (self.value or 0) > 100:
            raise ValidationError({"value": ["Percentage discount cannot exceed 100"]})

    @classmethod
    def create(
        cls,
        name,
        type=None,
        value=0.0,
        code=None,
        priority=0,
        stackable=False,
        status=None,
        start_at=None,
        end_at=None,
        rules=None,
        actions=None,
    ):
        from marketplace.promotion.events import PromotionCreated

        promotion = cls(
            name=name,
            code=code,
            type=type or PromotionType.PERCENTAGE.value,
            value=value or 0.0,
            priority=priority or 0,
            stackable=bool(stackable),
            status=status or PromotionStatus.ACTIVE.value,
            start_at=start_at,
            end_at=end_at,
        )
        for rule in rules or []:
            promotion.add_rule(rule.get("rule_type"), rule.get("operator"), rule.get("value"))
        for action in actions or []:
            promotion.add_action(action.get("action_type"), action.get("value"), action.get("target"))

        promotion.raise_(
            PromotionCreated(
                promotion_id=promotion.id,
                name=name,
                code=code,
                status=promotion.status,
                priority=promotion.priority,
                stackable=promotion.stackable,
            )
        )
        return promotion

    def update(self, **changes):
        from marketplace.promotion.events import PromotionUpdated

        editable = ("name", "code", "type", "value", "priority", "stackable", "start_at", "end_at")
        provided = {name: changes[name] for name in editable if changes.get(name) is not None}
        if not provided:
            return

        with atomic_change(self):
            for name, value in provided.items():
                setattr(self, name, value)
            self.updated_at = datetime.now()

        self.raise_(PromotionUpdated(promotion_id=self.id, changed_fields=sorted(provided)))

    def change_status(self, status):
        from marketplace.promotion.events import PromotionStatusChanged

        try:
            new_status = PromotionStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown promotion status: {status}"]})

        previous = self.status
        self.status = new_status.value
        self.updated_at = datetime.now()
        self.raise_(
            PromotionStatusChanged(promotion_id=self.id, previous_status=previous, new_status=new_status.value)
        )

    def activate(self):
        self.change_status(PromotionStatus.ACTIVE.value)

    def pause(self):
        self.change_status(PromotionStatus.PAUSED.value)

    # -------------------------------------------------------------------
    # Rules and actions
    # -------------------------------------------------------------------
    def add_rule(self, rule_type, operator="gte", value=None):
        if rule_type not in RULE_TYPES:
            raise ValidationError({"rule_type": [f"Unknown rule type: {rule_type}"]})
        rule = PromotionRule(rule_type=rule_type, operator=operator or "gte", value=json.dumps(value))
        self.add_rules(rule)
        self.updated_at = datetime.now()
        return rule

    def remove_rule(self, rule_id):
        rule = next((r for r in self.rules if str(r.id) == str(rule_id)), None)
        if rule is None:
            raise ValidationError({"rule_id": ["Rule not found on this promotion"]})
        self.remove_rules(rule)
        self.updated_at = datetime.now()

    def add_action(self, action_type, value=0.0, target=None):
        if action_type not in ACTION_TYPES:
            raise ValidationError({"action_type": [f"Unknown action type: {action_type}"]})
        action = PromotionAction(action_type=action_type, value=value or 0.0, target=target or TARGET_ORDER_TOTAL)
        self.add_actions(action)
        self.updated_at = datetime.now()
        return action

    def remove_action(self, action_id):
        action = next((a for a in self.actions if str(a.id) == str(action_id)), None)
        if action is None:
            raise ValidationError({"action_id": ["Action not found on this promotion"]})
        self.remove_actions(action)
        self.updated_at = datetime.now()
