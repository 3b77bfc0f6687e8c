"""Promotion management — commands and handler."""

import json

from protean import handle
from protean.fields import Boolean, DateTime, Dict, Float, Identifier, Integer, List, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.promotion.promotion import Promotion, PromotionStatus, PromotionType


@marketplace.command(part_of="Promotion")
class CreatePromotion:
    name: String(required=True, max_length=150)
    code: String(max_length=50)
    type: String(choices=PromotionType, default=PromotionType.PERCENTAGE.value)
    value: Float(default=0.0)
    priority: Integer(default=0)
    stackable: Boolean(default=False)
    status: String(choices=PromotionStatus)
    start_at: DateTime()
    end_at: DateTime()
    rules: List(Dict())
    actions: List(Dict())


@marketplace.command(part_of="Promotion")
class UpdatePromotion:
    promotion_id: Identifier(required=True)
    name: String(max_length=150)
    code: String(max_length=50)
    type: String(choices=PromotionType)
    value: Float()
    priority: Integer()
    stackable: Boolean()
    start_at: DateTime()
    end_at: DateTime()


@marketplace.command(part_of="Promotion")
class ChangePromotionStatus:
    promotion_id: Identifier(required=True)
    status: String(required=True, choices=PromotionStatus)


@marketplace.command(part_of="Promotion")
class ActivatePromotion:
    promotion_id: Identifier(required=True)


@marketplace.command(part_of="Promotion")
class PausePromotion:
    promotion_id: Identifier(required=True)


@marketplace.command(part_of="Promotion")
class AddPromotionRule:
    promotion_id: Identifier(required=True)
    rule_type: String(required=True, max_length=50)
    operator: String(max_length=5, default="gte")
    value: Text()  # JSON


@marketplace.command(part_of="Promotion")
class RemovePromotionRule:
    promotion_id: Identifier(required=True)
    rule_id: Identifier(required=True)


@marketplace.command(part_of="Promotion")
class AddPromotionAction:
    promotion_id: Identifier(required=True)
    action_type: String(required=True, max_length=50)
    value: Float(default=0.0)
    target: String(max_length=50)


@marketplace.command(part_of="Promotion")
class RemovePromotionAction:
    promotion_id: Identifier(required=True)
    action_id: Identifier(required=True)


@marketplace.command_handler(part_of=Promotion)
class PromotionHandler:
    @handle(CreatePromotion)
    def create_promotion(self, command):
        promotion = Promotion.create(
            name=command.name,
            type=command.type,
            value=command.value,
            code=command.code,
            priority=command.priority,
            stackable=command.stackable,
            status=command.status,
            start_at=command.start_at,
            end_at=command.end_at,
            rules=command.rules,
            actions=command.actions,
        )
        current_domain.repository_for(Promotion).add(promotion)
        logger.info("promotion_created", promotion_id=str(promotion.id), status=promotion.status)
        return str(promotion.id)

    @handle(UpdatePromotion)
    def update_promotion(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        promotion.update(
            name=command.name,
            code=command.code,
            type=command.type,
            value=command.value,
            priority=command.priority,
            stackable=command.stackable,
            start_at=command.start_at,
            end_at=command.end_at,
        )
        repo.add(promotion)

    @handle(ChangePromotionStatus)
    def change_status(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        promotion.change_status(command.status)
        repo.add(promotion)

    @handle(ActivatePromotion)
    def activate(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        promotion.activate()
        repo.add(promotion)

    @handle(PausePromotion)
    def pause(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        promotion.pause()
        repo.add(promotion)

    @handle(AddPromotionRule)
    def add_rule(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        value = json.loads(command.value) if command.value else None
        rule = promotion.add_rule(command.rule_type, command.operator, value)
        repo.add(promotion)
        return str(rule.id)

    @handle(RemovePromotionRule)
    def remove_rule(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        promotion.remove_rule(command.rule_id)
        repo.add(promotion)

    @handle(AddPromotionAction)
    def add_action(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        action = promotion.add_action(command.action_type, command.value, command.target)
        repo.add(promotion)
        return str(action.id)

    @handle(RemovePromotionAction)
    def remove_action(self, command):
        repo = current_domain.repository_for(Promotion)
        promotion = repo.get(command.promotion_id)
        promotion.remove_action(command.action_id)
        repo.add(promotion)
