"""Vendor offer management — commands and handler."""

from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, List, String
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.offer.offer import DiscountType, Offer, OfferScope
from marketplace.store.store import Store


@marketplace.command(part_of="Offer")
class CreateOffer:
    store_id: Identifier(required=True)
    name: String(required=True, max_length=150)
    discount_type: String(choices=DiscountType, default=DiscountType.PERCENTAGE.value)
    discount_value: Float(required=True)
    scope_type: String(choices=OfferScope, default=OfferScope.PRODUCTS.value)
    scope_products: List(String(max_length=100))
    scope_categories: List(String(max_length=100))
    scope_variants: List(String(max_length=100))
    start_at: DateTime()
    end_at: DateTime()


@marketplace.command(part_of="Offer")
class UpdateOffer:
    offer_id: Identifier(required=True)
    name: String(max_length=150)
    discount_type: String(choices=DiscountType)
    discount_value: Float()
    scope_type: String(choices=OfferScope)
    scope_products: List(String(max_length=100))
    scope_categories: List(String(max_length=100))
    scope_variants: List(String(max_length=100))
    start_at: DateTime()
    end_at: DateTime()
    is_active: Boolean()


@marketplace.command(part_of="Offer")
class DeleteOffer:
    offer_id: Identifier(required=True)


@marketplace.command_handler(part_of=Offer)
class OfferHandler:
    @handle(CreateOffer)
    def create_offer(self, command):
        # Raises ObjectNotFoundError for an unknown store
        current_domain.repository_for(Store).get(command.store_id)

        offer = Offer.create(
            store_id=command.store_id,
            name=command.name,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            start_at=command.start_at,
            end_at=command.end_at,
            scope_type=command.scope_type,
            scope_products=command.scope_products,
            scope_categories=command.scope_categories,
            scope_variants=command.scope_variants,
        )
        current_domain.repository_for(Offer).add(offer)
        logger.info("offer_created", offer_id=str(offer.id), store_id=str(command.store_id))
        return str(offer.id)

    @handle(UpdateOffer)
    def update_offer(self, command):
        repo = current_domain.repository_for(Offer)
        offer = repo.get(command.offer_id)
        offer.update(
            name=command.name,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            scope_type=command.scope_type,
            # Empty lists mean "leave as is"; scope lists are replaced wholesale
            scope_products=command.scope_products or None,
            scope_categories=command.scope_categories or None,
            scope_variants=command.scope_variants or None,
            start_at=command.start_at,
            end_at=command.end_at,
            is_active=command.is_active,
        )
        repo.add(offer)

    @handle(DeleteOffer)
    def delete_offer(self, command):
        repo = current_domain.repository_for(Offer)
        offer = repo.get(command.offer_id)
        repo._dao.delete(offer)
        logger.info("offer_deleted", offer_id=str(command.offer_id))
