"""Domain events for the Offer aggregate."""

from protean.fields import DateTime, Float, Identifier, List, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Offer")
class OfferCreated:
    __version__ = 1

    offer_id: Identifier(required=True)
    store_id: Identifier(required=True)
    name: String(required=True)
    discount_type: String(required=True)
    discount_value: Float(required=True)
    scope_type: String(required=True)
    start_at: DateTime(required=True)
    end_at: DateTime(required=True)


@marketplace.event(part_of="Offer")
class OfferUpdated:
    __version__ = 1

    offer_id: Identifier(required=True)
    store_id: Identifier(required=True)
    changed_fields: List(String())
