"""Domain events for the Promotion aggregate."""

from protean.fields import Boolean, Identifier, Integer, List, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Promotion")
class PromotionCreated:
    __version__ = 1

    promotion_id: Identifier(required=True)
    name: String(required=True)
    code: String()
    status: String(required=True)
    priority: Integer()
    stackable: Boolean()


@marketplace.event(part_of="Promotion")
class PromotionUpdated:
    __version__ = 1

    promotion_id: Identifier(required=True)
    changed_fields: List(String())


@marketplace.event(part_of="Promotion")
class PromotionStatusChanged:
    """An admin activated, paused or expired a promotion."""

    __version__ = 1

    promotion_id: Identifier(required=True)
    previous_status: String(required=True)
    new_status: String(required=True)
