"""Domain events for the Store aggregate."""

from protean.fields import Boolean, DateTime, Identifier, List, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Store")
class StoreOpened:
    """A vendor opened a store; it awaits admin approval."""

    __version__ = 1

    store_id: Identifier(required=True)
    vendor_id: Identifier(required=True)
    name: String(required=True)
    district: String(required=True)
    gi_brands: List(String())
    status: String(required=True)
    opened_at: DateTime(required=True)


@marketplace.event(part_of="Store")
class StoreDetailsUpdated:
    __version__ = 1

    store_id: Identifier(required=True)
    name: String(required=True)
    district: String(required=True)
    gi_brands: List(String())


@marketplace.event(part_of="Store")
class StoreStatusChanged:
    """An admin approved, rejected or suspended a store."""

    __version__ = 1

    store_id: Identifier(required=True)
    previous_status: String(required=True)
    new_status: String(required=True)
    reason: String()
    changed_at: DateTime(required=True)


@marketplace.event(part_of="Store")
class StoreCodToggled:
    __version__ = 1

    store_id: Identifier(required=True)
    cod_enabled: Boolean(required=True)
