"""Store management — commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, List, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.store.store import Store, StoreStatus


@marketplace.command(part_of="Store")
class OpenStore:
    vendor_id: Identifier(required=True)
    name: String(required=True, max_length=150)
    district: String(required=True, max_length=100)
    gi_brands: List(String(max_length=100))
    description: Text()
    logo_url: String(max_length=500)


@marketplace.command(part_of="Store")
class UpdateStore:
    store_id: Identifier(required=True)
    name: String(max_length=150)
    description: Text()
    logo_url: String(max_length=500)
    district: String(max_length=100)
    gi_brands: List(String(max_length=100))


@marketplace.command(part_of="Store")
class ChangeStoreStatus:
    store_id: Identifier(required=True)
    status: String(required=True, choices=StoreStatus)
    reason: String(max_length=500)


@marketplace.command(part_of="Store")
class SetStoreCod:
    store_id: Identifier(required=True)
    enabled: Boolean(required=True)


@marketplace.command_handler(part_of=Store)
class StoreHandler:
    @handle(OpenStore)
    def open_store(self, command):
        store = Store.open(
            vendor_id=command.vendor_id,
            name=command.name,
            district=command.district,
            gi_brands=command.gi_brands,
            description=command.description,
            logo_url=command.logo_url,
        )
        current_domain.repository_for(Store).add(store)
        logger.info("store_opened", store_id=str(store.id), vendor_id=str(command.vendor_id))
        return str(store.id)

    @handle(UpdateStore)
    def update_store(self, command):
        repo = current_domain.repository_for(Store)
        store = repo.get(command.store_id)
        store.update_details(
            name=command.name,
            description=command.description,
            logo_url=command.logo_url,
            district=command.district,
            gi_brands=command.gi_brands,
        )
        repo.add(store)

    @handle(ChangeStoreStatus)
    def change_status(self, command):
        repo = current_domain.repository_for(Store)
        store = repo.get(command.store_id)
        store.change_status(command.status, reason=command.reason)
        repo.add(store)
        logger.info("store_status_changed", store_id=str(store.id), status=store.status)

    @handle(SetStoreCod)
    def set_cod(self, command):
        repo = current_domain.repository_for(Store)
        store = repo.get(command.store_id)
        store.set_cod(command.enabled)
        repo.add(store)
