"""SKU index — which product a variant SKU belongs to."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.catalogue.events import VariantAdded, VariantRemoved
from marketplace.catalogue.product import Product
from marketplace.domain import marketplace


@marketplace.projection
class SkuIndex:
    sku: String(identifier=True, required=True, max_length=100)
    product_id: Identifier(required=True)


@marketplace.projector(projector_for=SkuIndex, aggregates=[Product])
class SkuIndexProjector:
    @on(VariantAdded)
    def on_variant_added(self, event):
        current_domain.repository_for(SkuIndex).add(SkuIndex(sku=event.sku, product_id=event.product_id))

    @on(VariantRemoved)
    def on_variant_removed(self, event):
        repo = current_domain.repository_for(SkuIndex)
        try:
            entry = repo.get(event.sku)
        except ObjectNotFoundError:
            return
        repo._dao.delete(entry)
