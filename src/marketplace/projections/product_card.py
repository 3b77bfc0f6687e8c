"""Product card — the listing and search projection."""

from protean.core.projector import on
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.catalogue.events import (
    ProductAvailabilityChanged,
    ProductDetailsUpdated,
    ProductListed,
    StockChanged,
)
from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.review.events import ReviewStatusChanged, ReviewSubmitted
from marketplace.review.review import Review, approved_rating_summary


@marketplace.projection
class ProductCard:
    product_id: Identifier(identifier=True, required=True)
    store_id: Identifier(required=True)
    title: String(required=True)
    price: Float(required=True)
    stock: Integer(default=0)
    district: String()
    gi_brand: String()
    category_id: Identifier()
    image_url: String(max_length=500)
    status: String(required=True)
    is_active: Boolean(default=True)
    effective_rating: Float(default=0.0)
    review_count: Integer(default=0)
    listed_at: DateTime()


@marketplace.projector(projector_for=ProductCard, aggregates=[Product, Review])
class ProductCardProjector:
    @on(ProductListed)
    def on_product_listed(self, event):
        current_domain.repository_for(ProductCard).add(
            ProductCard(
                product_id=event.product_id,
                store_id=event.store_id,
                title=event.title,
                price=event.price,
                stock=event.stock or 0,
                district=event.district,
                gi_brand=event.gi_brand,
                category_id=event.category_id,
                image_url=event.image_url,
                status=event.status,
                is_active=event.is_active,
                listed_at=event.listed_at,
            )
        )

    @on(ProductDetailsUpdated)
    def on_details_updated(self, event):
        repo = current_domain.repository_for(ProductCard)
        card = repo.get(event.product_id)
        card.title = event.title
        card.price = event.price
        card.district = event.district
        card.gi_brand = event.gi_brand
        card.category_id = event.category_id
        card.image_url = event.image_url
        repo.add(card)

    @on(StockChanged)
    def on_stock_changed(self, event):
        repo = current_domain.repository_for(ProductCard)
        card = repo.get(event.product_id)
        card.stock = event.stock or 0
        repo.add(card)

    @on(ProductAvailabilityChanged)
    def on_availability_changed(self, event):
        repo = current_domain.repository_for(ProductCard)
        card = repo.get(event.product_id)
        card.status = event.status
        card.is_active = event.is_active
        repo.add(card)

    @on(ReviewSubmitted)
    def on_review_submitted(self, event):
        self._refresh_rating(event.product_id)

    @on(ReviewStatusChanged)
    def on_review_status_changed(self, event):
        self._refresh_rating(event.product_id)

    def _refresh_rating(self, product_id):
        repo = current_domain.repository_for(ProductCard)
        card = repo.get(product_id)
        count, average = approved_rating_summary(product_id)
        card.review_count = count
        card.effective_rating = average
        repo.add(card)
