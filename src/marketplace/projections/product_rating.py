"""Product rating — approved review count and average per product."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.review.events import ReviewStatusChanged, ReviewSubmitted
from marketplace.review.review import Review, approved_rating_summary


@marketplace.projection
class ProductRating:
    product_id: Identifier(identifier=True, required=True)
    review_count: Integer(default=0)
    average_rating: Float(default=0.0)


@marketplace.projector(projector_for=ProductRating, aggregates=[Review])
class ProductRatingProjector:
    @on(ReviewSubmitted)
    def on_review_submitted(self, event):
        self._recalculate(event.product_id)

    @on(ReviewStatusChanged)
    def on_review_status_changed(self, event):
        self._recalculate(event.product_id)

    def _recalculate(self, product_id):
        repo = current_domain.repository_for(ProductRating)
        try:
            rating = repo.get(product_id)
        except ObjectNotFoundError:
            rating = ProductRating(product_id=product_id)

        rating.review_count, rating.average_rating = approved_rating_summary(product_id)
        repo.add(rating)
