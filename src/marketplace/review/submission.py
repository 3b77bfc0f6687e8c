"""SubmitReview — a buyer reviews a product.

One review per buyer per product is enforced here with a repository query.
The PurchasedProducts projection decides whether the review is marked as a
verified purchase.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import logger, marketplace
from marketplace.projections.purchased_products import has_purchased
from marketplace.review.review import Review


@marketplace.command(part_of="Review")
class SubmitReview:
    product_id: Identifier(required=True)
    buyer_id: Identifier(required=True)
    rating: Float(required=True)
    comment: Text(required=True)


@marketplace.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        # Raises ObjectNotFoundError for an unknown product
        current_domain.repository_for(Product).get(command.product_id)

        repo = current_domain.repository_for(Review)
        existing = repo._dao.query.filter(
            buyer_id=str(command.buyer_id),
            product_id=str(command.product_id),
        ).all()
        if existing.items:
            raise ValidationError({"review": ["You have already reviewed this product"]})

        review = Review.submit(
            product_id=command.product_id,
            buyer_id=command.buyer_id,
            rating=command.rating,
            comment=command.comment,
            verified_purchase=has_purchased(command.buyer_id, command.product_id),
        )
        repo.add(review)
        logger.info(
            "review_submitted",
            review_id=str(review.id),
            product_id=str(command.product_id),
            status=review.status,
        )
        return str(review.id)
