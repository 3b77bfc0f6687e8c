"""Domain events for the Review aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Review")
class ReviewSubmitted:
    """A buyer reviewed a product; flagged reviews start out pending."""

    __version__ = 1

    review_id: Identifier(required=True)
    product_id: Identifier(required=True)
    buyer_id: Identifier(required=True)
    rating: Float(required=True)
    status: String(required=True)
    verified_purchase: Boolean(default=False)
    submitted_at: DateTime(required=True)


@marketplace.event(part_of="Review")
class ReviewStatusChanged:
    __version__ = 1

    review_id: Identifier(required=True)
    product_id: Identifier(required=True)
    previous_status: String(required=True)
    new_status: String(required=True)


@marketplace.event(part_of="Review")
class ReviewVoted:
    __version__ = 1

    review_id: Identifier(required=True)
    voter_id: Identifier(required=True)
    vote: String(required=True)
    helpful_votes: Integer(required=True)
    unhelpful_votes: Integer(required=True)
