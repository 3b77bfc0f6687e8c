"""Review aggregate: a buyer's rating and comment on a product."""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Dict, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace

MIN_COMMENT_LENGTH = 20
MAX_COMMENT_LENGTH = 500

# Comments mentioning any of these wait for moderation
FLAGGED_WORDS = ("spam", "fake", "scam")


class ReviewStatus(Enum):
    APPROVED = "approved"
    PENDING = "pending"
    REJECTED = "rejected"


class Vote(Enum):
    HELPFUL = "up"
    UNHELPFUL = "down"


def needs_moderation(comment) -> bool:
    lowered = (comment or "").lower()
    return any(word in lowered for word in FLAGGED_WORDS)


@marketplace.aggregate
class Review:
    product_id: Identifier(required=True)
    buyer_id: Identifier(required=True)
    rating: Float(required=True)
    comment: Text(required=True)
    verified_purchase: Boolean(default=False)
    status: String(choices=ReviewStatus, default=ReviewStatus.APPROVED.value)
    helpful_votes: Integer(default=0)
    unhelpful_votes: Integer(default=0)
    voters: Dict()
    created_at: DateTime(default=datetime.now)

    @invariant.post
    def rating_must_be_a_half_step_between_half_and_five(self):
        rating = self.rating
        if rating is None or rating < 0.5 or rating > 5 or round(rating * 2) / 2 != rating:
            raise ValidationError({"rating": ["Rating must be between 0.5 and 5 in steps of 0.5"]})

    @invariant.post
    def comment_length_must_be_reasonable(self):
        length = len((self.comment or "").strip())
        if length < MIN_COMMENT_LENGTH or length > MAX_COMMENT_LENGTH:
            raise ValidationError(
                {"comment": [f"Review must be {MIN_COMMENT_LENGTH}-{MAX_COMMENT_LENGTH} characters"]}
            )

    @classmethod
    def submit(cls, product_id, buyer_id, rating, comment, verified_purchase=False):
        from marketplace.review.events import ReviewSubmitted

        comment = (comment or "").strip()
        status = ReviewStatus.PENDING if needs_moderation(comment) else ReviewStatus.APPROVED
        now = datetime.now()
        review = cls(
            product_id=product_id,
            buyer_id=buyer_id,
            rating=rating,
            comment=comment,
            verified_purchase=verified_purchase,
            status=status.value,
            created_at=now,
        )
        review.raise_(
            ReviewSubmitted(
                review_id=review.id,
                product_id=product_id,
                buyer_id=buyer_id,
                rating=rating,
                status=status.value,
                verified_purchase=verified_purchase,
                submitted_at=now,
            )
        )
        return review

    def _set_status(self, status):
        from marketplace.review.events import ReviewStatusChanged

        if self.status == status.value:
            raise ValidationError({"status": [f"Review is already {status.value}"]})

        previous = self.status
        self.status = status.value
        self.raise_(
            ReviewStatusChanged(
                review_id=self.id,
                product_id=self.product_id,
                previous_status=previous,
                new_status=status.value,
            )
        )

    def approve(self):
        self._set_status(ReviewStatus.APPROVED)

    def reject(self):
        self._set_status(ReviewStatus.REJECTED)

    def vote(self, voter_id, helpful):
        """Record or change a voter's helpfulness vote; repeating a vote changes nothing."""
        from marketplace.review.events import ReviewVoted

        if str(voter_id) == str(self.buyer_id):
            raise ValidationError({"voter_id": ["You cannot vote on your own review"]})

        value = Vote.HELPFUL.value if helpful else Vote.UNHELPFUL.value
        voters = dict(self.voters or {})
        previous = voters.get(str(voter_id))
        if previous == value:
            return

        helpful_votes, unhelpful_votes = self.helpful_votes or 0, self.unhelpful_votes or 0
        if previous == Vote.HELPFUL.value:
            helpful_votes -= 1
        elif previous == Vote.UNHELPFUL.value:
            unhelpful_votes -= 1
        if value == Vote.HELPFUL.value:
            helpful_votes += 1
        else:
            unhelpful_votes += 1

        voters[str(voter_id)] = value
        self.voters = voters
        self.helpful_votes = helpful_votes
        self.unhelpful_votes = unhelpful_votes
        self.raise_(
            ReviewVoted(
                review_id=self.id,
                voter_id=voter_id,
                vote=value,
                helpful_votes=helpful_votes,
                unhelpful_votes=unhelpful_votes,
            )
        )


def approved_rating_summary(product_id):
    """(count, average rounded to 1 dp) over a product's approved reviews."""
    reviews = (
        current_domain.repository_for(Review)
        ._dao.query.filter(product_id=str(product_id), status=ReviewStatus.APPROVED.value)
        .limit(None)
        .all()
        .items
    )
    if not reviews:
        return 0, 0.0

    average = Decimal(str(sum(r.rating for r in reviews))) / len(reviews)
    return len(reviews), float(average.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
