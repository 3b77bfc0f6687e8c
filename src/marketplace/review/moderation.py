"""Review moderation and helpfulness voting — commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.review.review import Review


@marketplace.command(part_of="Review")
class ApproveReview:
    review_id: Identifier(required=True)


@marketplace.command(part_of="Review")
class RejectReview:
    review_id: Identifier(required=True)


@marketplace.command(part_of="Review")
class VoteOnReview:
    review_id: Identifier(required=True)
    voter_id: Identifier(required=True)
    helpful: Boolean(required=True)


@marketplace.command_handler(part_of=Review)
class ReviewModerationHandler:
    @handle(ApproveReview)
    def approve(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.approve()
        repo.add(review)
        logger.info("review_approved", review_id=str(review.id))

    @handle(RejectReview)
    def reject(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.reject()
        repo.add(review)
        logger.info("review_rejected", review_id=str(review.id))

    @handle(VoteOnReview)
    def vote(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.vote(command.voter_id, command.helpful)
        repo.add(review)
        return {"helpful_votes": review.helpful_votes, "unhelpful_votes": review.unhelpful_votes}
