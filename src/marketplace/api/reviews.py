"""Review endpoints."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from marketplace.api.access import Actor, current_actor, forbidden, require_admin
from marketplace.api.schemas import (
    IdResponse,
    ReviewListResponse,
    ReviewResponse,
    StatusResponse,
    SubmitReviewRequest,
    VoteRequest,
    VoteResponse,
)
from marketplace.review.moderation import ApproveReview, RejectReview, VoteOnReview
from marketplace.review.review import Review, ReviewStatus, approved_rating_summary
from marketplace.review.submission import SubmitReview

router = APIRouter(tags=["reviews"])


def review_response(review) -> ReviewResponse:
    return ReviewResponse(
        review_id=str(review.id),
        product_id=str(review.product_id),
        buyer_id=str(review.buyer_id),
        rating=review.rating,
        comment=review.comment,
        verified_purchase=bool(review.verified_purchase),
        status=review.status,
        helpful_votes=review.helpful_votes or 0,
        unhelpful_votes=review.unhelpful_votes or 0,
        created_at=review.created_at,
    )


REVIEW_SORT_KEYS = {
    "highest": lambda review: review.rating or 0,
    "helpful": lambda review: (review.helpful_votes or 0) - (review.unhelpful_votes or 0),
}


@router.get("/products/{product_id}/reviews", response_model=ReviewListResponse)
async def list_reviews(
    product_id: str,
    sort: str = Query("newest", pattern="^(newest|highest|helpful)$"),
    actor: Actor = Depends(current_actor),
) -> ReviewListResponse:
    query = current_domain.repository_for(Review)._dao.query.filter(product_id=product_id)
    if not actor.is_admin:
        query = query.filter(status=ReviewStatus.APPROVED.value)
    reviews = query.order_by("-created_at").limit(None).all().items
    if sort in REVIEW_SORT_KEYS:
        # Stable sort keeps newer reviews first among equals
        reviews = sorted(reviews, key=REVIEW_SORT_KEYS[sort], reverse=True)
    review_count, average_rating = approved_rating_summary(product_id)
    return ReviewListResponse(
        product_id=product_id,
        reviews=[review_response(r) for r in reviews],
        review_count=review_count,
        average_rating=average_rating,
    )


@router.post("/products/{product_id}/reviews", status_code=201, response_model=IdResponse)
async def submit_review(
    product_id: str, body: SubmitReviewRequest, actor: Actor = Depends(current_actor)
) -> IdResponse:
    if actor.id is None:
        raise forbidden("Sign in to review a product")
    command = SubmitReview(product_id=product_id, buyer_id=actor.id, rating=body.rating, comment=body.comment)
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@router.post("/reviews/{review_id}/vote", response_model=VoteResponse)
async def vote_on_review(review_id: str, body: VoteRequest, actor: Actor = Depends(current_actor)) -> VoteResponse:
    if actor.id is None:
        raise forbidden("Sign in to vote")
    counts = current_domain.process(
        VoteOnReview(review_id=review_id, voter_id=actor.id, helpful=body.helpful),
        asynchronous=False,
    )
    return VoteResponse(**counts)


@router.post("/admin/reviews/{review_id}/approve", response_model=StatusResponse)
async def approve_review(review_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_admin(actor)
    current_domain.process(ApproveReview(review_id=review_id), asynchronous=False)
    return StatusResponse()


@router.post("/admin/reviews/{review_id}/reject", response_model=StatusResponse)
async def reject_review(review_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_admin(actor)
    current_domain.process(RejectReview(review_id=review_id), asynchronous=False)
    return StatusResponse()
