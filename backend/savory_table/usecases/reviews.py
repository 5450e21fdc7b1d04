from dataclasses import dataclass
from datetime import date
from typing import Dict, List

from ..domain.repositories import ReviewRepository
from ..domain.services import validate_review_fields
from ..models import Review


@dataclass(frozen=True)
class ReviewSummary:
    average: float
    count: int
    distribution: Dict[int, int]


async def create_review(
    review_repo: ReviewRepository,
    *,
    customer_name: str,
    rating: int,
    comment: str,
    today: date | None = None,
) -> Review:
    validate_review_fields(customer_name=customer_name, rating=rating, comment=comment)
    return await review_repo.create(
        customer_name=customer_name.strip(),
        rating=rating,
        comment=comment.strip(),
        review_date=today or date.today(),
        verified=False,
    )


async def list_reviews(review_repo: ReviewRepository) -> List[Review]:
    """Newest first."""
    reviews = await review_repo.list_all()
    return sorted(reviews, key=lambda r: r.review_date, reverse=True)


async def list_reviews_by_rating(review_repo: ReviewRepository, *, ascending: bool = False) -> List[Review]:
    reviews = await review_repo.list_all()
    return sorted(reviews, key=lambda r: r.rating, reverse=not ascending)


async def review_summary(review_repo: ReviewRepository) -> ReviewSummary:
    reviews = await review_repo.list_all()
    distribution = {rating: 0 for rating in range(1, 6)}
    for review in reviews:
        distribution[review.rating] += 1
    if not reviews:
        return ReviewSummary(average=0.0, count=0, distribution=distribution)
    average = round(sum(r.rating for r in reviews) / len(reviews), 1)
    return ReviewSummary(average=average, count=len(reviews), distribution=distribution)
