from typing import List, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_session
from ..domain.errors import InvalidReviewError
from ..infrastructure.repositories import SqlAlchemyReviewRepository
from ..schemas import ReviewCreate, ReviewRead, ReviewSummaryRead
from ..usecases import reviews as review_usecase

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("", response_model=List[ReviewRead])
async def list_reviews(
    sort: Literal["recent", "rating"] = Query(default="recent"),
    ascending: bool = Query(default=False),
    session: AsyncSession = Depends(get_session),
) -> list[ReviewRead]:
    review_repo = SqlAlchemyReviewRepository(session)
    if sort == "rating":
        rows = await review_usecase.list_reviews_by_rating(review_repo, ascending=ascending)
    else:
        rows = await review_usecase.list_reviews(review_repo)
    return [ReviewRead.from_db(review=r) for r in rows]


@router.get("/summary", response_model=ReviewSummaryRead)
async def review_summary(session: AsyncSession = Depends(get_session)) -> ReviewSummaryRead:
    summary = await review_usecase.review_summary(SqlAlchemyReviewRepository(session))
    return ReviewSummaryRead(average=summary.average, count=summary.count, distribution=summary.distribution)


@router.post("", response_model=ReviewRead, status_code=status.HTTP_201_CREATED)
async def create_review(
    payload: ReviewCreate,
    session: AsyncSession = Depends(get_session),
) -> ReviewRead:
    review_repo = SqlAlchemyReviewRepository(session)
    async with session.begin():
        try:
            review = await review_usecase.create_review(
                review_repo,
                customer_name=payload.customer_name,
                rating=payload.rating,
                comment=payload.comment,
            )
        except InvalidReviewError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.problems)
    return ReviewRead.from_db(review=review)
