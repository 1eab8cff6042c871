import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import CallerIdentity, get_current_identity
from app.database import get_user_db
from app.schemas.recommendation import (
    RecommendationHistoryEntry,
    RecommendationHistoryResponse,
    UserRecommendationSet,
    UserRecommendationsResponse,
)
from app.services.recommendation_linkage import (
    get_latest_user_recommendations,
    get_user_recommendation_history,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.get("/user", response_model=UserRecommendationsResponse)
async def get_user_recommendations(
    identity: CallerIdentity = Depends(get_current_identity),
    user_db: Session = Depends(get_user_db),
):
    """Latest stored recommendations for the caller, or empty lists."""
    record = get_latest_user_recommendations(user_db, identity.user_id)
    if record is None:
        return UserRecommendationsResponse(recommendations=UserRecommendationSet())

    return UserRecommendationsResponse(
        recommendations=UserRecommendationSet(
            services=record.services or [],
            products=record.products or [],
            podcasts=record.podcasts or [],
        ),
        created_at=record.created_at,
    )


@router.get("/user/history", response_model=RecommendationHistoryResponse)
async def get_user_recommendation_history_endpoint(
    identity: CallerIdentity = Depends(get_current_identity),
    user_db: Session = Depends(get_user_db),
):
    """The caller's last 10 recommendation records, newest first."""
    records = get_user_recommendation_history(user_db, identity.user_id)
    return RecommendationHistoryResponse(
        history=[
            RecommendationHistoryEntry(
                id=record.id,
                created_at=record.created_at,
                services_count=len(record.services or []),
                products_count=len(record.products or []),
                podcasts_count=len(record.podcasts or []),
            )
            for record in records
        ]
    )
