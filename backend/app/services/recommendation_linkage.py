"""
Linking quiz recommendations to a signed-in user.

This runs after the anonymous session is saved and is strictly best effort:
a failure here is logged and reported through the returned outcome, never
raised, so the quiz submission itself still succeeds.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models import UserRecommendation
from app.schemas.quiz import RecommendationBundle
from app.schemas.recommendation import (
    StoredServiceRecommendation,
    StoredProductRecommendation,
    StoredPodcastRecommendation,
    UserRecommendationSet,
)

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10


@dataclass
class LinkageOutcome:
    stored: bool
    record_id: Optional[UUID] = None
    error: Optional[str] = None


def to_user_recommendation_set(bundle: RecommendationBundle) -> UserRecommendationSet:
    """Project a bundle onto the user-side shape with string catalog ids."""
    return UserRecommendationSet(
        services=[
            StoredServiceRecommendation(
                service_id=str(service.id),
                name=service.name,
                price=service.price,
                description=service.description,
                practitioner_type=service.practitioner_type,
                image=service.image,
            )
            for service in bundle.services
        ],
        products=[
            StoredProductRecommendation(
                product_id=str(product.id),
                name=product.name,
                price=product.price,
                description=product.description,
                image=product.image,
            )
            for product in bundle.products
        ],
        podcasts=[
            StoredPodcastRecommendation(
                podcast_id=str(podcast.id) if podcast.id else "unknown",
                title=podcast.title,
                episode=podcast.episode,
                description=podcast.description,
                link=podcast.link,
                image=podcast.image,
            )
            for podcast in bundle.podcasts
        ],
    )


def append_user_recommendation_record(
    user_db: Session,
    user_id: str,
    bundle: RecommendationBundle,
) -> UserRecommendation:
    """Append a new recommendation record for ``user_id``. Raises on failure."""
    if not user_id or not str(user_id).strip():
        raise ValueError("user_id is required to store recommendations")

    stored = to_user_recommendation_set(bundle).model_dump(mode="json")
    record = UserRecommendation(
        user_id=str(user_id),
        services=stored["services"],
        products=stored["products"],
        podcasts=stored["podcasts"],
    )
    user_db.add(record)
    user_db.commit()
    user_db.refresh(record)
    return record


def store_user_recommendations_best_effort(
    user_db: Session,
    user_id: str,
    bundle: RecommendationBundle,
) -> LinkageOutcome:
    """
    Attempt to store recommendations for ``user_id``.

    Never raises: any failure rolls back the user database session, is logged
    as a warning, and comes back as ``LinkageOutcome(stored=False)``.
    """
    try:
        record = append_user_recommendation_record(user_db, user_id, bundle)
        logger.info(
            "Stored recommendations for user %s (record=%s, services=%d, products=%d, podcasts=%d)",
            user_id,
            record.id,
            len(bundle.services),
            len(bundle.products),
            len(bundle.podcasts),
        )
        return LinkageOutcome(stored=True, record_id=record.id)
    except Exception as e:
        user_db.rollback()
        logger.warning(
            "Failed to store recommendations: user_id=%s, error=%s",
            user_id,
            str(e),
            exc_info=True,
        )
        return LinkageOutcome(stored=False, error=f"{type(e).__name__}: {e}")


def get_latest_user_recommendations(user_db: Session, user_id: str) -> Optional[UserRecommendation]:
    return (
        user_db.query(UserRecommendation)
        .filter(UserRecommendation.user_id == str(user_id))
        .order_by(UserRecommendation.created_at.desc())
        .first()
    )


def get_user_recommendation_history(
    user_db: Session,
    user_id: str,
    limit: int = HISTORY_LIMIT,
) -> List[UserRecommendation]:
    return (
        user_db.query(UserRecommendation)
        .filter(UserRecommendation.user_id == str(user_id))
        .order_by(UserRecommendation.created_at.desc())
        .limit(limit)
        .all()
    )
