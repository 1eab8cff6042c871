"""
Quiz submission pipeline.

normalize -> derive insights -> resolve recommendations -> persist anonymous
session -> (optionally) link recommendations to the signed-in user.
"""
import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.quiz import (
    DeviceInfo,
    NonprofitEligibility,
    QuizAnalytics,
    QuizResults,
    QuizSubmission,
    StoredQuizResults,
    RecommendationBundle,
    WellnessInsights,
)
from app.services.catalog import ServiceCatalog, ProductCatalog, PodcastCatalog
from app.services.quiz_insights import (
    build_wellness_insights,
    calculate_astrology,
    calculate_human_design,
)
from app.services.quiz_normalizer import normalize_quiz
from app.services.quiz_session_store import QuizSessionStore
from app.services.recommendation_engine import RecommendationResolver
from app.services.recommendation_linkage import store_user_recommendations_best_effort
from app.utils.timing import now_ms, debug_elapsed

logger = logging.getLogger(__name__)

NONPROFIT_MESSAGE = (
    "You may qualify for free or subsidized wellness services. Apply now to learn more."
)


@dataclass
class QuizSessionResult:
    session_id: str
    results: QuizResults


@dataclass
class QuizSubmissionResult:
    session_id: str
    results: QuizResults
    recommendations_stored: bool


@dataclass
class StoredSession:
    session_id: str
    timestamp: datetime
    results: StoredQuizResults


def build_nonprofit_eligibility(answer: Optional[str]) -> NonprofitEligibility:
    return NonprofitEligibility(
        eligible=(answer or "").strip().lower() == "yes",
        apply_url=settings.NONPROFIT_APPLY_URL,
        message=NONPROFIT_MESSAGE,
    )


class QuizService:
    def __init__(
        self,
        resolver: RecommendationResolver,
        session_store: QuizSessionStore,
        user_db: Optional[Session] = None,
        rng: Optional[random.Random] = None,
    ):
        self.resolver = resolver
        self.session_store = session_store
        self.user_db = user_db
        self.rng = rng

    def create_session(self, quiz: QuizSubmission, device_info: DeviceInfo) -> QuizSessionResult:
        t0 = now_ms()
        normalized = normalize_quiz(quiz)
        insights = build_wellness_insights(quiz)
        astrology = calculate_astrology(quiz.date_of_birth, quiz.birth_time)
        human_design = calculate_human_design(
            quiz.energy_type,
            quiz.calculate_energy_type,
            quiz.date_of_birth,
            quiz.birth_time,
            rng=self.rng,
        )
        t1 = debug_elapsed(t0, "quiz derive", logger.debug)

        # Empty catalogs raise here, before anything is persisted
        bundle = self.resolver.resolve(quiz, normalized)
        t2 = debug_elapsed(t1, "quiz resolve", logger.debug)

        record = self.session_store.insert_session(quiz, normalized, bundle, insights, device_info)
        debug_elapsed(t2, "quiz persist", logger.debug)

        logger.info(
            "[QUIZ] Created session %s... (services=%d, products=%d, podcasts=%d)",
            record.session_id[:8],
            len(bundle.services),
            len(bundle.products),
            len(bundle.podcasts),
        )

        return QuizSessionResult(
            session_id=record.session_id,
            results=QuizResults(
                services=bundle.services,
                products=bundle.products,
                podcasts=bundle.podcasts,
                astrology=astrology,
                human_design=human_design,
                nonprofit=build_nonprofit_eligibility(quiz.eligible_nonprofit),
            ),
        )

    def submit_quiz(
        self,
        quiz: QuizSubmission,
        device_info: DeviceInfo,
        user_id: Optional[str] = None,
    ) -> QuizSubmissionResult:
        session = self.create_session(quiz, device_info)

        if user_id and self.user_db is not None:
            bundle = RecommendationBundle(
                services=session.results.services,
                products=session.results.products,
                podcasts=session.results.podcasts,
            )
            # Outcome is logged inside; it does not change the response
            store_user_recommendations_best_effort(self.user_db, user_id, bundle)

        return QuizSubmissionResult(
            session_id=session.session_id,
            results=session.results,
            recommendations_stored=bool(user_id),
        )

    def fetch_results(self, session_id: str) -> Optional[StoredSession]:
        record = self.session_store.find_session_by_token(session_id)
        if record is None:
            return None

        bundle = RecommendationBundle.model_validate(record.recommendations or {})
        return StoredSession(
            session_id=record.session_id,
            timestamp=record.timestamp,
            results=StoredQuizResults(
                services=bundle.services,
                products=bundle.products,
                podcasts=bundle.podcasts,
                insights=WellnessInsights.model_validate(record.insights),
            ),
        )

    def fetch_analytics(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> QuizAnalytics:
        return self.session_store.aggregate_sessions(start_date=start_date, end_date=end_date)

    def delete_session(self, session_id: str) -> bool:
        return self.session_store.delete_session(session_id)


def build_quiz_service(
    db: Session,
    user_db: Optional[Session] = None,
    rng: Optional[random.Random] = None,
) -> QuizService:
    """Wire a QuizService against SQLAlchemy-backed catalogs and session store."""
    resolver = RecommendationResolver(
        services=ServiceCatalog(db),
        products=ProductCatalog(db),
        podcasts=PodcastCatalog(db),
    )
    return QuizService(
        resolver=resolver,
        session_store=QuizSessionStore(db, quiz_version=settings.QUIZ_VERSION),
        user_db=user_db,
        rng=rng,
    )
