"""
Persistence for anonymous quiz sessions.

Sessions are keyed by a random 64-char hex token and never linked to a user.
"""
import hashlib
import json
import logging
import secrets
from collections import Counter
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import AnonymousQuizSession
from app.schemas.quiz import (
    DeviceInfo,
    NormalizedQuizResponse,
    QuizAnalytics,
    QuizSubmission,
    RecommendationBundle,
    WellnessInsights,
    ChallengeCount,
    ProfileCount,
)

logger = logging.getLogger(__name__)

MAX_TOKEN_ATTEMPTS = 3
TOP_N = 3


class SessionTokenCollisionError(Exception):
    """Raised when every generated session token hit the uniqueness constraint."""
    pass


def generate_session_id() -> str:
    """32 random bytes as 64 hex characters."""
    return secrets.token_hex(32)


def build_session_fingerprint(device_info: DeviceInfo, timestamp: datetime) -> str:
    data = {
        "device_type": device_info.device_type,
        "browser_type": device_info.browser_type,
        "ip_country": device_info.ip_country,
        "timestamp": timestamp.isoformat(),
    }
    return json.dumps(data, sort_keys=True)


def _hash_fingerprint(fingerprint: str) -> str:
    return hashlib.sha256(fingerprint.encode("utf-8")).hexdigest()


def _is_session_id_conflict(exc: IntegrityError) -> bool:
    """True only for a duplicate session_id, not for other constraint failures."""
    pgcode = getattr(exc.orig, "pgcode", None)
    message = str(exc.orig).lower()
    if "session_id" not in message:
        return False
    if pgcode is not None:
        return pgcode == "23505"
    return "unique" in message


class QuizSessionStore:
    def __init__(
        self,
        db: Session,
        token_factory: Callable[[], str] = generate_session_id,
        max_attempts: int = MAX_TOKEN_ATTEMPTS,
        quiz_version: str = "1.0",
    ):
        self.db = db
        self.token_factory = token_factory
        self.max_attempts = max_attempts
        self.quiz_version = quiz_version

    def insert_session(
        self,
        quiz: QuizSubmission,
        normalized: NormalizedQuizResponse,
        bundle: RecommendationBundle,
        insights: WellnessInsights,
        device_info: DeviceInfo,
    ) -> AnonymousQuizSession:
        """
        Persist one anonymous session under a fresh token.

        A token collision shows up as an IntegrityError on the unique
        session_id; we roll back and retry with a new token a few times.
        """
        timestamp = datetime.utcnow()
        fingerprint = build_session_fingerprint(device_info, timestamp)

        for attempt in range(1, self.max_attempts + 1):
            record = AnonymousQuizSession(
                session_id=self.token_factory(),
                quiz_responses=normalized.model_dump(mode="json"),
                recommendations=bundle.model_dump(mode="json"),
                insights=insights.model_dump(mode="json"),
                current_challenge=normalized.current_challenge.value,
                wellness_profile=insights.wellness_profile.value,
                quiz_version=self.quiz_version,
                completion_time=quiz.completion_time or 0,
                device_type=device_info.device_type or "desktop",
                browser_type=device_info.browser_type or "unknown",
                ip_country=device_info.ip_country or "unknown",
                timestamp=timestamp,
                session_fingerprint=_hash_fingerprint(fingerprint),
                time_spent_on_each_question=[
                    timing.model_dump() for timing in (quiz.time_spent_on_questions or [])
                ],
                questions_skipped=list(quiz.skipped_questions or []),
                total_questions_answered=quiz.total_questions or 0,
            )
            try:
                self.db.add(record)
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                if not _is_session_id_conflict(e):
                    raise
                logger.warning(
                    "[QUIZ] Session token collision on attempt %d/%d", attempt, self.max_attempts
                )
                continue
            self.db.refresh(record)
            return record

        raise SessionTokenCollisionError(
            f"Could not allocate a unique session id after {self.max_attempts} attempts"
        )

    def find_session_by_token(self, session_id: str) -> Optional[AnonymousQuizSession]:
        if not session_id:
            return None
        return self.db.query(AnonymousQuizSession).filter(
            AnonymousQuizSession.session_id == session_id
        ).first()

    def validate_session(self, session_id: str, fingerprint: str) -> bool:
        """Check a client-presented fingerprint against the one stored at creation."""
        record = self.find_session_by_token(session_id)
        if record is None or not record.session_fingerprint or not fingerprint:
            return False
        return secrets.compare_digest(record.session_fingerprint, _hash_fingerprint(fingerprint))

    def delete_session(self, session_id: str) -> bool:
        record = self.find_session_by_token(session_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.commit()
        return True

    def aggregate_sessions(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> QuizAnalytics:
        """Anonymous aggregate over sessions, optionally bounded by timestamp."""
        filters = []
        if start_date is not None:
            filters.append(AnonymousQuizSession.timestamp >= start_date)
        if end_date is not None:
            filters.append(AnonymousQuizSession.timestamp <= end_date)

        total, avg_completion = self.db.query(
            func.count(AnonymousQuizSession.id),
            func.avg(AnonymousQuizSession.completion_time),
        ).filter(*filters).one()

        if not total:
            return QuizAnalytics()

        rows = self.db.query(
            AnonymousQuizSession.current_challenge,
            AnonymousQuizSession.wellness_profile,
            AnonymousQuizSession.device_type,
        ).filter(*filters).order_by(AnonymousQuizSession.timestamp).all()

        challenge_counts = Counter(row.current_challenge for row in rows)
        profile_counts = Counter(row.wellness_profile for row in rows)

        device_types = []
        for row in rows:
            if row.device_type not in device_types:
                device_types.append(row.device_type)

        return QuizAnalytics(
            total_sessions=total,
            avg_completion_time=round(avg_completion or 0),
            most_common_challenge=[
                ChallengeCount(challenge=challenge, count=count)
                for challenge, count in challenge_counts.most_common(TOP_N)
            ],
            most_common_profile=[
                ProfileCount(profile=profile, count=count)
                for profile, count in profile_counts.most_common(TOP_N)
            ],
            device_types=device_types,
        )
