from sqlalchemy import Column, String, Integer, Text, DateTime, Float, JSON, Uuid
import uuid
from datetime import datetime
import enum
import sqlalchemy as sa
from app.database import Base, UserBase


class EnergyType(str, enum.Enum):
    GENERATOR = "generator"
    MANIFESTOR = "manifestor"
    PROJECTOR = "projector"
    REFLECTOR = "reflector"
    UNKNOWN = "unknown"


class BalanceActivity(str, enum.Enum):
    MEDITATION = "meditation"
    EXERCISE = "exercise"
    CREATIVE = "creative"
    SOCIAL = "social"
    NATURE = "nature"
    ENERGY_WORK = "energy_work"


class BudgetPreference(str, enum.Enum):
    UNDER_50 = "under_50"
    FROM_50_TO_100 = "50_100"
    FROM_100_TO_200 = "100_200"
    OVER_200 = "200_plus"


class TimeAvailability(str, enum.Enum):
    LESS_THAN_1_HOUR = "less_1_hour"
    ONE_TO_2_HOURS = "1_2_hours"
    THREE_TO_5_HOURS = "3_5_hours"
    MORE_THAN_5_HOURS = "5_plus_hours"


class SessionPreference(str, enum.Enum):
    IN_PERSON = "in_person"
    ONLINE = "online"
    EITHER = "either"


class PractitionerInterest(str, enum.Enum):
    ENERGY_HEALER = "energy_healer"
    MIND_BODY = "mind_body"
    TALK_THERAPY = "talk_therapy"
    BODYWORK = "bodywork"
    SPIRITUAL_GUIDE = "spiritual_guide"


class CurrentChallenge(str, enum.Enum):
    ANXIETY = "anxiety"
    STRESS_MANAGEMENT = "stress_management"
    TRAUMA_RECOVERY = "trauma_recovery"
    EMOTIONAL_BALANCE = "emotional_balance"
    SPIRITUAL_GROWTH = "spiritual_growth"
    PHYSICAL_HEALTH = "physical_health"


class WellnessProfile(str, enum.Enum):
    STRESS_FOCUSED = "stress_focused"
    TRAUMA_INFORMED = "trauma_informed"
    SPIRITUAL_SEEKER = "spiritual_seeker"
    ENERGY_BALANCED = "energy_balanced"
    MIND_BODY_INTEGRATED = "mind_body_integrated"


class RecommendedApproach(str, enum.Enum):
    GENTLE_HEALING = "gentle_healing"
    ACTIVE_ENGAGEMENT = "active_engagement"
    MINDFUL_PRACTICE = "mindful_practice"
    ENERGY_WORK = "energy_work"
    HOLISTIC_INTEGRATION = "holistic_integration"


class Service(Base):
    __tablename__ = "services"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String, nullable=True)
    service_provider_name = Column(String, nullable=True)
    service_provider_email = Column(String, nullable=True)
    price = Column(Float, nullable=False)
    service_type = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Product(Base):
    __tablename__ = "products"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    image_url = Column(String, nullable=True)
    stock = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Podcast(Base):
    __tablename__ = "podcasts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    podcast_image_url = Column(String, nullable=True)
    podcast_url = Column(String, nullable=True)
    podcast_type = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class AnonymousQuizSession(Base):
    """
    Anonymous quiz submission. Not linked to any user identity.

    Written once at submission time and only read afterwards. The columns
    pulled out of the JSON blobs (challenge, profile, device, timestamp) back
    the analytics aggregate.
    """
    __tablename__ = "anonymous_quiz_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(String(64), unique=True, index=True, nullable=False)

    quiz_responses = Column(JSON, nullable=False)
    recommendations = Column(JSON, nullable=False)
    insights = Column(JSON, nullable=False)

    current_challenge = Column(String, nullable=False, index=True)
    wellness_profile = Column(String, nullable=False, index=True)

    # Session metadata (no personal info)
    quiz_version = Column(String, nullable=False, default="1.0")
    completion_time = Column(Float, nullable=False, default=0)
    device_type = Column(String, nullable=False, default="desktop", index=True)
    browser_type = Column(String, nullable=False, default="unknown")
    ip_country = Column(String, nullable=False, default="unknown", index=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    session_fingerprint = Column(String, nullable=True)

    # Analytics (completely anonymous)
    time_spent_on_each_question = Column(JSON, nullable=True)
    questions_skipped = Column(JSON, nullable=True)
    total_questions_answered = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)


class UserRecommendation(UserBase):
    """
    Append-only snapshot of a quiz's recommendations for a signed-in user.

    Catalog ids are stored as plain strings inside the JSON lists so this
    table never references the content database's primary keys.
    """
    __tablename__ = "user_recommendations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String, nullable=False, index=True)
    services = Column(JSON, nullable=False, default=list)
    products = Column(JSON, nullable=False, default=list)
    podcasts = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        sa.Index("idx_user_recommendations_user_created", "user_id", "created_at"),
    )
