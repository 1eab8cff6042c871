from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union
from datetime import datetime
from app.models import (
    EnergyType,
    BalanceActivity,
    BudgetPreference,
    TimeAvailability,
    SessionPreference,
    PractitionerInterest,
    CurrentChallenge,
    WellnessProfile,
    RecommendedApproach,
)


class QuestionTiming(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    question_id: str
    time_spent: float = 0


class QuizSubmission(BaseModel):
    """
    Raw quiz answers as the frontend sends them (human-readable phrases).

    Keys are accepted in snake_case or camelCase (``currentChallenge``).
    """
    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)

    energy_type: Optional[str] = None
    calculate_energy_type: Optional[str] = None
    balance_activities: Optional[List[str]] = None
    budget: Optional[str] = None
    time_commitment: Optional[str] = None
    session_preference: Optional[str] = None
    practitioner_type: Optional[str] = None
    product_interest: Optional[Union[bool, str]] = None
    current_challenge: Optional[str] = None
    date_of_birth: Optional[str] = None
    birth_time: Optional[str] = None
    eligible_nonprofit: Optional[str] = None

    # Completion metrics
    completion_time: Optional[float] = None
    time_spent_on_questions: Optional[List[QuestionTiming]] = None
    skipped_questions: Optional[List[str]] = None
    total_questions: Optional[int] = None


class NormalizedQuizResponse(BaseModel):
    energy_type: EnergyType
    balance_activities: List[BalanceActivity]
    budget_preference: BudgetPreference
    time_availability: TimeAvailability
    session_preference: SessionPreference
    practitioner_interest: PractitionerInterest
    product_interest: bool
    current_challenge: CurrentChallenge


class DeviceInfo(BaseModel):
    device_type: str = "desktop"
    browser_type: str = "unknown"
    ip_country: str = "unknown"


class ServiceRecommendation(BaseModel):
    id: str
    name: str
    price: float
    description: Optional[str] = None
    category: Optional[str] = None
    practitioner_type: Optional[str] = None
    image: Optional[str] = None


class ProductRecommendation(BaseModel):
    id: str
    name: str
    price: float
    product_url: str
    description: Optional[str] = None
    image: Optional[str] = None


class PodcastRecommendation(BaseModel):
    id: str
    title: str
    episode: str
    description: Optional[str] = None
    link: Optional[str] = None
    image: Optional[str] = None


class RecommendationBundle(BaseModel):
    services: List[ServiceRecommendation] = Field(default_factory=list)
    products: List[ProductRecommendation] = Field(default_factory=list)
    podcasts: List[PodcastRecommendation] = Field(default_factory=list)


class PriorityArea(BaseModel):
    area: str
    priority: int


class WellnessInsights(BaseModel):
    wellness_profile: WellnessProfile
    recommended_approach: RecommendedApproach
    priority_areas: List[PriorityArea] = Field(default_factory=list)


class AstrologyProfile(BaseModel):
    sun_sign: str
    moon_sign: str
    rising_sign: str


class HumanDesignProfile(BaseModel):
    energy_type: str
    strategy: str = ""
    authority: str = ""


class NonprofitEligibility(BaseModel):
    eligible: bool = False
    apply_url: str
    message: str


class QuizResults(BaseModel):
    services: List[ServiceRecommendation]
    products: List[ProductRecommendation]
    podcasts: List[PodcastRecommendation]
    astrology: AstrologyProfile
    human_design: HumanDesignProfile
    nonprofit: NonprofitEligibility


class QuizSubmitResponse(BaseModel):
    message: str = "Quiz completed successfully"
    session_id: str
    results: QuizResults
    recommendations_stored: bool
    success: bool = True


class StoredQuizResults(BaseModel):
    services: List[ServiceRecommendation]
    products: List[ProductRecommendation]
    podcasts: List[PodcastRecommendation]
    insights: WellnessInsights


class QuizResultsResponse(BaseModel):
    results: StoredQuizResults
    session_id: str
    timestamp: datetime
    success: bool = True


class ChallengeCount(BaseModel):
    challenge: str
    count: int


class ProfileCount(BaseModel):
    profile: str
    count: int


class QuizAnalytics(BaseModel):
    total_sessions: int = 0
    avg_completion_time: int = 0
    most_common_challenge: List[ChallengeCount] = Field(default_factory=list)
    most_common_profile: List[ProfileCount] = Field(default_factory=list)
    device_types: List[str] = Field(default_factory=list)


class QuizAnalyticsResponse(BaseModel):
    analytics: QuizAnalytics
    success: bool = True
