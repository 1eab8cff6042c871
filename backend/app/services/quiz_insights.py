"""
Derived quiz insights: astrology and Human Design placeholders, wellness
profile / approach classification, and priority areas.

The astrology and Human Design values are placeholders, not real charts.
"""
import logging
import random
from datetime import date
from typing import List, Optional

from app.models import WellnessProfile, RecommendedApproach
from app.schemas.quiz import (
    QuizSubmission,
    AstrologyProfile,
    HumanDesignProfile,
    PriorityArea,
    WellnessInsights,
)

logger = logging.getLogger(__name__)

# Index 0 is January
SUN_SIGNS = [
    "Capricorn", "Aquarius", "Pisces", "Aries", "Taurus", "Gemini",
    "Cancer", "Leo", "Virgo", "Libra", "Scorpio", "Sagittarius",
]
PLACEHOLDER_MOON_SIGN = "Cancer"
PLACEHOLDER_RISING_SIGN = "Libra"
UNKNOWN = "Unknown"

HUMAN_DESIGN_TYPES = [
    "Generator",
    "Manifestor",
    "Manifesting Generator",
    "Projector",
    "Reflector",
]
HUMAN_DESIGN_STRATEGY = "Wait to respond"
HUMAN_DESIGN_AUTHORITY = "Sacral"
ENERGY_TYPE_UNSURE = "i'm not sure"

WELLNESS_PROFILE_BY_CHALLENGE = {
    "anxiety": WellnessProfile.STRESS_FOCUSED,
    "stress_management": WellnessProfile.STRESS_FOCUSED,
    "trauma_recovery": WellnessProfile.TRAUMA_INFORMED,
    "emotional_balance": WellnessProfile.ENERGY_BALANCED,
    "spiritual_growth": WellnessProfile.SPIRITUAL_SEEKER,
    "physical_health": WellnessProfile.MIND_BODY_INTEGRATED,
}

APPROACH_BY_CHALLENGE = {
    "anxiety": RecommendedApproach.GENTLE_HEALING,
    "stress_management": RecommendedApproach.MINDFUL_PRACTICE,
    "trauma_recovery": RecommendedApproach.GENTLE_HEALING,
    "emotional_balance": RecommendedApproach.ENERGY_WORK,
    "spiritual_growth": RecommendedApproach.HOLISTIC_INTEGRATION,
    "physical_health": RecommendedApproach.ACTIVE_ENGAGEMENT,
}


def _unknown_astrology() -> AstrologyProfile:
    return AstrologyProfile(sun_sign=UNKNOWN, moon_sign=UNKNOWN, rising_sign=UNKNOWN)


def calculate_astrology(birth_date: Optional[str], birth_time: Optional[str]) -> AstrologyProfile:
    """
    Placeholder astrology: sun sign by calendar month, fixed moon and rising.

    Returns the "Unknown" triple when either birth field is missing or the
    date cannot be parsed.
    """
    if not birth_date or not birth_time:
        return _unknown_astrology()

    try:
        month = date.fromisoformat(str(birth_date).strip()[:10]).month
    except ValueError:
        logger.info("Unparseable birth date %r, returning unknown astrology", birth_date)
        return _unknown_astrology()

    return AstrologyProfile(
        sun_sign=SUN_SIGNS[month - 1],
        moon_sign=PLACEHOLDER_MOON_SIGN,
        rising_sign=PLACEHOLDER_RISING_SIGN,
    )


def calculate_human_design(
    energy_type: Optional[str],
    calculate_energy_type: Optional[str],
    birth_date: Optional[str],
    birth_time: Optional[str],
    rng: Optional[random.Random] = None,
) -> HumanDesignProfile:
    """
    Placeholder Human Design.

    Only when the user is unsure of their type, asked us to calculate it and
    gave full birth info do we pick a type, and that pick is random. Callers
    that need a stable result pass a seeded ``rng``.
    """
    unsure = (energy_type or "").strip().lower() == ENERGY_TYPE_UNSURE
    wants_calculation = (calculate_energy_type or "").strip().lower() == "yes"

    if unsure and wants_calculation and birth_date and birth_time:
        chooser = rng or random
        return HumanDesignProfile(
            energy_type=chooser.choice(HUMAN_DESIGN_TYPES),
            strategy=HUMAN_DESIGN_STRATEGY,
            authority=HUMAN_DESIGN_AUTHORITY,
        )

    return HumanDesignProfile(energy_type=energy_type or UNKNOWN, strategy="", authority="")


def determine_wellness_profile(raw_challenge: Optional[str]) -> WellnessProfile:
    key = (raw_challenge or "").lower()
    return WELLNESS_PROFILE_BY_CHALLENGE.get(key, WellnessProfile.ENERGY_BALANCED)


def determine_approach(raw_challenge: Optional[str]) -> RecommendedApproach:
    key = (raw_challenge or "").lower()
    return APPROACH_BY_CHALLENGE.get(key, RecommendedApproach.HOLISTIC_INTEGRATION)


def generate_priority_areas(
    raw_challenge: Optional[str],
    balance_activities: Optional[List[str]],
) -> List[PriorityArea]:
    areas: List[PriorityArea] = []
    if raw_challenge:
        areas.append(PriorityArea(area=raw_challenge.lower(), priority=1))
    if balance_activities:
        areas.append(PriorityArea(area="balance_activities", priority=2))
    return areas


def build_wellness_insights(quiz: QuizSubmission) -> WellnessInsights:
    """Classify the raw (pre-normalization) challenge and activities."""
    return WellnessInsights(
        wellness_profile=determine_wellness_profile(quiz.current_challenge),
        recommended_approach=determine_approach(quiz.current_challenge),
        priority_areas=generate_priority_areas(quiz.current_challenge, quiz.balance_activities),
    )
