"""
Quiz answer normalization.

Maps the human-readable phrases the quiz UI sends ("Under $50",
"Energy healer (Reiki, chakra balancing)") onto the closed vocabularies stored
with every anonymous session. Lookups are exact after stripping and
lowercasing; the enum values themselves are accepted too so API clients can
send them directly. Anything else resolves to the field's default, so every
mapper here is total and never raises.
"""
import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional, Type, TypeVar, Union

from app.models import (
    EnergyType,
    BalanceActivity,
    BudgetPreference,
    TimeAvailability,
    SessionPreference,
    PractitionerInterest,
    CurrentChallenge,
)
from app.schemas.quiz import QuizSubmission, NormalizedQuizResponse

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


ENERGY_TYPE_PHRASES = {
    "generator": EnergyType.GENERATOR,
    "manifestor": EnergyType.MANIFESTOR,
    "manifesting generator": EnergyType.MANIFESTOR,  # collapsed into manifestor
    "projector": EnergyType.PROJECTOR,
    "reflector": EnergyType.REFLECTOR,
    "i'm not sure": EnergyType.UNKNOWN,
}

BALANCE_ACTIVITY_PHRASES = {
    "meditation & mindfulness": BalanceActivity.MEDITATION,
    "physical exercise": BalanceActivity.EXERCISE,
    "creative expression (art, music, writing)": BalanceActivity.CREATIVE,
    "social connection & community": BalanceActivity.SOCIAL,
    "nature & outdoor activities": BalanceActivity.NATURE,
    "energy work & holistic therapies": BalanceActivity.ENERGY_WORK,
}

BUDGET_PHRASES = {
    "under $50": BudgetPreference.UNDER_50,
    "$50–$100": BudgetPreference.FROM_50_TO_100,
    "$100–$200": BudgetPreference.FROM_100_TO_200,
    "$200+": BudgetPreference.OVER_200,
}

TIME_AVAILABILITY_PHRASES = {
    "less than 1 hour": TimeAvailability.LESS_THAN_1_HOUR,
    "1–2 hours": TimeAvailability.ONE_TO_2_HOURS,
    "3–5 hours": TimeAvailability.THREE_TO_5_HOURS,
    "5+ hours": TimeAvailability.MORE_THAN_5_HOURS,
}

SESSION_PREFERENCE_PHRASES = {
    "in-person": SessionPreference.IN_PERSON,
    "online (zoom, video call)": SessionPreference.ONLINE,
    "either is fine": SessionPreference.EITHER,
}

PRACTITIONER_PHRASES = {
    "energy healer (reiki, chakra balancing)": PractitionerInterest.ENERGY_HEALER,
    "mind-body practitioner (yoga, tai chi)": PractitionerInterest.MIND_BODY,
    "talk-based therapist/coach": PractitionerInterest.TALK_THERAPY,
    "bodywork therapist (massage, craniosacral)": PractitionerInterest.BODYWORK,
    "spiritual guide (astrology, tarot, meditation)": PractitionerInterest.SPIRITUAL_GUIDE,
}

CHALLENGE_PHRASES = {
    "anxiety & stress relief": CurrentChallenge.ANXIETY,
    "trauma recovery & healing": CurrentChallenge.TRAUMA_RECOVERY,
    "emotional balance & mental health": CurrentChallenge.EMOTIONAL_BALANCE,
    "physical health & energy": CurrentChallenge.PHYSICAL_HEALTH,
    "spiritual growth & awakening": CurrentChallenge.SPIRITUAL_GROWTH,
    "overall life balance": CurrentChallenge.STRESS_MANAGEMENT,
}

PRODUCT_INTEREST_YES = {"yes, please", "yes"}


def _with_enum_values(phrases: Dict[str, E], enum_cls: Type[E]) -> Dict[str, E]:
    table = {member.value: member for member in enum_cls}
    table.update(phrases)
    return table


_ENERGY_TYPES = _with_enum_values(ENERGY_TYPE_PHRASES, EnergyType)
_BALANCE_ACTIVITIES = _with_enum_values(BALANCE_ACTIVITY_PHRASES, BalanceActivity)
_BUDGETS = _with_enum_values(BUDGET_PHRASES, BudgetPreference)
_TIME_AVAILABILITY = _with_enum_values(TIME_AVAILABILITY_PHRASES, TimeAvailability)
_SESSION_PREFERENCES = _with_enum_values(SESSION_PREFERENCE_PHRASES, SessionPreference)
_PRACTITIONERS = _with_enum_values(PRACTITIONER_PHRASES, PractitionerInterest)
_CHALLENGES = _with_enum_values(CHALLENGE_PHRASES, CurrentChallenge)


def _lookup(table: Dict[str, E], raw: object) -> Optional[E]:
    if not isinstance(raw, str):
        return None
    return table.get(raw.strip().lower())


def lookup_budget(raw: object) -> Optional[BudgetPreference]:
    """Exact budget lookup without defaulting (None when unmapped)."""
    return _lookup(_BUDGETS, raw)


def lookup_balance_activity(raw: object) -> Optional[BalanceActivity]:
    return _lookup(_BALANCE_ACTIVITIES, raw)


def lookup_practitioner_interest(raw: object) -> Optional[PractitionerInterest]:
    return _lookup(_PRACTITIONERS, raw)


def lookup_current_challenge(raw: object) -> Optional[CurrentChallenge]:
    return _lookup(_CHALLENGES, raw)


def map_energy_type(raw: object) -> EnergyType:
    return _lookup(_ENERGY_TYPES, raw) or EnergyType.UNKNOWN


def map_balance_activity(raw: object) -> BalanceActivity:
    return lookup_balance_activity(raw) or BalanceActivity.MEDITATION


def map_balance_activities(raw: Optional[Iterable[object]]) -> List[BalanceActivity]:
    if not raw:
        return []
    return [map_balance_activity(activity) for activity in raw]


def map_budget_preference(raw: object) -> BudgetPreference:
    return lookup_budget(raw) or BudgetPreference.UNDER_50


def map_time_availability(raw: object) -> TimeAvailability:
    return _lookup(_TIME_AVAILABILITY, raw) or TimeAvailability.LESS_THAN_1_HOUR


def map_session_preference(raw: object) -> SessionPreference:
    return _lookup(_SESSION_PREFERENCES, raw) or SessionPreference.EITHER


def map_practitioner_interest(raw: object) -> PractitionerInterest:
    return lookup_practitioner_interest(raw) or PractitionerInterest.ENERGY_HEALER


def map_current_challenge(raw: object) -> CurrentChallenge:
    return lookup_current_challenge(raw) or CurrentChallenge.ANXIETY


def is_product_opt_in(raw: Union[bool, str, None]) -> bool:
    """Only an explicit yes counts as opting in to product recommendations."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.strip().lower() in PRODUCT_INTEREST_YES
    return False


def normalize_quiz(quiz: QuizSubmission) -> NormalizedQuizResponse:
    """Map every free-text quiz answer onto its closed vocabulary."""
    normalized = NormalizedQuizResponse(
        energy_type=map_energy_type(quiz.energy_type),
        balance_activities=map_balance_activities(quiz.balance_activities),
        budget_preference=map_budget_preference(quiz.budget),
        time_availability=map_time_availability(quiz.time_commitment),
        session_preference=map_session_preference(quiz.session_preference),
        practitioner_interest=map_practitioner_interest(quiz.practitioner_type),
        product_interest=is_product_opt_in(quiz.product_interest),
        current_challenge=map_current_challenge(quiz.current_challenge),
    )
    logger.debug("Normalized quiz answers: %s", normalized.model_dump(mode="json"))
    return normalized
