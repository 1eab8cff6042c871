from typing import List, Optional, Set, Sequence, TypeVar
import logging
import re

from app.models import BalanceActivity, BudgetPreference, CurrentChallenge, PractitionerInterest
from app.schemas.quiz import (
    QuizSubmission,
    NormalizedQuizResponse,
    ServiceRecommendation,
    ProductRecommendation,
    PodcastRecommendation,
    RecommendationBundle,
)
from app.services.catalog import (
    CatalogRepository,
    ServiceItem,
    ProductItem,
    PodcastItem,
)
from app.services.quiz_insights import calculate_astrology
from app.services.quiz_normalizer import (
    lookup_balance_activity,
    lookup_budget,
    lookup_current_challenge,
    lookup_practitioner_interest,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EmptyCatalogError(Exception):
    """Raised when a catalog the resolver needs has no items at all.

    This is a configuration problem (catalog never seeded), not a "no matches"
    outcome, so it aborts the quiz submission.
    """

    def __init__(self, catalog: str):
        self.catalog = catalog
        super().__init__(f"No {catalog} found in catalog")


# Challenge groups narrowing the service catalog (unlisted challenges skip the filter)
CHALLENGE_SERVICE_TYPES = {
    CurrentChallenge.ANXIETY: {"aura_cleansing", "reiki", "meditation"},
    CurrentChallenge.STRESS_MANAGEMENT: {"aura_cleansing", "reiki", "meditation"},
    CurrentChallenge.TRAUMA_RECOVERY: {"life_coaching", "reiki", "crystal_healing"},
    CurrentChallenge.SPIRITUAL_GROWTH: {"astrology", "tarot", "numerology"},
}

# Practitioner groups applied on top of the challenge filter (bodywork has none)
PRACTITIONER_SERVICE_TYPES = {
    PractitionerInterest.ENERGY_HEALER: {"reiki", "crystal_healing", "aura_cleansing"},
    PractitionerInterest.MIND_BODY: {"meditation"},
    PractitionerInterest.TALK_THERAPY: {"life_coaching"},
    PractitionerInterest.SPIRITUAL_GUIDE: {"astrology", "tarot", "numerology"},
}

# Price ceiling per budget tier; None means no cap
BUDGET_PRICE_CAPS = {
    BudgetPreference.UNDER_50: 45.0,
    BudgetPreference.FROM_50_TO_100: 85.0,
    BudgetPreference.FROM_100_TO_200: 175.0,
    BudgetPreference.OVER_200: None,
}

CRYSTAL_KEYWORDS = ("crystal", "amethyst")
MEDITATION_KEYWORDS = ("meditation", "cushion")
NATURE_KEYWORDS = ("essential", "oil")

CHALLENGE_PODCAST_CATEGORY = {
    "anxiety": "meditation",
    "stress_management": "meditation",
    "trauma_recovery": "energy_healing",
    "emotional_balance": "crystal_healing",
    "spiritual_growth": "spiritual_growth",
    "physical_health": "energy_healing",
}
DEFAULT_PODCAST_CATEGORY = "spiritual_growth"
FEATURED_EPISODE = "Featured Episode"


def _load_catalog(repository: CatalogRepository[T]) -> Sequence[T]:
    items = repository.find_all()
    if not items:
        logger.error("Catalog %s is empty; cannot resolve recommendations", repository.name)
        raise EmptyCatalogError(repository.name)
    return items


def _filter_by_type(items: Sequence[ServiceItem], allowed: Set[str]) -> List[ServiceItem]:
    return [item for item in items if item.service_type in allowed]


def _name_matches(name: str, keywords) -> bool:
    lowered = (name or "").lower()
    return any(keyword in lowered for keyword in keywords)


def budget_price_cap(budget: Optional[str]) -> Optional[float]:
    """Ceiling for the given budget answer, or None for no cap."""
    tier = lookup_budget(budget)
    if tier is None:
        return None
    return BUDGET_PRICE_CAPS[tier]


def apply_price_cap(price: float, cap: Optional[float]) -> float:
    """Clamp down only; cheaper items keep their catalog price."""
    if cap is None:
        return price
    return min(price, cap)


def build_product_url(name: str) -> str:
    return "/shop/" + re.sub(r"\s+", "-", name.lower())


def filter_services(
    services: Sequence[ServiceItem],
    challenge: Optional[CurrentChallenge],
    practitioner: Optional[PractitionerInterest],
) -> List[ServiceItem]:
    """
    Narrow the catalog by challenge group, then by practitioner group.

    Falls back from the practitioner-narrowed set to the challenge-narrowed
    set, and from there to the full catalog, whenever a step comes up empty.
    """
    challenge_types = CHALLENGE_SERVICE_TYPES.get(challenge) if challenge else None
    by_challenge = _filter_by_type(services, challenge_types) if challenge_types else list(services)

    practitioner_types = PRACTITIONER_SERVICE_TYPES.get(practitioner) if practitioner else None
    by_practitioner = (
        _filter_by_type(by_challenge, practitioner_types) if practitioner_types else by_challenge
    )

    if by_practitioner:
        return by_practitioner
    if by_challenge:
        return by_challenge
    return list(services)


class RecommendationResolver:
    """Resolves services, products and podcasts for a quiz from injected catalogs."""

    def __init__(
        self,
        services: CatalogRepository[ServiceItem],
        products: CatalogRepository[ProductItem],
        podcasts: CatalogRepository[PodcastItem],
    ):
        self.services = services
        self.products = products
        self.podcasts = podcasts

    def resolve_services(self, quiz: QuizSubmission) -> List[ServiceRecommendation]:
        all_services = _load_catalog(self.services)

        matched = filter_services(
            all_services,
            challenge=lookup_current_challenge(quiz.current_challenge),
            practitioner=lookup_practitioner_interest(quiz.practitioner_type),
        )
        cap = budget_price_cap(quiz.budget)

        logger.debug(
            "Service resolution: catalog=%d matched=%d cap=%s",
            len(all_services), len(matched), cap,
        )
        return [
            ServiceRecommendation(
                id=item.id,
                name=item.name,
                price=apply_price_cap(item.price, cap),
                description=item.description,
                category=item.service_type,
                practitioner_type=item.provider_name,
                image=item.image,
            )
            for item in matched
        ]

    def resolve_products(
        self,
        quiz: QuizSubmission,
        normalized: NormalizedQuizResponse,
    ) -> List[ProductRecommendation]:
        if not normalized.product_interest:
            return []

        all_products = _load_catalog(self.products)
        results: List[ProductRecommendation] = []
        seen: Set[str] = set()

        def add(item: ProductItem, description: Optional[str]) -> None:
            if item.id in seen:
                return
            seen.add(item.id)
            results.append(
                ProductRecommendation(
                    id=item.id,
                    name=item.name,
                    price=item.price,
                    product_url=build_product_url(item.name),
                    description=description,
                    image=item.image,
                )
            )

        if quiz.date_of_birth and quiz.birth_time:
            sun_sign = calculate_astrology(quiz.date_of_birth, quiz.birth_time).sun_sign
            for item in all_products:
                if _name_matches(item.name, CRYSTAL_KEYWORDS):
                    add(item, f"Perfect for {sun_sign} energy - {item.description or ''}")

        # Exact lookups; unmapped activities contribute nothing
        activities = {
            activity
            for activity in map(lookup_balance_activity, quiz.balance_activities or [])
            if activity is not None
        }
        if BalanceActivity.MEDITATION in activities:
            for item in all_products:
                if _name_matches(item.name, MEDITATION_KEYWORDS):
                    add(item, item.description)

        if BalanceActivity.NATURE in activities:
            for item in all_products:
                if _name_matches(item.name, NATURE_KEYWORDS):
                    add(item, item.description)

        if not results:
            for item in all_products:
                add(item, item.description)

        return results

    def resolve_podcasts(self, challenge: Optional[str]) -> List[PodcastRecommendation]:
        all_podcasts = _load_catalog(self.podcasts)

        key = challenge.value if isinstance(challenge, CurrentChallenge) else (challenge or "")
        category = CHALLENGE_PODCAST_CATEGORY.get(key.lower(), DEFAULT_PODCAST_CATEGORY)

        matching = [item for item in all_podcasts if item.podcast_type == category]
        if not matching:
            matching = list(all_podcasts)

        return [
            PodcastRecommendation(
                id=item.id,
                title=item.title,
                episode=FEATURED_EPISODE,
                description=item.description,
                link=item.podcast_url,
                image=item.image,
            )
            for item in matching
        ]

    def resolve(self, quiz: QuizSubmission, normalized: NormalizedQuizResponse) -> RecommendationBundle:
        return RecommendationBundle(
            services=self.resolve_services(quiz),
            products=self.resolve_products(quiz, normalized),
            podcasts=self.resolve_podcasts(normalized.current_challenge),
        )
