"""Pytest configuration for backend tests."""
import sys
import os
from pathlib import Path
from typing import List, Sequence

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings refuse to load without a DATABASE_URL; tests never touch the module engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi.testclient import TestClient  # noqa: E402

from app.database import Base, UserBase, get_db, get_user_db  # noqa: E402

# Import the entire models module to ensure all models are registered with the metadata
import app.models  # noqa: F401, E402
from app.models import Service, Product, Podcast  # noqa: E402
from app.services.catalog import ServiceItem, ProductItem, PodcastItem  # noqa: E402

# TEST_DATABASE_URL / TEST_USER_DATABASE_URL point the suite at real databases;
# by default each test gets fresh in-memory SQLite databases.
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")
TEST_USER_DATABASE_URL = os.getenv("TEST_USER_DATABASE_URL", "sqlite://")


def _make_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, pool_pre_ping=True)


@pytest.fixture(scope="function")
def engine():
    """Content database engine (catalogs + anonymous sessions)."""
    test_engine = _make_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def user_engine():
    """User database engine (per-user recommendation records)."""
    test_engine = _make_engine(TEST_USER_DATABASE_URL)
    UserBase.metadata.create_all(bind=test_engine)
    yield test_engine
    UserBase.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def user_db(user_engine) -> Session:
    SessionLocal = sessionmaker(bind=user_engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(db: Session, user_db: Session):
    """TestClient wired to the test databases."""
    from app.main import app

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_user_db] = lambda: user_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def seeded_catalog(db: Session) -> dict:
    """A small catalog covering every category the resolver filters on."""
    services = [
        Service(name="Personal Astrology Reading", service_type="astrology", price=150.0,
                service_provider_name="Luna Astrology", description="Birth chart reading"),
        Service(name="Tarot Card Reading", service_type="tarot", price=75.0,
                service_provider_name="Mystic Tarot", description="Three-card spread"),
        Service(name="Numerology Reading", service_type="numerology", price=90.0,
                service_provider_name="Number Wisdom", description="Life path numbers"),
        Service(name="Reiki Energy Healing", service_type="reiki", price=110.0,
                service_provider_name="Reiki Harmony", description="Reiki session"),
        Service(name="Aura Cleansing", service_type="aura_cleansing", price=40.0,
                service_provider_name="Aura Wellness", description="Aura cleanse"),
        Service(name="Meditation Training", service_type="meditation", price=85.0,
                service_provider_name="Mindful Spirit", description="Mindfulness"),
        Service(name="Spiritual Life Coaching", service_type="life_coaching", price=180.0,
                service_provider_name="Soul Guidance", description="Coaching"),
        Service(name="Sound Healing Therapy", service_type="sound_healing", price=140.0,
                service_provider_name="Sound Sanctuary", description="Singing bowls"),
    ]
    products = [
        Product(name="Amethyst Crystal Set", price=45.0, description="Amethyst pieces"),
        Product(name="Crystal Grid Kit", price=78.0, description="Grid template"),
        Product(name="Meditation Cushion Set", price=65.0, description="Cushion and mat"),
        Product(name="Essential Oil Set", price=55.0, description="Four oils"),
        Product(name="Spiritual Journal", price=18.0, description="Guided prompts"),
    ]
    podcasts = [
        Podcast(title="Daily Meditation Guide", podcast_type="meditation",
                podcast_url="https://podcasts.example.com/meditation"),
        Podcast(title="Spiritual Growth Journey", podcast_type="spiritual_growth",
                podcast_url="https://podcasts.example.com/growth"),
        Podcast(title="Energy Healing Techniques", podcast_type="energy_healing",
                podcast_url="https://podcasts.example.com/energy"),
    ]
    db.add_all(services + products + podcasts)
    db.commit()
    return {"services": services, "products": products, "podcasts": podcasts}


class StaticCatalog:
    """In-memory catalog repository for resolver tests."""

    def __init__(self, name: str, items: Sequence):
        self.name = name
        self.items: List = list(items)
        self.calls = 0

    def find_all(self):
        self.calls += 1
        return list(self.items)


@pytest.fixture
def make_resolver(service_items, product_items, podcast_items):
    """Build a RecommendationResolver over in-memory catalogs (defaults to the fixtures)."""
    from app.services.recommendation_engine import RecommendationResolver

    def _make(services=None, products=None, podcasts=None):
        return RecommendationResolver(
            services=StaticCatalog("services", service_items if services is None else services),
            products=StaticCatalog("products", product_items if products is None else products),
            podcasts=StaticCatalog("podcasts", podcast_items if podcasts is None else podcasts),
        )

    return _make


@pytest.fixture
def service_items() -> List[ServiceItem]:
    return [
        ServiceItem(id="s-astro", name="Astrology Reading", price=150.0, service_type="astrology",
                    provider_name="Luna Astrology"),
        ServiceItem(id="s-tarot", name="Tarot Reading", price=75.0, service_type="tarot",
                    provider_name="Mystic Tarot"),
        ServiceItem(id="s-num", name="Numerology Reading", price=90.0, service_type="numerology",
                    provider_name="Number Wisdom"),
        ServiceItem(id="s-reiki", name="Reiki Healing", price=110.0, service_type="reiki",
                    provider_name="Reiki Harmony"),
        ServiceItem(id="s-aura", name="Aura Cleansing", price=40.0, service_type="aura_cleansing",
                    provider_name="Aura Wellness"),
        ServiceItem(id="s-med", name="Meditation Training", price=85.0, service_type="meditation",
                    provider_name="Mindful Spirit"),
        ServiceItem(id="s-coach", name="Life Coaching", price=180.0, service_type="life_coaching",
                    provider_name="Soul Guidance"),
        ServiceItem(id="s-sound", name="Sound Healing", price=140.0, service_type="sound_healing",
                    provider_name="Sound Sanctuary"),
    ]


@pytest.fixture
def product_items() -> List[ProductItem]:
    return [
        ProductItem(id="p-amethyst", name="Amethyst Crystal Set", price=45.0, description="Amethyst pieces"),
        ProductItem(id="p-grid", name="Crystal Grid Kit", price=78.0, description="Grid template"),
        ProductItem(id="p-cushion", name="Meditation Cushion Set", price=65.0, description="Cushion and mat"),
        ProductItem(id="p-oil", name="Essential Oil Set", price=55.0, description="Four oils"),
        ProductItem(id="p-journal", name="Spiritual  Journal", price=18.0, description="Guided prompts"),
    ]


@pytest.fixture
def podcast_items() -> List[PodcastItem]:
    return [
        PodcastItem(id="pod-med", title="Daily Meditation Guide", podcast_type="meditation"),
        PodcastItem(id="pod-growth", title="Spiritual Growth Journey", podcast_type="spiritual_growth"),
        PodcastItem(id="pod-energy", title="Energy Healing Techniques", podcast_type="energy_healing"),
        PodcastItem(id="pod-energy-2", title="Energy Clearing", podcast_type="energy_healing"),
    ]
