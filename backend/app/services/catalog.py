"""
Read-only catalog access for the recommendation resolver.

Each repository loads its full catalog (no filtering pushed down) and
projects rows onto a small frozen dataclass, so the resolver only ever sees
the declared fields. Storage failures surface as SQLAlchemy errors; an empty
catalog is just an empty list and the resolver decides what that means.
"""
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, TypeVar

from sqlalchemy.orm import Session

from app.models import Service, Product, Podcast

T_co = TypeVar("T_co", covariant=True)


@dataclass(frozen=True)
class ServiceItem:
    id: str
    name: str
    price: float
    description: Optional[str] = None
    service_type: Optional[str] = None
    provider_name: Optional[str] = None
    image: Optional[str] = None


@dataclass(frozen=True)
class ProductItem:
    id: str
    name: str
    price: float
    description: Optional[str] = None
    image: Optional[str] = None


@dataclass(frozen=True)
class PodcastItem:
    id: str
    title: str
    description: Optional[str] = None
    podcast_type: Optional[str] = None
    podcast_url: Optional[str] = None
    image: Optional[str] = None


class CatalogRepository(Protocol[T_co]):
    name: str

    def find_all(self) -> Sequence[T_co]:
        ...


class ServiceCatalog:
    name = "services"

    def __init__(self, db: Session):
        self.db = db

    def find_all(self) -> List[ServiceItem]:
        rows = self.db.query(Service).order_by(Service.created_at, Service.name).all()
        return [
            ServiceItem(
                id=str(row.id),
                name=row.name,
                price=row.price,
                description=row.description,
                service_type=row.service_type,
                provider_name=row.service_provider_name,
                image=row.image,
            )
            for row in rows
        ]


class ProductCatalog:
    name = "products"

    def __init__(self, db: Session):
        self.db = db

    def find_all(self) -> List[ProductItem]:
        rows = self.db.query(Product).order_by(Product.created_at, Product.name).all()
        return [
            ProductItem(
                id=str(row.id),
                name=row.name,
                price=row.price,
                description=row.description,
                image=row.image_url,
            )
            for row in rows
        ]


class PodcastCatalog:
    name = "podcasts"

    def __init__(self, db: Session):
        self.db = db

    def find_all(self) -> List[PodcastItem]:
        rows = self.db.query(Podcast).order_by(Podcast.created_at, Podcast.title).all()
        return [
            PodcastItem(
                id=str(row.id),
                title=row.title,
                description=row.description,
                podcast_type=row.podcast_type,
                podcast_url=row.podcast_url,
                image=row.podcast_image_url,
            )
            for row in rows
        ]
