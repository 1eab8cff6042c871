from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID


class StoredServiceRecommendation(BaseModel):
    service_id: str
    name: str
    price: float
    description: Optional[str] = None
    practitioner_type: Optional[str] = None
    image: Optional[str] = None


class StoredProductRecommendation(BaseModel):
    product_id: str
    name: str
    price: float
    description: Optional[str] = None
    image: Optional[str] = None


class StoredPodcastRecommendation(BaseModel):
    podcast_id: str
    title: str
    episode: str
    description: Optional[str] = None
    link: Optional[str] = None
    image: Optional[str] = None


class UserRecommendationSet(BaseModel):
    services: List[StoredServiceRecommendation] = Field(default_factory=list)
    products: List[StoredProductRecommendation] = Field(default_factory=list)
    podcasts: List[StoredPodcastRecommendation] = Field(default_factory=list)


class UserRecommendationsResponse(BaseModel):
    recommendations: UserRecommendationSet
    created_at: Optional[datetime] = None


class RecommendationHistoryEntry(BaseModel):
    id: UUID
    created_at: datetime
    services_count: int
    products_count: int
    podcasts_count: int


class RecommendationHistoryResponse(BaseModel):
    history: List[RecommendationHistoryEntry]
