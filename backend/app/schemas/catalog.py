from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime
from uuid import UUID


class ServiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str]
    image: Optional[str]
    service_provider_name: Optional[str]
    price: float
    service_type: Optional[str]
    created_at: Optional[datetime]


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str]
    price: float
    image_url: Optional[str]
    stock: Optional[int]
    created_at: Optional[datetime]


class PodcastResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str]
    podcast_image_url: Optional[str]
    podcast_url: Optional[str]
    podcast_type: Optional[str]
    created_at: Optional[datetime]


class ServiceListResponse(BaseModel):
    services: list[ServiceResponse]
    count: int


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    count: int


class PodcastListResponse(BaseModel):
    podcasts: list[PodcastResponse]
    count: int
