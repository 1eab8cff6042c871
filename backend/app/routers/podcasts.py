from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.models import Podcast
from app.schemas.catalog import PodcastResponse, PodcastListResponse
from app.utils.ids import parse_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/podcasts", tags=["podcasts"])


@router.get("", response_model=PodcastListResponse)
def list_podcasts(db: Session = Depends(get_db)):
    """List all podcasts, newest first."""
    podcasts = db.query(Podcast).order_by(Podcast.created_at.desc()).all()
    return PodcastListResponse(
        podcasts=[PodcastResponse.model_validate(p) for p in podcasts],
        count=len(podcasts),
    )


@router.get("/{podcast_id}", response_model=PodcastResponse)
def get_podcast(podcast_id: str, db: Session = Depends(get_db)):
    parsed = parse_uuid(podcast_id)
    podcast = db.get(Podcast, parsed) if parsed else None
    if not podcast:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Podcast not found")
    return PodcastResponse.model_validate(podcast)
