from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.models import Service
from app.schemas.catalog import ServiceResponse, ServiceListResponse
from app.utils.ids import parse_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["services"])


@router.get("", response_model=ServiceListResponse)
def list_services(db: Session = Depends(get_db)):
    """List all services, newest first."""
    services = db.query(Service).order_by(Service.created_at.desc()).all()
    return ServiceListResponse(
        services=[ServiceResponse.model_validate(s) for s in services],
        count=len(services),
    )


@router.get("/{service_id}", response_model=ServiceResponse)
def get_service(service_id: str, db: Session = Depends(get_db)):
    parsed = parse_uuid(service_id)
    service = db.get(Service, parsed) if parsed else None
    if not service:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return ServiceResponse.model_validate(service)
