from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.models import Product
from app.schemas.catalog import ProductResponse, ProductListResponse
from app.utils.ids import parse_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
def list_products(db: Session = Depends(get_db)):
    """List all products, newest first."""
    products = db.query(Product).order_by(Product.created_at.desc()).all()
    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in products],
        count=len(products),
    )


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, db: Session = Depends(get_db)):
    parsed = parse_uuid(product_id)
    product = db.get(Product, parsed) if parsed else None
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductResponse.model_validate(product)
