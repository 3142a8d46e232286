"""
Carousel Endpoint
Active promotional banners for the home page.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...catalog.carousel import CarouselRepository
from ..dependencies import get_db
from ..schemas.products import CarouselItemResponse

router = APIRouter(prefix="/api/v1", tags=["carousel"])


@router.get("/carousel", response_model=List[CarouselItemResponse])
async def list_active_carousel(db: Session = Depends(get_db)) -> List[CarouselItemResponse]:
    """Active carousel items in ascending display order."""
    items = CarouselRepository(db).list_active()
    return [CarouselItemResponse.model_validate(item) for item in items]
