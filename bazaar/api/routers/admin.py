"""
Admin Endpoints
Sponsorship, carousel curation, and role management.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from ...auth.roles import Role
from ...dashboard import AdminDashboard
from ..dependencies import get_admin_dashboard, get_db
from ..schemas.admin import RoleChangeRequest, RoleChangeResponse, UserRolesResponse
from ..schemas.auth import ErrorResponse
from ..schemas.products import CarouselItemResponse, ProductResponse
from ..uploads import read_image_upload
from .products import product_responses

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["admin"],
    responses={
        401: {"model": ErrorResponse, "description": "Not signed in"},
        403: {"model": ErrorResponse, "description": "Admin role required"},
    },
)


def _sorted_roles(roles) -> List[str]:
    return sorted(role.value for role in roles)


# Products

@router.get("/products", response_model=List[ProductResponse])
async def list_all_products(
    dashboard: AdminDashboard = Depends(get_admin_dashboard),
    db: Session = Depends(get_db),
) -> List[ProductResponse]:
    """Every product, newest first."""
    return product_responses(db, dashboard.list_products())


@router.post(
    "/products/{product_id}/sponsorship/toggle",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def toggle_sponsorship(
    product_id: UUID,
    dashboard: AdminDashboard = Depends(get_admin_dashboard),
    db: Session = Depends(get_db),
) -> ProductResponse:
    return product_responses(db, [dashboard.toggle_sponsorship(product_id)])[0]


# Carousel

@router.get("/carousel", response_model=List[CarouselItemResponse])
async def list_carousel(
    dashboard: AdminDashboard = Depends(get_admin_dashboard),
) -> List[CarouselItemResponse]:
    """All carousel items, active or not, in display order."""
    return [CarouselItemResponse.model_validate(item) for item in dashboard.list_carousel()]


@router.post(
    "/carousel",
    response_model=CarouselItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Image missing"},
        413: {"model": ErrorResponse, "description": "Image larger than 2 MiB"},
    },
)
async def create_carousel_item(
    image: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None, max_length=255),
    subtitle: Optional[str] = Form(None, max_length=255),
    link_url: Optional[str] = Form(None, max_length=2048),
    display_order: int = Form(0),
    is_active: bool = Form(True),
    dashboard: AdminDashboard = Depends(get_admin_dashboard),
) -> CarouselItemResponse:
    fields = {
        "title": title,
        "subtitle": subtitle,
        "link_url": link_url,
        "display_order": display_order,
        "is_active": is_active,
    }
    upload = await read_image_upload(image, dashboard.images.max_bytes)
    item = dashboard.create_carousel_item(fields, upload)
    return CarouselItemResponse.model_validate(item)


@router.patch(
    "/carousel/{item_id}",
    response_model=CarouselItemResponse,
    responses={
        404: {"model": ErrorResponse},
        413: {"model": ErrorResponse, "description": "Image larger than 2 MiB"},
    },
)
async def update_carousel_item(
    item_id: UUID,
    image: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None, max_length=255),
    subtitle: Optional[str] = Form(None, max_length=255),
    link_url: Optional[str] = Form(None, max_length=2048),
    display_order: Optional[int] = Form(None),
    is_active: Optional[bool] = Form(None),
    dashboard: AdminDashboard = Depends(get_admin_dashboard),
) -> CarouselItemResponse:
    """Edit a carousel item. Omitted fields keep their values."""
    submitted = {
        "title": title,
        "subtitle": subtitle,
        "link_url": link_url,
        "display_order": display_order,
        "is_active": is_active,
    }
    changes = {name: value for name, value in submitted.items() if value is not None}
    upload = await read_image_upload(image, dashboard.images.max_bytes)
    item = dashboard.update_carousel_item(item_id, changes, upload)
    return CarouselItemResponse.model_validate(item)


@router.delete(
    "/carousel/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_carousel_item(
    item_id: UUID,
    dashboard: AdminDashboard = Depends(get_admin_dashboard),
) -> None:
    dashboard.delete_carousel_item(item_id)


# Roles

@router.get("/users", response_model=List[UserRolesResponse])
async def list_users(
    dashboard: AdminDashboard = Depends(get_admin_dashboard),
) -> List[UserRolesResponse]:
    """Every account with the roles it holds."""
    return [
        UserRolesResponse(
            id=entry.profile.id,
            email=entry.profile.email,
            full_name=entry.profile.full_name,
            created_at=entry.profile.created_at,
            roles=_sorted_roles(entry.roles),
        )
        for entry in dashboard.list_users()
    ]


@router.post(
    "/users/{user_id}/roles",
    response_model=RoleChangeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse, "description": "Unknown user"},
        409: {"model": ErrorResponse, "description": "Role already held"},
    },
)
async def grant_role(
    user_id: UUID,
    request: RoleChangeRequest,
    dashboard: AdminDashboard = Depends(get_admin_dashboard),
) -> RoleChangeResponse:
    roles = dashboard.grant_role(user_id, request.role)
    return RoleChangeResponse(
        user_id=user_id,
        roles=_sorted_roles(roles),
        message=f"Added {request.role.value} role",
    )


@router.delete(
    "/users/{user_id}/roles/{role}",
    response_model=RoleChangeResponse,
    responses={404: {"model": ErrorResponse, "description": "Role not held"}},
)
async def revoke_role(
    user_id: UUID,
    role: Role,
    dashboard: AdminDashboard = Depends(get_admin_dashboard),
) -> RoleChangeResponse:
    roles = dashboard.revoke_role(user_id, role)
    return RoleChangeResponse(
        user_id=user_id,
        roles=_sorted_roles(roles),
        message=f"Removed {role.value} role",
    )
