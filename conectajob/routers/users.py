from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import ValidationError as PydanticValidationError

from conectajob.core.errors import NotFoundError, ValidationError
from conectajob.models.schemas import (
    AdminPublic,
    ClientPublic,
    FreelancerPublic,
    Project,
    PublicProfileResponse,
    public_profile_adapter,
)
from conectajob.routers.projects import get_marketplace
from conectajob.services.marketplace import MarketplaceService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/freelancers", response_model=List[FreelancerPublic])
async def list_freelancers(
    q: Optional[str] = None,
    min_rating: Optional[int] = None,
    marketplace: MarketplaceService = Depends(get_marketplace),
):
    return marketplace.search_freelancers(query=q, min_rating=min_rating)


@router.get("/freelancers/{freelancer_id}", response_model=FreelancerPublic)
async def get_freelancer_profile(freelancer_id: str, marketplace: MarketplaceService = Depends(get_marketplace)):
    freelancer = marketplace.get_freelancer_by_id(freelancer_id)
    if freelancer is None:
        raise NotFoundError("Freelancer not found")
    return freelancer


@router.get("/{user_id}/projects", response_model=List[Project])
async def list_user_projects(user_id: str, marketplace: MarketplaceService = Depends(get_marketplace)):
    return marketplace.get_projects_by_user(user_id)


@router.put("/me/profile", response_model=PublicProfileResponse)
async def update_user_profile(
    profile_data: Dict[str, Any],
    marketplace: MarketplaceService = Depends(get_marketplace),
):
    """
    Replaces the caller's profile with the submitted record.
    The record's `role` picks the profile type. It replaces the stored record
    wholesale, so omitted optional fields fall back to their defaults.
    """
    try:
        profile = public_profile_adapter.validate_python(profile_data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid profile: {e.errors()[0]['msg']}")

    if isinstance(profile, FreelancerPublic):
        return marketplace.update_freelancer_profile(profile)
    if isinstance(profile, ClientPublic):
        return marketplace.update_client_profile(profile)
    if isinstance(profile, AdminPublic):
        return marketplace.update_admin_profile(profile)
    raise ValidationError(f"Unsupported role '{profile.role}'")


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_user(user_id: str, marketplace: MarketplaceService = Depends(get_marketplace)):
    marketplace.remove_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
