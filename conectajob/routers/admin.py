from typing import List

from fastapi import APIRouter, Depends, Response, status

from conectajob.models.schemas import PublicProfileResponse
from conectajob.routers.projects import get_marketplace
from conectajob.services.marketplace import MarketplaceService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/users", response_model=List[PublicProfileResponse])
async def list_users(include_admins: bool = False, marketplace: MarketplaceService = Depends(get_marketplace)):
    return marketplace.list_users(include_admins=include_admins)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, marketplace: MarketplaceService = Depends(get_marketplace)):
    marketplace.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
