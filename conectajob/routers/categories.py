from typing import List

from fastapi import APIRouter, Depends

from conectajob.models.schemas import Category
from conectajob.routers.projects import get_marketplace
from conectajob.services.marketplace import MarketplaceService

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=List[Category])
async def list_categories(marketplace: MarketplaceService = Depends(get_marketplace)):
    return marketplace.list_categories()
