from fastapi import APIRouter, Depends, status

from conectajob.models.schemas import FreelancerPublic, RatingCreate
from conectajob.routers.projects import get_marketplace
from conectajob.services.marketplace import MarketplaceService

router = APIRouter(prefix="/ratings", tags=["Ratings"])


@router.post("/", response_model=FreelancerPublic, status_code=status.HTTP_201_CREATED)
async def add_rating(rating_in: RatingCreate, marketplace: MarketplaceService = Depends(get_marketplace)):
    """Rates a freelancer for a project and returns the freelancer with the new average."""
    return marketplace.add_rating(
        freelancer_id=rating_in.freelancer_id,
        project_id=rating_in.project_id,
        rating=rating_in.rating,
        comment=rating_in.comment,
    )
