from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from conectajob.core.errors import NotFoundError
from conectajob.db.state import get_app_state
from conectajob.models.schemas import HireRequest, Project, ProjectCreate, Proposal, ProposalCreate
from conectajob.routers.auth import get_session
from conectajob.services.marketplace import MarketplaceService
from conectajob.services.session import Session

router = APIRouter(prefix="/projects", tags=["Projects"])


def get_marketplace(session: Session = Depends(get_session)) -> MarketplaceService:
    return MarketplaceService(get_app_state(), session)


@router.post("/", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(project_in: ProjectCreate, marketplace: MarketplaceService = Depends(get_marketplace)):
    return marketplace.create_project(project_in)


@router.get("/", response_model=List[Project])
async def list_projects(
    q: Optional[str] = None,
    category: Optional[str] = None,
    min_budget: float = 0,
    max_budget: Optional[float] = None,
    marketplace: MarketplaceService = Depends(get_marketplace),
):
    return marketplace.search_projects(query=q, category=category, min_budget=min_budget, max_budget=max_budget)


@router.get("/{project_id}", response_model=Project)
async def get_project_details(project_id: str, marketplace: MarketplaceService = Depends(get_marketplace)):
    project = marketplace.get_project_by_id(project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return project


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, marketplace: MarketplaceService = Depends(get_marketplace)):
    marketplace.delete_project(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{project_id}/complete", response_model=Project)
async def complete_project(project_id: str, marketplace: MarketplaceService = Depends(get_marketplace)):
    return marketplace.complete_project(project_id)


@router.post("/{project_id}/proposals", response_model=Proposal, status_code=status.HTTP_201_CREATED)
async def submit_proposal(
    project_id: str,
    proposal_in: ProposalCreate,
    marketplace: MarketplaceService = Depends(get_marketplace),
):
    return marketplace.submit_proposal(project_id, proposal_in.message)


@router.post("/{project_id}/hire", response_model=Project)
async def hire_freelancer(
    project_id: str,
    hire_in: HireRequest,
    marketplace: MarketplaceService = Depends(get_marketplace),
):
    return marketplace.hire_freelancer(project_id, hire_in.freelancer_id, hire_in.proposal_id)


@router.delete("/{project_id}/hire", response_model=Project)
async def remove_hired_freelancer(project_id: str, marketplace: MarketplaceService = Depends(get_marketplace)):
    return marketplace.remove_hired_freelancer(project_id)
