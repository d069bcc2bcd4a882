import logging
import math
from typing import List, Optional, Type, Union
from uuid import uuid4

from conectajob.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from conectajob.db.state import AppState
from conectajob.models.schemas import (
    AdminProfile,
    AdminPublic,
    Category,
    ClientProfile,
    ClientPublic,
    FreelancerProfile,
    FreelancerPublic,
    Profile,
    Project,
    ProjectCreate,
    ProjectStatus,
    Proposal,
    ProposalStatus,
    Rating,
    UserRole,
)
from conectajob.services import validation
from conectajob.services.session import Session

logger = logging.getLogger(__name__)


class MarketplaceService:
    """
    Project / proposal / rating lifecycle on top of an AppState.

    Each operation checks the session first, validates everything it needs,
    and only then mutates the in-memory collections and writes the whole
    collection back. A rejected operation leaves state and storage untouched.
    """

    def __init__(self, state: AppState, session: Session):
        self.state = state
        self.session = session

    # --- helpers ---

    def _require_role(self, role: UserRole, message: str) -> Profile:
        user = self.session.require_user()
        if user.role != role.value:
            logger.warning("%s: user %s has role %s", message, user.id, user.role)
            raise PermissionDeniedError(message)
        return user

    def _get_project(self, project_id: str) -> Project:
        project = self.state.find_project(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def _require_owner(self, project: Project, allow_admin: bool = False) -> Profile:
        user = self.session.require_user()
        if user.id == project.client_id:
            return user
        if allow_admin and user.role == UserRole.ADMIN.value:
            return user
        logger.warning("User %s is not allowed to modify project %s", user.id, project.id)
        raise PermissionDeniedError("You do not have permission to modify this project")

    # --- projects ---

    def create_project(self, data: ProjectCreate) -> Project:
        client = self._require_role(UserRole.CLIENT, "You must be logged in as a client to create a project")

        validation.validate_project_title(data.title)
        validation.validate_project_description(data.description)
        validation.validate_project_budget(data.budget)
        validation.validate_project_deadline(data.deadline)
        if self.state.find_category(data.category) is None:
            raise ValidationError(f"Unknown category '{data.category}'")

        project = Project(
            id=str(uuid4()),
            client_id=client.id,
            client_name=client.username,
            title=data.title,
            description=data.description,
            category=data.category,
            budget=data.budget,
            deadline=data.deadline,
            attachment_url=data.attachment_url,
        )
        self.state.projects.append(project)
        self.state.persist_projects()
        logger.info("Project %s created by %s", project.id, client.id)
        return project

    def delete_project(self, project_id: str) -> None:
        self.session.require_user()
        project = self._get_project(project_id)
        self._require_owner(project, allow_admin=True)

        self.state.projects = [p for p in self.state.projects if p.id != project_id]
        self.state.persist_projects()
        logger.info("Project %s deleted", project_id)

    def complete_project(self, project_id: str) -> Project:
        self.session.require_user()
        project = self._get_project(project_id)
        self._require_owner(project, allow_admin=True)
        if project.status == ProjectStatus.COMPLETED:
            raise ValidationError("Project is already completed")

        project.status = ProjectStatus.COMPLETED
        self.state.persist_projects()
        logger.info("Project %s completed", project_id)
        return project

    # --- proposals ---

    def submit_proposal(self, project_id: str, message: str) -> Proposal:
        freelancer = self._require_role(UserRole.FREELANCER, "You must be logged in as a freelancer to submit a proposal")
        project = self._get_project(project_id)

        if not message or not message.strip():
            raise ValidationError("Proposal message cannot be empty")
        if project.status in (ProjectStatus.COMPLETED, ProjectStatus.CANCELLED):
            raise ValidationError("Project is no longer accepting proposals")
        if any(p.freelancer_id == freelancer.id for p in project.proposals):
            logger.warning("Freelancer %s already has a proposal on %s", freelancer.id, project_id)
            raise ConflictError("You have already submitted a proposal for this project")

        proposal = Proposal(
            id=str(uuid4()),
            project_id=project_id,
            freelancer_id=freelancer.id,
            freelancer_name=freelancer.username,
            message=message,
        )
        project.proposals.append(proposal)
        self.state.persist_projects()
        logger.info("Proposal %s submitted on project %s", proposal.id, project_id)
        return proposal

    def hire_freelancer(self, project_id: str, freelancer_id: str, proposal_id: str) -> Project:
        self._require_role(UserRole.CLIENT, "You must be logged in as a client to hire a freelancer")
        project = self._get_project(project_id)
        self._require_owner(project)

        proposal = next((p for p in project.proposals if p.id == proposal_id), None)
        if proposal is None:
            raise NotFoundError("Proposal not found")
        if proposal.freelancer_id != freelancer_id:
            raise ValidationError("Proposal does not belong to this freelancer")
        if project.status not in (ProjectStatus.OPEN, ProjectStatus.IN_PROGRESS):
            raise ValidationError(f"Cannot hire on a project that is {project.status.value}")

        for p in project.proposals:
            if p.id == proposal_id:
                p.status = ProposalStatus.ACCEPTED
            elif p.status == ProposalStatus.ACCEPTED:
                p.status = ProposalStatus.PENDING
        project.hired_freelancer_id = freelancer_id
        project.status = ProjectStatus.IN_PROGRESS
        self.state.persist_projects()
        logger.info("Freelancer %s hired on project %s", freelancer_id, project_id)
        return project

    def remove_hired_freelancer(self, project_id: str) -> Project:
        self._require_role(UserRole.CLIENT, "You must be logged in as a client to remove a freelancer")
        project = self._get_project(project_id)
        self._require_owner(project)
        if project.status != ProjectStatus.IN_PROGRESS:
            raise ValidationError("Project has no hired freelancer")

        for p in project.proposals:
            p.status = ProposalStatus.PENDING
        project.hired_freelancer_id = None
        project.status = ProjectStatus.OPEN
        self.state.persist_projects()
        logger.info("Hired freelancer removed from project %s", project_id)
        return project

    # --- ratings ---

    def add_rating(self, freelancer_id: str, project_id: str, rating: int, comment: str = "") -> FreelancerProfile:
        client = self._require_role(UserRole.CLIENT, "You must be logged in as a client to add a rating")
        validation.validate_rating_value(rating)

        freelancer = self.get_freelancer_by_id(freelancer_id)
        if freelancer is None:
            raise NotFoundError("Freelancer not found")
        self._get_project(project_id)

        if any(r.client_id == client.id and r.project_id == project_id for r in freelancer.ratings):
            raise ConflictError("You have already rated this freelancer for this project")

        freelancer.ratings.append(Rating(
            id=str(uuid4()),
            client_id=client.id,
            client_name=client.username,
            project_id=project_id,
            rating=rating,
            comment=comment,
        ))
        # Always recomputed from the full list
        freelancer.average_rating = sum(r.rating for r in freelancer.ratings) / len(freelancer.ratings)
        self.state.persist_users()
        logger.info("Rating added to freelancer %s (average %.2f)", freelancer_id, freelancer.average_rating)
        return freelancer

    # --- users ---

    def delete_user(self, user_id: str) -> None:
        self._require_role(UserRole.ADMIN, "You must be logged in as an admin to delete a user")
        self._delete_user_and_projects(user_id)

    def remove_user(self, user_id: str) -> None:
        user = self.session.require_user()
        if user.id != user_id and user.role != UserRole.ADMIN.value:
            raise PermissionDeniedError("You do not have permission to remove this user")
        self._delete_user_and_projects(user_id)

    def _delete_user_and_projects(self, user_id: str) -> None:
        target = self.state.find_user_by_id(user_id)
        if target is None:
            raise NotFoundError("User not found")
        if target.role == UserRole.ADMIN.value:
            admins = [u for u in self.state.users if u.role == UserRole.ADMIN.value]
            # At least one admin account must remain
            if len(admins) == 1:
                raise ConflictError("Cannot delete the last admin account")

        self.state.users = [u for u in self.state.users if u.id != user_id]
        self.state.persist_users()

        # Only projects the user owns as a client; proposals and ratings elsewhere stay
        remaining = [p for p in self.state.projects if p.client_id != user_id]
        if len(remaining) != len(self.state.projects):
            self.state.projects = remaining
            self.state.persist_projects()

        if self.session.current_user is not None and self.session.current_user.id == user_id:
            self.session.clear()
        logger.info("User %s deleted", user_id)

    def update_freelancer_profile(self, profile: FreelancerPublic) -> FreelancerProfile:
        return self._replace_profile(profile, UserRole.FREELANCER, FreelancerProfile)

    def update_client_profile(self, profile: ClientPublic) -> ClientProfile:
        return self._replace_profile(profile, UserRole.CLIENT, ClientProfile)

    def update_admin_profile(self, profile: AdminPublic) -> AdminProfile:
        return self._replace_profile(profile, UserRole.ADMIN, AdminProfile)

    def _replace_profile(
        self,
        profile: Union[ClientPublic, FreelancerPublic, AdminPublic],
        role: UserRole,
        model: Type[Union[ClientProfile, FreelancerProfile, AdminProfile]],
    ):
        user = self.session.require_user()
        if user.id != profile.id:
            raise PermissionDeniedError("You do not have permission to update this profile")

        index = next((i for i, u in enumerate(self.state.users) if u.id == profile.id), None)
        if index is None:
            raise NotFoundError("User not found")
        stored = self.state.users[index]
        if stored.role != role.value or profile.role != role.value:
            raise ValidationError(f"Profile {profile.id} is not a {role.value} profile")

        validation.validate_username(profile.username)
        validation.validate_email(profile.email)
        other = self.state.find_user_by_email(profile.email)
        if other is not None and other.id != profile.id:
            raise ConflictError("User with this email already exists")

        data = profile.model_dump(exclude={"password_hash", "created_at"})
        data["password_hash"] = stored.password_hash
        data["created_at"] = stored.created_at
        if role == UserRole.FREELANCER:
            # Ratings are only ever written through add_rating
            data["ratings"] = stored.ratings
            data["average_rating"] = stored.average_rating
        updated = model.model_validate(data)

        self.state.users[index] = updated
        self.state.persist_users()
        if self.session.current_user is not None and self.session.current_user.id == updated.id:
            self.session.establish(updated)
        logger.info("Profile %s updated", updated.id)
        return updated

    # --- queries ---

    def get_project_by_id(self, project_id: str) -> Optional[Project]:
        return self.state.find_project(project_id)

    def get_projects_by_user(self, user_id: str) -> List[Project]:
        return [p for p in self.state.projects if p.client_id == user_id]

    def get_freelancers(self) -> List[FreelancerProfile]:
        return [u for u in self.state.users if u.role == UserRole.FREELANCER.value]

    def get_freelancer_by_id(self, freelancer_id: str) -> Optional[FreelancerProfile]:
        return next((u for u in self.get_freelancers() if u.id == freelancer_id), None)

    def list_categories(self) -> List[Category]:
        return list(self.state.categories)

    def list_users(self, include_admins: bool = False) -> List[Profile]:
        self._require_role(UserRole.ADMIN, "You must be logged in as an admin to list users")
        if include_admins:
            return list(self.state.users)
        return [u for u in self.state.users if u.role != UserRole.ADMIN.value]

    def search_projects(
        self,
        query: Optional[str] = None,
        category: Optional[str] = None,
        min_budget: float = 0,
        max_budget: Optional[float] = None,
    ) -> List[Project]:
        results = list(self.state.projects)
        if query:
            needle = query.lower()
            results = [p for p in results if needle in p.title.lower() or needle in p.description.lower()]
        if category and category != "all":
            results = [p for p in results if p.category == category]
        results = [
            p for p in results
            if p.budget >= min_budget and (max_budget is None or p.budget <= max_budget)
        ]
        return sorted(results, key=lambda p: p.created_at, reverse=True)

    def search_freelancers(self, query: Optional[str] = None, min_rating: Optional[int] = None) -> List[FreelancerProfile]:
        results = self.get_freelancers()
        if query and query.strip():
            needle = query.lower()
            results = [
                f for f in results
                if needle in f.username.lower()
                or needle in f.description.lower()
                or any(needle in skill.lower() for skill in f.skills)
            ]
        if min_rating is not None:
            results = [f for f in results if math.floor(f.average_rating) >= min_rating]
        return sorted(results, key=lambda f: f.average_rating, reverse=True)
