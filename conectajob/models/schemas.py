from typing import Optional, List, Literal, Union, Annotated
from datetime import datetime, date, timezone
from enum import Enum
from pydantic import BaseModel, Field, TypeAdapter


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    CLIENT = "client"
    FREELANCER = "freelancer"
    ADMIN = "admin"

class ProjectStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class ProposalStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

class PortfolioItem(BaseModel):
    id: str
    title: str
    description: str
    image_url: Optional[str] = None

class Rating(BaseModel):
    id: str
    client_id: str
    client_name: str # Snapshot of the client's username when rating
    project_id: str
    rating: int # 1-5
    comment: str = ""
    created_at: datetime = Field(default_factory=utcnow)

class UserBase(BaseModel):
    id: str
    username: str
    email: str
    created_at: datetime = Field(default_factory=utcnow)
    profile_image: Optional[str] = None

# Public views: what the API returns and what profile updates carry.
class ClientPublic(UserBase):
    role: Literal["client"] = "client"
    description: Optional[str] = None

class FreelancerPublic(UserBase):
    role: Literal["freelancer"] = "freelancer"
    description: str = ""
    skills: List[str] = []
    portfolio: List[PortfolioItem] = []
    ratings: List[Rating] = []
    average_rating: float = 0.0
    whatsapp_number: Optional[str] = None

class AdminPublic(UserBase):
    role: Literal["admin"] = "admin"

class Credentials(BaseModel):
    password_hash: str = "" # Salted hash, never the plaintext password

# Stored records: public view plus credentials.
class ClientProfile(ClientPublic, Credentials):
    pass

class FreelancerProfile(FreelancerPublic, Credentials):
    pass

class AdminProfile(AdminPublic, Credentials):
    pass

Profile = Annotated[Union[ClientProfile, FreelancerProfile, AdminProfile], Field(discriminator="role")]
PublicProfile = Annotated[Union[ClientPublic, FreelancerPublic, AdminPublic], Field(discriminator="role")]
# Plain union for FastAPI response models; the role literal still picks the variant
PublicProfileResponse = Union[ClientPublic, FreelancerPublic, AdminPublic]

profile_adapter = TypeAdapter(Profile)
profile_list_adapter = TypeAdapter(List[Profile])
public_profile_adapter = TypeAdapter(PublicProfile)

class Proposal(BaseModel):
    id: str
    project_id: str
    freelancer_id: str
    freelancer_name: str # Snapshot of the freelancer's username
    message: str
    created_at: datetime = Field(default_factory=utcnow)
    status: ProposalStatus = ProposalStatus.PENDING

class Project(BaseModel):
    id: str
    client_id: str
    client_name: str # Snapshot of the client's username
    title: str
    description: str
    category: str # Category name, not id
    budget: float
    deadline: date
    status: ProjectStatus = ProjectStatus.OPEN
    created_at: datetime = Field(default_factory=utcnow)
    attachment_url: Optional[str] = None
    proposals: List[Proposal] = []
    hired_freelancer_id: Optional[str] = None

project_list_adapter = TypeAdapter(List[Project])

class Category(BaseModel):
    id: str
    name: str
    icon: str

category_list_adapter = TypeAdapter(List[Category])

# Request bodies. Field rules are enforced by the service layer so that
# in-process callers and HTTP callers get the same errors.
class UserCreate(BaseModel):
    username: str
    email: str
    password: str
    role: UserRole

class LoginRequest(BaseModel):
    email: str
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class AuthResponse(Token):
    user: PublicProfileResponse

class ProjectCreate(BaseModel):
    title: str
    description: str
    category: str
    budget: float
    deadline: date
    attachment_url: Optional[str] = None

class ProposalCreate(BaseModel):
    message: str

class HireRequest(BaseModel):
    freelancer_id: str
    proposal_id: str

class RatingCreate(BaseModel):
    freelancer_id: str
    project_id: str
    rating: int
    comment: str = ""
