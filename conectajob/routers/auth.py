from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordBearer

from conectajob.core.errors import AuthError
from conectajob.core.security import create_access_token, decode_access_token
from conectajob.db.state import get_app_state
from conectajob.models.schemas import AuthResponse, LoginRequest, PublicProfileResponse, UserCreate
from conectajob.services.session import AuthService, Session

router = APIRouter(prefix="/auth", tags=["Authentication"])

# auto_error=False: read-only endpoints work without a token, and operations
# that need a user raise AuthError from the service layer instead.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_session(token: Optional[str] = Depends(oauth2_scheme)) -> Session:
    """Builds a request-scoped session for the bearer token's user."""
    if not token:
        return Session()

    user_id_from_token = decode_access_token(token)
    if not user_id_from_token:
        raise AuthError("Could not validate credentials")

    user = get_app_state().find_user_by_id(user_id_from_token)
    if user is None:
        raise AuthError("Could not validate credentials")
    return Session(user)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user_in: UserCreate):
    auth = AuthService(get_app_state(), Session())
    user = auth.register(user_in.username, user_in.email, user_in.password, user_in.role)
    access_token = create_access_token(data={"sub": user.id})
    return AuthResponse(access_token=access_token, user=user)


@router.post("/login", response_model=AuthResponse)
async def login_for_access_token(credentials: LoginRequest):
    auth = AuthService(get_app_state(), Session())
    user = auth.login(credentials.email, credentials.password)
    access_token = create_access_token(data={"sub": user.id})
    return AuthResponse(access_token=access_token, user=user)


@router.get("/me", response_model=PublicProfileResponse)
async def read_users_me(session: Session = Depends(get_session)):
    return session.require_user()


@router.post("/logout")
async def logout(session: Session = Depends(get_session)):
    # Tokens are stateless; the client discards its copy.
    AuthService(get_app_state(), session).logout()
    return {"message": "Logout successful. Please discard your token."}
