"""Authentication endpoints: register, login, current user."""

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from notespace.api.deps import CurrentPrincipal, Store, Tokens
from notespace.services import accounts
from notespace.services.accounts import MeResponse, SessionResponse

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    """Everything needed to create a tenant and its first admin in one call."""
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)
    tenant_name: str = Field(min_length=1, max_length=255)
    tenant_slug: str | None = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    email: str
    password: str


# ── Routes ───────────────────────────────────────────────────

@router.post(
    "/register",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new tenant and its admin",
)
async def register(body: RegisterRequest, store: Store, tokens: Tokens) -> SessionResponse:
    """This is the only unauthenticated write endpoint."""
    return await accounts.register(
        store,
        tokens,
        email=body.email,
        password=body.password,
        tenant_name=body.tenant_name,
        tenant_slug=body.tenant_slug,
    )


@router.post("/login", response_model=SessionResponse)
async def login(body: LoginRequest, store: Store, tokens: Tokens) -> SessionResponse:
    """Authenticate with email + password, receive a JWT."""
    return await accounts.login(store, tokens, email=body.email, password=body.password)


@router.get("/me", response_model=MeResponse)
async def get_me(principal: CurrentPrincipal, store: Store) -> MeResponse:
    """Return the current authenticated user and their tenant."""
    return await accounts.me(store, principal)
