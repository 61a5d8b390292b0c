"""
API request and response models for the marketplace REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
posts/models.py, which own the internal domain representation. Route handlers
map between the two.

Request models only check shape (types, presence). Content rules -- login
format, password strength, post lengths, image URLs -- belong to the services
so every caller gets the same error codes.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from posts.models import Post, PostDraft, PostPatch

# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    """Request body for POST /auth/register and POST /auth/login."""

    login: str
    password: str = Field(max_length=255)


class RegisterResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    login: str


class MeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class PostCreate(BaseModel):
    """Request body for POST /posts.

    Missing text fields default to "" so the service reports missing_fields
    rather than the framework reporting a schema error. Unknown keys such as
    "owner" are dropped.
    """

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    description: str = ""
    price: float = Field(default=0.0, allow_inf_nan=False)
    image_url: str = ""

    def to_draft(self) -> PostDraft:
        return PostDraft(
            title=self.title,
            description=self.description,
            price=self.price,
            image_url=self.image_url,
        )


class PostUpdate(BaseModel):
    """Request body for PATCH /posts/{id}. Omitted or null fields are left unchanged."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, allow_inf_nan=False)
    image_url: Optional[str] = None

    def to_patch(self) -> PostPatch:
        return PostPatch(
            title=self.title,
            description=self.description,
            price=self.price,
            image_url=self.image_url,
        )


class PostResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str
    price: float
    image_url: str
    owner: str
    created_at: str
    is_owner: bool

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            title=post.title,
            description=post.description,
            price=post.price,
            image_url=post.image_url,
            owner=post.owner,
            created_at=post.created_at,
            is_owner=post.is_owner,
        )
