"""
api/routes/v1/posts.py -- Marketplace listing endpoints.

Routes:
  GET    /posts          -- list posts (optional auth); filters + sort via query
  POST   /posts          -- create a post owned by the caller (requires auth)
  GET    /posts/{id}     -- single post (optional auth)
  PATCH  /posts/{id}     -- partial update, owner only (requires auth)
  DELETE /posts/{id}     -- delete, owner only (requires auth)

Query parameters for GET /posts:
  sort_by    "price" | "created_at" (default created_at; anything else -> default)
  order      "asc" | "desc" (default desc; anything else -> default)
  min_price  >= 0, negative, absent or non-numeric -> 0
  max_price  >= 0, negative, absent or non-numeric -> unbounded; swapped with min_price if smaller
  owner      exact-match filter on the post author

is_owner in every response reflects the caller's bearer token, never the
owner query parameter. Anonymous callers always see is_owner=false.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from api.models import PostCreate, PostResponse, PostUpdate
from auth.dependencies import get_current_identity, try_get_identity
from auth.models import Identity
from posts.models import FilterParams, SortParams
from posts.service import PostService

router = APIRouter()


def _service(request: Request) -> PostService:
    return request.app.state.post_service


@router.get("/posts", response_model=list[PostResponse])
def list_posts(
    request: Request,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    min_price: Optional[str] = None,
    max_price: Optional[str] = None,
    owner: Optional[str] = None,
    viewer: Optional[Identity] = Depends(try_get_identity),
) -> list[PostResponse]:
    """Return posts in the requested price range and order."""
    posts = _service(request).get_posts(
        SortParams.parse(sort_by, order),
        FilterParams.parse(min_price, max_price, owner),
        viewer,
    )
    return [PostResponse.from_post(p) for p in posts]


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(
    request: Request,
    body: PostCreate,
    identity: Identity = Depends(get_current_identity),
) -> PostResponse:
    """Create a post. The owner is always the authenticated caller."""
    post = _service(request).create_post(body.to_draft(), identity)
    return PostResponse.from_post(post)


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(
    request: Request,
    post_id: int,
    viewer: Optional[Identity] = Depends(try_get_identity),
) -> PostResponse:
    post = _service(request).get_post_by_id(post_id, viewer)
    return PostResponse.from_post(post)


@router.patch("/posts/{post_id}", response_model=PostResponse)
def update_post(
    request: Request,
    post_id: int,
    body: PostUpdate,
    identity: Identity = Depends(get_current_identity),
) -> PostResponse:
    """Merge the supplied fields into the caller's post. 403 if the caller is not the owner."""
    post = _service(request).update_post(post_id, body.to_patch(), identity)
    return PostResponse.from_post(post)


@router.delete("/posts/{post_id}", status_code=204)
def delete_post(
    request: Request,
    post_id: int,
    identity: Identity = Depends(get_current_identity),
) -> Response:
    """Delete the caller's post. 403 if the caller is not the owner."""
    _service(request).delete_post(post_id, identity)
    return Response(status_code=204)
