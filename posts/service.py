"""
posts/service.py -- Content validation and ownership rules for posts.

PostService sits between the HTTP layer and the post store:

  - create_post() validates content and stamps the owner from the caller's
    Identity. Drafts cannot name an owner.
  - update_post() / delete_post() load the post first and refuse with
    UnauthorizedError unless the caller owns it. A refused call never writes.
  - Read paths compute is_owner for the viewer. Anonymous viewers (None)
    never own anything.

Concurrent updates from the same owner are last-write-wins.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from auth.models import Identity
from core.errors import PostNotFoundError, UnauthorizedError, ValidationError
from core.validation import validate_post_fields
from posts.models import FilterParams, Post, PostDraft, PostPatch, SortParams


class PostRepository(Protocol):
    def create_post(self, post: Post) -> Post: ...

    def get_by_id(self, post_id: int) -> Optional[Post]: ...

    def query(self, sort: SortParams, filter: FilterParams) -> list[Post]: ...

    def update_post(self, post: Post) -> bool: ...

    def delete_post(self, post_id: int) -> bool: ...


def _mark_owner(post: Post, viewer: Optional[Identity]) -> Post:
    post.is_owner = viewer is not None and bool(viewer.login) and post.owner == viewer.login
    return post


class PostService:
    def __init__(self, store: PostRepository, logger: logging.Logger | None = None) -> None:
        self.store = store
        self.logger = logger or logging.getLogger("marketplace.posts")

    def create_post(self, draft: PostDraft, owner: Identity) -> Post:
        """Validate draft and persist it as a post owned by owner."""
        image_url = draft.image_url.strip()
        try:
            validate_post_fields(draft.title, draft.description, draft.price, image_url)
        except ValidationError as exc:
            self.logger.info("create_post rejected for %s: %s", owner.login, exc.code)
            raise
        post = Post(
            title=draft.title,
            description=draft.description,
            price=draft.price,
            image_url=image_url,
            owner=owner.login,
        )
        created = self.store.create_post(post)
        self.logger.info("post %s created by %s", created.id, owner.login)
        created.is_owner = True
        return created

    def get_posts(
        self,
        sort: Optional[SortParams] = None,
        filter: Optional[FilterParams] = None,
        viewer: Optional[Identity] = None,
    ) -> list[Post]:
        """List posts matching filter in sort order, with is_owner set for viewer."""
        sort = SortParams.parse(sort.field, sort.direction) if sort is not None else SortParams()
        filter = (filter or FilterParams()).normalized()
        posts = self.store.query(sort, filter)
        return [_mark_owner(p, viewer) for p in posts]

    def get_post_by_id(self, post_id: int, viewer: Optional[Identity] = None) -> Post:
        post = self.store.get_by_id(post_id)
        if post is None:
            raise PostNotFoundError()
        return _mark_owner(post, viewer)

    def update_post(self, post_id: int, patch: PostPatch, caller: Identity) -> Post:
        """Merge patch into the caller's post, re-validate, and persist.

        Raises PostNotFoundError, UnauthorizedError, or a ValidationError for
        the merged content. owner is never changed.
        """
        existing = self._load_owned(post_id, caller, "update")
        merged = patch.apply_to(existing)
        merged.image_url = merged.image_url.strip()
        validate_post_fields(merged.title, merged.description, merged.price, merged.image_url)
        if not self.store.update_post(merged):
            # Deleted between the load and the write.
            raise PostNotFoundError()
        self.logger.info("post %s updated by %s", post_id, caller.login)
        return _mark_owner(merged, caller)

    def delete_post(self, post_id: int, caller: Identity) -> None:
        self._load_owned(post_id, caller, "delete")
        if not self.store.delete_post(post_id):
            raise PostNotFoundError()
        self.logger.info("post %s deleted by %s", post_id, caller.login)

    def _load_owned(self, post_id: int, caller: Identity, action: str) -> Post:
        post = self.store.get_by_id(post_id)
        if post is None:
            raise PostNotFoundError()
        if post.owner != caller.login:
            self.logger.warning("%s of post %s denied: %s is not the owner", action, post_id, caller.login)
            raise UnauthorizedError()
        return post
