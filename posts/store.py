"""
posts/store.py -- SQLAlchemy-backed persistence layer for marketplace posts.

Uses SQLAlchemy Core (not ORM) so the dataclasses in posts/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. PostStore is the repository; _row_to_post
is the mapper. The service layer never touches SQL directly.

Security: all queries use bound parameters. Sort columns are chosen from a
fixed mapping, never interpolated from input.

Usage:
    store = PostStore("sqlite:///marketplace.db")
    post = store.create_post(Post(title="Bike", description="Red", price=120,
                                  image_url="https://img.example/bike.jpg", owner="alice"))
    posts = store.query(SortParams(field="price", direction="asc"), FilterParams(min_price=100))
    store.close()
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Float, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

from core.database import create_store_engine, ping, translate_errors
from posts.models import FilterParams, Post, SortParams

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(100), nullable=False),
    Column("description", Text, nullable=False),
    Column("price", Float, nullable=False),
    Column("image_url", Text, nullable=False),
    Column("owner", String(50), nullable=False, index=True),
    Column("created_at", String(32), nullable=False, index=True),
)

_SORT_COLUMNS = {
    "price": _posts.c.price,
    "created_at": _posts.c.created_at,
}

# SQLite INTEGER is a signed 64-bit value; larger ids cannot exist.
_MAX_ID = 2**63 - 1


def _valid_id(post_id: int) -> bool:
    return 1 <= post_id <= _MAX_ID


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class PostStore:
    def __init__(self, db_url: str) -> None:
        self.engine: Engine = create_store_engine(db_url)
        with translate_errors("create posts schema"):
            metadata.create_all(self.engine)

    def create_post(self, post: Post) -> Post:
        """Insert post and return it with id and created_at filled in.

        The owner column is written from post.owner as given; the service is
        responsible for setting it from the authenticated identity.
        """
        created_at = _now_iso()
        with translate_errors("create post"):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _posts.insert().values(
                        title=post.title,
                        description=post.description,
                        price=post.price,
                        image_url=post.image_url,
                        owner=post.owner,
                        created_at=created_at,
                    )
                )
                conn.commit()
                post_id = result.inserted_primary_key[0]
        post.id = post_id
        post.created_at = created_at
        return post

    def get_by_id(self, post_id: int) -> Optional[Post]:
        """Return the post with this id, or None if it does not exist."""
        if not _valid_id(post_id):
            return None
        with translate_errors("get post by id"):
            with self.engine.connect() as conn:
                row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
        return _row_to_post(row) if row is not None else None

    def query(self, sort: SortParams, filter: FilterParams) -> list[Post]:
        """Return posts inside the filter's price range (and owner, if set), sorted.

        Expects a normalized filter: min_price >= 0 and max_price either None
        or >= min_price. Ties on the sort column are broken by id in the same
        direction so pagination-free listings are stable.
        """
        stmt = _posts.select().where(_posts.c.price >= (filter.min_price or 0))
        if filter.max_price is not None:
            stmt = stmt.where(_posts.c.price <= filter.max_price)
        if filter.owner:
            stmt = stmt.where(_posts.c.owner == filter.owner)

        column = _SORT_COLUMNS.get(sort.field, _posts.c.created_at)
        if sort.direction == "asc":
            stmt = stmt.order_by(column.asc(), _posts.c.id.asc())
        else:
            stmt = stmt.order_by(column.desc(), _posts.c.id.desc())

        with translate_errors("query posts"):
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).fetchall()
        return [_row_to_post(r) for r in rows]

    def update_post(self, post: Post) -> bool:
        """Overwrite the content fields of an existing post.

        owner and created_at are never written. Returns True if a row was
        updated, False if post.id was not found.
        """
        if post.id is None or not _valid_id(post.id):
            return False
        with translate_errors("update post"):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _posts.update()
                    .where(_posts.c.id == post.id)
                    .values(
                        title=post.title,
                        description=post.description,
                        price=post.price,
                        image_url=post.image_url,
                    )
                )
                conn.commit()
        return result.rowcount > 0

    def delete_post(self, post_id: int) -> bool:
        """Delete a post. Returns True if deleted, False if not found."""
        if not _valid_id(post_id):
            return False
        with translate_errors("delete post"):
            with self.engine.connect() as conn:
                result = conn.execute(_posts.delete().where(_posts.c.id == post_id))
                conn.commit()
        return result.rowcount > 0

    def ping(self) -> bool:
        return ping(self.engine)

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_post(row) -> Post:
    return Post(
        id=row.id,
        title=row.title,
        description=row.description,
        price=row.price,
        image_url=row.image_url,
        owner=row.owner,
        created_at=row.created_at,
    )
