from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from article_api.database import Base


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp column.

    PostgreSQL keeps the instant in a ``timestamptz`` and hands back aware
    datetimes.  SQLite drops the offset, so values are normalised to UTC on
    the way in and re-labelled as UTC on the way out.  Either way callers
    only ever see aware datetimes.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("naive datetime is not allowed for a timezone-aware column")
        if dialect.name == "sqlite":
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# SQLite only auto-increments an INTEGER PRIMARY KEY column.
_ArticleId = BigInteger().with_variant(Integer, "sqlite")


# ---------------------------------------------------------------------------
# Article
# ---------------------------------------------------------------------------
class Article(Base):
    __tablename__ = "articles"

    __table_args__ = (
        CheckConstraint("title <> ''", name="ck_articles_title_not_empty"),
        CheckConstraint("content <> ''", name="ck_articles_content_not_empty"),
        CheckConstraint("author <> ''", name="ck_articles_author_not_empty"),
        # Newest-first listing
        Index("ix_articles_created_at_id", "created_at", "id"),
    )

    # Fetch id and created_at in the INSERT itself (RETURNING) instead of
    # with a follow-up SELECT.
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(_ArticleId, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(Text, nullable=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"Article(id={self.id!r}, title={self.title!r}, author={self.author!r})"
