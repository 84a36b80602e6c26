"""
Article store: the only code that talks to the ``articles`` table.

Design notes
------------
- One SQL statement per operation.  ``create`` relies on the mapper's
  ``eager_defaults`` so the INSERT returns ``id`` and ``created_at``;
  ``update_by_id`` is an ``UPDATE ... RETURNING`` so a missing row is
  detected without a separate SELECT.
- Every call opens its own session (and connection checkout) and releases
  it before returning.  Writes run inside ``sessionmaker.begin()`` so they
  commit on success and roll back on any error.
- Driver and connection failures are re-raised as ``PersistenceError``.
  Task cancellation (``asyncio.timeout`` expiry, client disconnect) is not
  caught here; it unwinds through the session context managers, which roll
  back and hand the connection back to the pool.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from article_api.errors import NotFound, PersistenceError
from article_api.models import Article

logger = logging.getLogger(__name__)

# Driver-level connection failures (refused, reset) are not always wrapped
# by SQLAlchemy, hence OSError.
_STORE_ERRORS = (SQLAlchemyError, OSError)


class ArticleStore:
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def create(self, article: Article) -> Article:
        """
        Insert *article* and return it with ``id`` and ``created_at`` filled
        in by the database.
        """
        try:
            async with self._sessionmaker.begin() as session:
                session.add(article)
                await session.flush()
        except _STORE_ERRORS as exc:
            raise PersistenceError("failed to insert article") from exc

        logger.debug("Inserted article id=%s", article.id)
        return article

    async def list_all(self) -> list[Article]:
        """Return every article, newest first."""
        q = select(Article).order_by(Article.created_at.desc(), Article.id.desc())
        try:
            async with self._sessionmaker() as session:
                result = await session.scalars(q)
                return list(result.all())
        except _STORE_ERRORS as exc:
            raise PersistenceError("failed to list articles") from exc

    async def update_by_id(self, article: Article) -> Article | NotFound:
        """
        Overwrite title, content, author and published_at of the row whose
        id is ``article.id``.

        Returns the stored article (``created_at`` untouched) or
        ``NotFound`` when no row has that id.
        """
        stmt = (
            update(Article)
            .where(Article.id == article.id)
            .values(
                title=article.title,
                content=article.content,
                author=article.author,
                published_at=article.published_at,
            )
            .returning(Article)
        )
        try:
            async with self._sessionmaker.begin() as session:
                updated = (await session.scalars(stmt)).one_or_none()
        except _STORE_ERRORS as exc:
            raise PersistenceError(f"failed to update article id={article.id}") from exc

        if updated is None:
            return NotFound(article.id)
        logger.debug("Updated article id=%s", updated.id)
        return updated
