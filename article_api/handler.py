"""
Request handler for the article endpoints.

Sits between the FastAPI routes and ``ArticleStore``: every store call runs
under a fixed deadline, store outcomes are mapped to HTTP statuses, and
failures are logged with their cause while the client only ever sees a
generic message.
"""
import asyncio
import logging

from fastapi import HTTPException

from article_api.errors import NotFound, PersistenceError
from article_api.schemas import ArticleCreate, ArticleResponse, ArticleUpdate
from article_api.services.article_store import ArticleStore

INTERNAL_ERROR_DETAIL = "internal error"
NOT_FOUND_DETAIL = "Article not found"


def _internal_error() -> HTTPException:
    return HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL)


class ArticleHandler:
    def __init__(self, store: ArticleStore, logger: logging.Logger, timeout: float) -> None:
        self._store = store
        self._logger = logger
        self._timeout = timeout

    async def _bounded(self, call, *args):
        """
        Await ``call(*args)`` for at most ``self._timeout`` seconds.

        Expiry cancels the in-flight store operation and is reported as a
        ``PersistenceError`` like any other store failure.
        """
        try:
            async with asyncio.timeout(self._timeout):
                return await call(*args)
        except TimeoutError as exc:
            raise PersistenceError(f"deadline of {self._timeout}s exceeded") from exc

    async def list_articles(self) -> list[ArticleResponse]:
        try:
            articles = await self._bounded(self._store.list_all)
        except PersistenceError:
            self._logger.exception("failed to list articles")
            raise _internal_error()
        return [ArticleResponse.model_validate(a) for a in articles]

    async def create_article(self, data: ArticleCreate) -> ArticleResponse:
        article = data.to_article()
        try:
            article = await self._bounded(self._store.create, article)
        except PersistenceError:
            self._logger.exception("failed to create article")
            raise _internal_error()

        self._logger.info("created article id=%s", article.id)
        return ArticleResponse.model_validate(article)

    async def update_article(self, article_id: int, data: ArticleUpdate) -> ArticleResponse:
        try:
            outcome = await self._bounded(self._store.update_by_id, data.to_article(article_id))
        except PersistenceError:
            self._logger.exception("failed to update article id=%s", article_id)
            raise _internal_error()

        if isinstance(outcome, NotFound):
            raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)

        self._logger.info("updated article id=%s", outcome.id)
        return ArticleResponse.model_validate(outcome)
