from fastapi import Request

from article_api.handler import ArticleHandler


def get_article_handler(request: Request) -> ArticleHandler:
    """
    FastAPI dependency returning the handler built by ``create_app``.

    The handler (and the store and pool behind it) lives on ``app.state``
    so tests can build an app around their own engine.
    """
    return request.app.state.article_handler
