from fastapi import APIRouter, Depends, Path

from article_api.dependencies import get_article_handler
from article_api.handler import ArticleHandler
from article_api.schemas import ArticleCreate, ArticleResponse, ArticleUpdate

# Largest value a BIGINT primary key can hold.
MAX_ARTICLE_ID = 2**63 - 1

router = APIRouter(prefix="/articles", tags=["articles"])


@router.get("", response_model=list[ArticleResponse], response_model_exclude_none=True)
async def list_articles(handler: ArticleHandler = Depends(get_article_handler)):
    return await handler.list_articles()


@router.post(
    "", status_code=201, response_model=ArticleResponse, response_model_exclude_none=True
)
async def create_article(
    data: ArticleCreate, handler: ArticleHandler = Depends(get_article_handler)
):
    return await handler.create_article(data)


@router.put("/{article_id}", response_model=ArticleResponse, response_model_exclude_none=True)
async def update_article(
    data: ArticleUpdate,
    article_id: int = Path(..., ge=1, le=MAX_ARTICLE_ID),
    handler: ArticleHandler = Depends(get_article_handler),
):
    return await handler.update_article(article_id, data)
