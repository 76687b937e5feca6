import asyncio
from typing import Awaitable

from fastapi import APIRouter, Depends, HTTPException, Request, status

from news_api.config.settings import settings
from news_api.core.exceptions.exceptions import NotFoundError
from news_api.schemas.news import PROVIDER_ALL, FeedResponse
from news_api.services.news_service import NewsService
from news_api.utils.log import app_logger

router = APIRouter(tags=["News_Feed"])


def get_news_service(request: Request) -> NewsService:
    """NewsService wired by the application lifespan."""
    return request.app.state.news_service


def _int_param(value: str, name: str) -> int:
    """Parse a non-negative integer query parameter; empty means 0."""
    if value == "":
        return 0
    try:
        number = int(value)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{name} is invalid") from None
    if number < 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{name} is invalid")
    return number


async def _respond(query: Awaitable[FeedResponse], event: str, **params) -> FeedResponse:
    """Await a service query, mapping lookup failures to 404 and everything else to 500."""
    try:
        return await asyncio.wait_for(query, timeout=settings.REQUEST_TIMEOUT_SECONDS)
    except NotFoundError as e:
        app_logger.error(event, **params, error=str(e))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except asyncio.TimeoutError:
        app_logger.error(event, **params, error="request timed out")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="could not get news feed",
        )
    except Exception as e:
        app_logger.error(event, **params, error=str(e), exc_type=type(e).__name__, exc_info=e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="could not get news feed",
        )


@router.get(
    "/",
    response_model=FeedResponse,
    response_model_exclude_none=True,
    summary="Latest items across every category",
)
async def get_feed(
    provider: str = PROVIDER_ALL,
    limit: str = "",
    offset: str = "",
    service: NewsService = Depends(get_news_service),
) -> FeedResponse:
    provider = provider or PROVIDER_ALL
    limit = _int_param(limit, "limit")
    offset = _int_param(offset, "offset")

    return await _respond(
        service.get_feed(provider, offset, limit),
        "api.feed.error",
        provider=provider,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{category}",
    response_model=FeedResponse,
    response_model_exclude_none=True,
    summary="Latest items of one category",
)
async def get_feed_by_category(
    category: str,
    provider: str = PROVIDER_ALL,
    limit: str = "",
    offset: str = "",
    service: NewsService = Depends(get_news_service),
) -> FeedResponse:
    provider = provider or PROVIDER_ALL
    limit = _int_param(limit, "limit")
    offset = _int_param(offset, "offset")

    return await _respond(
        service.get_feed_by_category(provider, category, offset, limit),
        "api.feed_category.error",
        category=category,
        provider=provider,
        limit=limit,
        offset=offset,
    )
