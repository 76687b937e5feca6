from fastapi import APIRouter, Response, status

from news_api.config.settings import settings

router = APIRouter(tags=["Health"])


@router.get("/_health")
async def health() -> Response:
    return Response(status_code=status.HTTP_200_OK)


@router.get("/_live")
async def live() -> Response:
    return Response(status_code=status.HTTP_200_OK)


@router.get("/_version")
async def version() -> dict:
    return {"version": settings.VERSION}
