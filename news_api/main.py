from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Dict
from news_api.api.health import router as health_router
from news_api.api.feed import router as feed_router
from news_api.clients.bbc_client import BBCClient
from news_api.clients.rss_feed_client import RSSFeedClient
from news_api.clients.sky_client import SkyClient
from news_api.config.settings import settings
from news_api.jobs.scheduler import SchedulerClock
from news_api.schemas.news import PROVIDER_BBC, PROVIDER_SKY
from news_api.services.feed_cache import FeedCache
from news_api.services.news_service import NewsService, Registry
from news_api.utils.log import app_logger


def build_providers() -> Dict[str, RSSFeedClient]:
    """Upstream feed clients keyed by provider id, in fan-out order."""
    return {
        PROVIDER_SKY: SkyClient(
            settings.SKY_URL,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            max_retries=settings.UPSTREAM_MAX_RETRIES,
        ),
        PROVIDER_BBC: BBCClient(
            settings.BBC_URL,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            max_retries=settings.UPSTREAM_MAX_RETRIES,
        ),
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    clock = SchedulerClock()
    cache = FeedCache(clock)
    providers = build_providers()
    service = NewsService(cache, Registry(providers=providers, categories=tuple(settings.FEED_CATEGORIES)))
    app.state.news_service = service
    clock.start()
    app_logger.info("app.started", providers=list(service.providers), categories=list(service.categories))
    yield
    # Shutdown logic
    cache.clear()
    clock.shutdown()
    for client in providers.values():
        client.close()
    app_logger.info("app.stopped")


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    allow_headers=["*"],
)

# include routes; probes first so "/{category}" does not shadow them
app.include_router(health_router)
app.include_router(feed_router)
