from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

PROVIDER_ALL = "all"
PROVIDER_BBC = "bbc"
PROVIDER_SKY = "sky"

CATEGORY_UK = "uk"
CATEGORY_TECHNOLOGY = "technology"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Item(BaseModel):
    """A single article, stamped with the category and provider it came from."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: str = ""
    provider: str = ""
    title: str = ""
    link: str = ""
    description: str = ""
    thumbnail: str = ""
    date_time: datetime = Field(default=_EPOCH, alias="dateTime")


class Feed(BaseModel):
    """One provider's fetch result for a category."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    description: str = ""
    link: str = ""
    language: str = ""
    copyright: str = ""
    date_time: datetime = Field(default=_EPOCH, alias="dateTime")
    ttl: int = Field(default=0, ge=0, description="Minutes the feed stays fresh")
    items: List[Item] = Field(default_factory=list)


class FeedResponse(BaseModel):
    """Paginated, time-sorted answer to a feed query. Never cached."""
    model_config = ConfigDict(populate_by_name=True)

    category: Optional[str] = None
    provider: str = PROVIDER_ALL
    items: List[Item] = Field(default_factory=list)
    limit: int = 0
    offset: int = 0
