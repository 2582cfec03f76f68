"""Domain records for the photo feed and topic collections.

FeedPhoto and TopicPhoto form a closed tagged union (`Photo`) discriminated on
`kind`. Both expose the same capability surface (id, urls, user, favorite), so
favorite handling is written once against that surface.

`favorite` is tri-state: None (never set), True, False. None and False both
mean "not favorited".
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class RecordKind(Enum):
    """Record types held by the local store and snapshot cache."""

    FEED = "feed"
    TOPIC = "topic"
    TOPIC_PHOTO = "topic_photo"


class PhotoUrls(BaseModel):
    """Size variants of one image."""

    raw: str
    full: str
    regular: str
    small: str
    thumb: str


class PhotoUser(BaseModel):
    """Photographer attribution."""

    id: str
    name: str
    username: str = ""
    bio: str | None = None
    portfolio_url: str | None = None


class FeedPhoto(BaseModel):
    """A photo in the flat random feed."""

    kind: Literal["feed"] = "feed"
    id: str
    urls: PhotoUrls
    user: PhotoUser
    favorite: bool | None = None

    @property
    def is_favorite(self) -> bool:
        return self.favorite is True


class TopicPhoto(BaseModel):
    """A photo listed under a topic.

    The id is composite ("{topic_id}_{photo_id}"): the same remote photo under
    two topics is two records with independent favorite state.
    """

    kind: Literal["topic"] = "topic"
    id: str
    topic_id: str
    photo_id: str
    urls: PhotoUrls
    user: PhotoUser
    favorite: bool | None = None

    @property
    def is_favorite(self) -> bool:
        return self.favorite is True

    @staticmethod
    def composite_id(topic_id: str, photo_id: str) -> str:
        return f"{topic_id}_{photo_id}"

    @staticmethod
    def id_prefix(topic_id: str) -> str:
        """Prefix shared by every record id belonging to a topic."""
        return f"{topic_id}_"


Photo = Annotated[FeedPhoto | TopicPhoto, Field(discriminator="kind")]


class Topic(BaseModel):
    """A topic (curated photo set)."""

    id: str
    slug: str
    description: str | None = None
    favorite: bool | None = None
