"""Feed photo model.

One row per photo in the random feed. urls/user are stored as JSON text,
favorite is tri-state (NULL = never set).
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from photo_sync.schemas.photo import FeedPhoto, PhotoUrls, PhotoUser
from photo_sync.stores.database import Base


class FeedPhotoRow(Base):
    """Persisted FeedPhoto."""

    __tablename__ = "feed_photos"

    # Remote photo id
    id: Mapped[str] = mapped_column(String(200), primary_key=True)

    urls_json: Mapped[str] = mapped_column(Text)
    user_json: Mapped[str] = mapped_column(Text)
    favorite: Mapped[bool | None] = mapped_column(index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def apply(self, record: FeedPhoto) -> None:
        self.urls_json = record.urls.model_dump_json()
        self.user_json = record.user.model_dump_json()
        self.favorite = record.favorite

    def to_record(self) -> FeedPhoto:
        return FeedPhoto(
            id=self.id,
            urls=PhotoUrls.model_validate_json(self.urls_json),
            user=PhotoUser.model_validate_json(self.user_json),
            favorite=self.favorite,
        )

    def __repr__(self) -> str:
        return f"<FeedPhotoRow {self.id} favorite={self.favorite}>"
