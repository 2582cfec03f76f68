"""Topic photo model.

Primary key is the composite "{topic_id}_{photo_id}", so the same remote
photo under different topics is stored as separate rows.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from photo_sync.schemas.photo import PhotoUrls, PhotoUser, TopicPhoto
from photo_sync.stores.database import Base


class TopicPhotoRow(Base):
    """Persisted TopicPhoto."""

    __tablename__ = "topic_photos"

    # Composite id: "{topic_id}_{photo_id}"
    id: Mapped[str] = mapped_column(String(400), primary_key=True)

    topic_id: Mapped[str] = mapped_column(String(200), index=True)
    photo_id: Mapped[str] = mapped_column(String(200))

    urls_json: Mapped[str] = mapped_column(Text)
    user_json: Mapped[str] = mapped_column(Text)
    favorite: Mapped[bool | None] = mapped_column(index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def apply(self, record: TopicPhoto) -> None:
        self.topic_id = record.topic_id
        self.photo_id = record.photo_id
        self.urls_json = record.urls.model_dump_json()
        self.user_json = record.user.model_dump_json()
        self.favorite = record.favorite

    def to_record(self) -> TopicPhoto:
        return TopicPhoto(
            id=self.id,
            topic_id=self.topic_id,
            photo_id=self.photo_id,
            urls=PhotoUrls.model_validate_json(self.urls_json),
            user=PhotoUser.model_validate_json(self.user_json),
            favorite=self.favorite,
        )

    def __repr__(self) -> str:
        return f"<TopicPhotoRow {self.id} favorite={self.favorite}>"
