"""Topic model."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from photo_sync.schemas.photo import Topic
from photo_sync.stores.database import Base


class TopicRow(Base):
    """Persisted Topic. The topic list is replaced wholesale on re-fetch."""

    __tablename__ = "topics"

    id: Mapped[str] = mapped_column(String(200), primary_key=True)
    slug: Mapped[str] = mapped_column(String(200), index=True)
    description: Mapped[str | None] = mapped_column(Text)
    favorite: Mapped[bool | None] = mapped_column()

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def apply(self, record: Topic) -> None:
        self.slug = record.slug
        self.description = record.description
        self.favorite = record.favorite

    def to_record(self) -> Topic:
        return Topic(
            id=self.id,
            slug=self.slug,
            description=self.description,
            favorite=self.favorite,
        )

    def __repr__(self) -> str:
        return f"<TopicRow {self.slug}>"
