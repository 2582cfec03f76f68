"""SQLAlchemy ORM models.

Models represent the local store tables:
- feed_photos: Photos in the random feed
- topics: Topic list (replaced wholesale on re-fetch)
- topic_photos: Photos per topic, keyed by "{topic_id}_{photo_id}"
"""

from photo_sync.models.feed_photo import FeedPhotoRow
from photo_sync.models.topic import TopicRow
from photo_sync.models.topic_photo import TopicPhotoRow

__all__ = ["FeedPhotoRow", "TopicRow", "TopicPhotoRow"]
