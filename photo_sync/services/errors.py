"""Error taxonomy for the sync core.

Transient classes (NetworkError, ServerError) are retried by the sync engine
up to its fixed limit. Everything else surfaces immediately. QuotaExceededError
and PageLimitReachedError are local policy rejections and never pass through
the retry path.
"""


class PhotoSyncError(RuntimeError):
    """Base class for all sync-core errors."""

    code = "PHOTO_SYNC_ERROR"
    retryable = False
    user_message = "Something went wrong"


class InvalidRequestError(PhotoSyncError):
    code = "INVALID_REQUEST"
    user_message = "Invalid request"


class NetworkError(PhotoSyncError):
    code = "NETWORK_ERROR"
    retryable = True
    user_message = "Network error"


class DecodingError(PhotoSyncError):
    code = "DECODING_ERROR"
    user_message = "Could not read the server response"


class UnauthorizedError(PhotoSyncError):
    code = "UNAUTHORIZED"
    user_message = "Not authorized"


class ServerError(PhotoSyncError):
    code = "SERVER_ERROR"
    retryable = True
    user_message = "Server error"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(PhotoSyncError):
    """No usable snapshot for a collection."""

    code = "NOT_FOUND"
    user_message = "No cached copy available"


class QuotaExceededError(PhotoSyncError):
    code = "FAVORITE_QUOTA_EXCEEDED"
    user_message = "Free accounts can favorite at most {limit} photos. Upgrade to unlock unlimited favorites."

    def __init__(self, limit: int):
        super().__init__(self.user_message.format(limit=limit))
        self.limit = limit


class PageLimitReachedError(PhotoSyncError):
    code = "PAGE_LIMIT_REACHED"
    user_message = "Free accounts can load at most {limit} pages per topic. Upgrade to keep browsing."

    def __init__(self, topic_id: str, limit: int):
        super().__init__(self.user_message.format(limit=limit))
        self.topic_id = topic_id
        self.limit = limit


class StoreError(PhotoSyncError):
    """Local store operation failed (wraps SQLAlchemy errors)."""

    code = "STORE_ERROR"
    user_message = "Could not save to the local store"
