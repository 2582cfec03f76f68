"""Data stores for persistence and caching.

Stores handle:
- Database: async engine, sessions, schema (SQLite locally, Postgres hosted)
- LocalStore: keyed upserts and predicate reads for feed photos, topics, topic photos
- SnapshotCache: JSON snapshot files used as the offline fallback

No sync/favorite/pagination logic in stores - that belongs in services.
"""
