"""Photo Sync: offline-first photo feed, topics and favorites."""
