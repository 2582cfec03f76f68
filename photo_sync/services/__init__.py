"""Business logic services.

Services contain all business logic and are called by routes.
Dependencies (store, remote source, snapshot cache, sleep) are passed in explicitly.
"""
