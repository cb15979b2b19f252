"""Data stores for persistence and sessions.

Stores handle:
- PostgreSQL: engine, session factory, transaction scope
- Redis: web session records with TTL

No business logic in stores - that belongs in services.
"""
