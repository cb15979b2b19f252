"""SQLAlchemy ORM models.

Models represent database tables:
- users: registered members (credentials, reset token, hearts)
- stores: listed stores with tags and point location
- reviews: member reviews of stores
- user_hearts: association table for favourited stores
"""

from storefinder.models.user import User, user_hearts
from storefinder.models.store import Store
from storefinder.models.review import Review

__all__ = ["User", "Store", "Review", "user_hearts"]
