"""
Repository Layer Package.

Data-access abstractions over the remote document store.  Services never
touch ``db.supabase`` tables directly.
"""

from envirolens.repositories.base_repository import BaseRepository
from envirolens.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
]
