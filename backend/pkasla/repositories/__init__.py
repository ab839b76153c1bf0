# backend/pkasla/repositories/__init__.py
"""
Repository layer for the PKASLA platform.

Repositories own all query construction; services never touch the session
query API directly.
"""

from .base_repository import BaseRepository, IRepository
from .factory import RepositoryFactory

__all__ = ["BaseRepository", "IRepository", "RepositoryFactory"]
