"""
Storage layer: the FeedStore interface and its Supabase implementation
"""

from .base import FeedStore, StorageError

__all__ = ['FeedStore', 'StorageError']
