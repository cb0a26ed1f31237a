# intentnet/storage/__init__.py
"""
Storage layer for intentnet

Components:
- lru_cache: Bounded LRU cache for results and tokenized text
- state_codec: Classifier state <-> persistence-neutral records
  (import from intentnet.storage.state_codec)
"""

from intentnet.storage.lru_cache import BoundedCache, LRUCache

__all__ = [
    "BoundedCache",
    "LRUCache",
]
