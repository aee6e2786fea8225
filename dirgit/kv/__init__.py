"""KV store backends.

``Disk`` lives in ``dirgit.kv.disk`` and is imported on demand.
"""

from .base import KVStore
from .memory import Memory

__all__ = ["KVStore", "Memory"]
