"""Pool management package.

Provides PoolRegistry for creating and locating reference-token pools.
"""

from .registry import PoolRegistry

__all__ = ["PoolRegistry"]
