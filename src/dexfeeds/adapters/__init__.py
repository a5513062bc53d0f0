"""DEX adapter implementations.

Each adapter owns the pollers for one exchange and serves the data they
cache. build_adapters() creates the adapters enabled in Settings.
"""

from dexfeeds.adapters.base import DexAdapter
from dexfeeds.adapters.factory import build_adapters
from dexfeeds.adapters.native import NativeAdapter
from dexfeeds.adapters.renegade import RenegadeAdapter

__all__ = [
    "DexAdapter",
    "NativeAdapter",
    "RenegadeAdapter",
    "build_adapters",
]
