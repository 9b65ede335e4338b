"""Draw host package: wraps the five-card draw engine with networking."""

from .server import HostServer

__all__ = ["HostServer"]
