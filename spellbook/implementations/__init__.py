"""Concrete seed sources and prompt forwarders."""
from .seed_sources import FileSeedDataSource, HttpSeedDataSource
from .catimg_forwarder import CatimgForwarder

__all__ = [
    "FileSeedDataSource",
    "HttpSeedDataSource",
    "CatimgForwarder",
]
