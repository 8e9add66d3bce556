"""
Movies CQRS APIs

Separate query and command APIs for the Movies table.

Usage:
    from .queries import MoviesReadApi
    from .commands import MoviesWriteApi

    read_api = MoviesReadApi(config)
    write_api = MoviesWriteApi(config)
"""

from .queries import MoviesReadApi
from .commands import MoviesWriteApi

__all__ = [
    "MoviesReadApi",
    "MoviesWriteApi",
]
