"""
Handlers for movie store operations.

Read and write APIs are kept apart:
- queries: GetItem, Scan (with client-side post filtering), ListTables
- commands: CreateTable, PutItem, UpdateItem, DeleteItem
"""

from .movies import MoviesReadApi, MoviesWriteApi

__all__ = [
    "MoviesReadApi",
    "MoviesWriteApi",
]
