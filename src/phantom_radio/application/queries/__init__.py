"""
Application Queries (Read Side)

Query objects and handlers for read operations.
Queries do not modify state, only retrieve data.
"""

from phantom_radio.application.queries.get_queue import GetQueueHandler, GetQueueQuery

__all__ = [
    "GetQueueQuery",
    "GetQueueHandler",
]
