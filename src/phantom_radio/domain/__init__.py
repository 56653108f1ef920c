# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, messages, events and exceptions
- music/: Track, queue entry and playback queue state
- selection/: Turn-based song selection rotation
"""

from phantom_radio.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
