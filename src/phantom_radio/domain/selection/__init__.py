"""
Selection Bounded Context

Domain logic for the turn-based song selection rotation.
"""

from phantom_radio.domain.selection.entities import SelectionRotation, SelectorEntry
from phantom_radio.domain.selection.value_objects import JoinResult, LeaveResult, SelectionCheck

__all__ = [
    # Entities
    "SelectorEntry",
    "SelectionRotation",
    # Value Objects
    "SelectionCheck",
    "JoinResult",
    "LeaveResult",
]
