"""
Shared Domain Kernel

Contains types, messages, events and exceptions shared across all bounded contexts.
"""

from phantom_radio.domain.shared.exceptions import (
    AudioSourceUnresolvableError,
    DomainError,
    InvalidOperationError,
    TransportConnectFailedError,
    VoiceTransportError,
)

__all__ = [
    "DomainError",
    "InvalidOperationError",
    "VoiceTransportError",
    "TransportConnectFailedError",
    "AudioSourceUnresolvableError",
]
