"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class VoiceTransportError(DomainError):
    """Raised by the voice transport when a connection cannot be used.

    ``transient`` marks failures worth one immediate reconnect attempt
    (timeouts, dropped gateway sessions, encryption negotiation).
    """

    def __init__(self, message: str, *, transient: bool = False) -> None:
        super().__init__(message, code="VOICE_TRANSPORT_ERROR")
        self.transient = transient


class TransportConnectFailedError(DomainError):
    """Raised when a guild session could not join its voice channel."""

    def __init__(self, guild_id: int, message: str | None = None) -> None:
        msg = message or f"Failed to connect to voice in guild {guild_id}"
        super().__init__(msg, code="TRANSPORT_CONNECT_FAILED")
        self.guild_id = guild_id


class AudioSourceUnresolvableError(DomainError):
    """Raised when a track's audio source cannot be turned into playable audio."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Cannot resolve audio source {source}: {reason}", code="AUDIO_SOURCE_UNRESOLVABLE")
        self.source = source
        self.reason = reason
