"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from phantom_radio.application.interfaces.audio_resolver import AudioSourceResolver, ResolvedAudio
from phantom_radio.application.interfaces.voice_adapter import VoiceAdapter

__all__ = [
    "AudioSourceResolver",
    "ResolvedAudio",
    "VoiceAdapter",
]
