"""
Domain Layer

Pure models with no I/O:
- shared/: exceptions, constrained types, message constants
- music/: track/playlist descriptors and playback enums
"""

from discord_audio_bot.domain.shared.exceptions import DomainError

__all__ = ["DomainError"]
