"""Discord audio bot: per-channel playback sessions driven by slash commands."""

__version__ = "0.1.0"
