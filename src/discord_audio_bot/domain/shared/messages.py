"""Centralized message constants for error messages, log lines, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Descriptor Validation Errors
    PLAYLIST_INDEX_REQUIRED = "Track in playlist '{playlist_id}' must have a playlist index"
    PLAYLIST_ID_REQUIRED = "Track with playlist index {index} must belong to a playlist"
    PLAYLIST_COUNT_MISMATCH = "Playlist declares {expected} items but {actual} tracks were resolved"
    PLAYLIST_MEMBER_MISMATCH = "Track '{title}' does not belong to playlist '{playlist_id}'"
    SINGLE_TRACK_EXPECTED = "A reference without a playlist must resolve to exactly one track"

    # Resolution Errors
    INVALID_REFERENCE = "Not a valid URL: {locator}"
    UNSUPPORTED_SOURCE = "Only YouTube links are supported: {locator}"
    PLAYLIST_NOT_SUPPORTED = "Playlists are not supported here: {locator}"
    RESOLUTION_TIMEOUT = "Timed out resolving {locator} after {timeout}s"
    RESOLUTION_EMPTY = "Nothing playable found at {locator}"
    PLAYLIST_EMPTY = "Playlist {locator} has no entries"
    NO_STREAM_URL = "No stream URL found for {title}"

    # Playback Errors
    STREAM_URL_NOT_HTTP = "Refusing to play non-http stream for '{title}'"
    TRANSCODER_FAILED = "Could not start audio stream for '{title}': {error}"
    TRANSPORT_NOT_READY = "Voice connection is not ready"

    # Configuration Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    PAUSE_TIMEOUT_TOO_SHORT = "pause_timeout_seconds must be greater than idle_timeout_seconds"
    CONTAINER_NOT_FOUND = "Container not found on bot instance"
    BOT_NOT_SET = "Bot has not been attached to the container"


class LogTemplates:
    """Log message templates.

    Pass values as parameters to logger calls rather than pre-formatting.
    """

    # Bot Lifecycle
    BOT_READY = "Logged in as %s (id=%s) in %d guild(s)"
    BOT_SHUTDOWN = "Shutting down bot"
    BOT_SHUTDOWN_ERROR = "Error during shutdown: %s"
    BOT_STARTING = "Starting Discord audio bot"
    PLAYBACK_CONFIG = (
        "Playback: idle timeout %ss, pause timeout %ss, voice connect timeout %ss, status preview %d items"
    )
    AUDIO_CONFIG = "Audio: yt-dlp format %r, playlists allowed: %s, ffmpeg: %s"
    FFMPEG_NOT_FOUND = "FFmpeg executable %r not found on PATH; tracks will fail to play"
    COMMAND_SYNC_DISABLED = "Slash command sync on startup is disabled"
    COMMAND_SYNC_GUILDS = "Slash commands will sync to guild(s) %s"
    COMMAND_SYNC_GLOBAL = "Slash commands will sync globally"
    BOT_INTERRUPTED = "Bot interrupted by user"
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_STOPPED = "Bot stopped"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %ss"
    SLASH_COMMAND_ERROR = "Slash command /%s failed: %s"
    ERROR_REPLY_FAILED = "Could not deliver error reply"
    LOGGING_CONFIG_FALLBACK = "Could not load %s, falling back to basic config"
    EXTENSION_LOADED = "Loaded extension %s"
    EXTENSION_LOAD_FAILED = "Failed to load extension %s"
    COMMANDS_SYNCED_GUILD = "Synced %d command(s) to guild %s"
    COMMANDS_SYNCED_GLOBAL = "Synced %d global command(s)"
    COMMANDS_SYNC_FAILED = "Failed to sync commands: %s"

    # Voice Transport
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting to channel %s: %r"
    VOICE_STALE_CLEANUP = "Found stale voice client in guild %s, cleaning up"
    VOICE_STALE_CLEANUP_FAILED = "Could not disconnect stale voice client in guild %s"
    VOICE_PLAYER_ERROR = "Audio player error in guild %s: %r"
    VOICE_LOST = "Bot was removed from voice in guild %s"
    VOICE_STALE_CALLBACK = "Ignoring track-end callback for superseded track in guild %s"
    VOICE_LISTENER_FAILED = "Transport listener failed in guild %s"

    # Playback Session
    SESSION_CREATED = "Created playback session for guild %s"
    SESSIONS_CLOSED = "Closed %d playback session(s)"
    SESSION_CLOSED = "Closed playback session for guild %s (%s)"
    SESSION_CLOSE_ERROR = "Error closing transport for guild %s"
    SESSION_OPEN_FAILED = "Could not open voice transport for guild %s: %s"
    SESSION_JOINING_PENDING = "Joining pending session creation for guild %s"
    SESSION_ENQUEUED = "Enqueued %d track(s) in guild %s (queue=%d)"
    SESSION_NOTIFY_FAILED = "Failed to deliver notification for guild %s"
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_ERROR = "Playback error in guild %s: %s"
    TRACK_SKIPPED = "Skipped '%s' in guild %s (scope=%s, dropped=%d)"
    TRACK_DROPPED = "Dropped '%s' in guild %s: %s"
    TRACK_ENDED = "Track ended in guild %s"
    PLAYLIST_PRUNED = "Pruned playlist %s in guild %s"
    PREFETCH_STARTED = "Prefetching stream for '%s' in guild %s"
    PREFETCH_FAILED = "Prefetch failed for '%s' in guild %s: %s"
    TIMER_ARMED = "Armed %s timer (%ss) in guild %s"
    TIMER_DISARMED = "Disarmed %s timer in guild %s"
    TIMER_FIRED = "%s timer fired in guild %s"
    COMMAND_FAILED = "Session command failed"

    # yt-dlp Resolver
    CACHE_HIT = "Cache hit for '%s'"
    YTDLP_EXTRACTING = "Extracting info for %s"
    YTDLP_EXTRACT_FAILED = "yt-dlp extraction failed for %s: %s"
    YTDLP_TIMEOUT = "yt-dlp timed out after %ss for %s"
    YTDLP_PLAYLIST_RESOLVED = "Resolved playlist %s with %d entries"
    YTDLP_ENTRY_SKIPPED = "Skipping playlist entry without id or url in %s"

    # FFmpeg
    FFMPEG_SOURCE_CREATED = "Created FFmpeg source for '%s'"
    FFMPEG_SOURCE_FAILED = "Failed to create FFmpeg source for '%s': %s"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord.
    """

    # Playback notifications
    NOW_PLAYING = '▶️ Now playing: "{title}" - {duration} - <{url}>'
    NOW_PLAYING_PLAYLIST = (
        '▶️ Now Playing Playlist "{playlist_title}" - {count} Items - '
        "Total Duration: {duration}\n[#{index} of {count}]: {title}"
    )
    INACTIVITY_DISCONNECT = "⏹️ Audio {state} for {minutes} minutes. Disconnecting..."
    PLAYER_ERROR = "❗ An error occurred in the audio player: {error}"

    # Command responses
    ACTION_QUEUED = '🎵 Queued "{title}" ({duration}). Position in queue: {position}'
    ACTION_QUEUED_NOW = '🎵 Queued "{title}" ({duration}).'
    ACTION_QUEUED_PLAYLIST = '🎵 Queued playlist "{title}" - {count} items ({duration}).'
    ACTION_STOPPED = "⏹️ Stopped audio playback and cleared play queue."
    ACTION_PAUSED = "⏸️ Paused audio playback."
    ACTION_RESUMED = "▶️ Resumed audio playback."
    ACTION_SKIPPED = '⏭️ Skipped "{title}".'
    ACTION_SKIPPED_PLAYLIST = '⏭️ Skipped playlist "{title}" ({dropped} queued items removed).'
    ACTION_LEFT = "👋 Left the voice channel."

    # State messages
    STATE_NOT_PLAYING = "❗ Audio player is not currently playing."
    STATE_NOT_PAUSED = "❗ Audio player is not currently paused."
    STATE_NOTHING_TO_SKIP = "❗ Nothing is playing to skip."
    STATE_NOTHING_PLAYING = "❗ Nothing is playing and the queue is empty."
    STATE_STATUS_CURRENT = '▶️ Now playing: "{title}" - {duration}{paused}'
    STATE_STATUS_PAUSED_SUFFIX = " (paused)"
    STATE_STATUS_QUEUE_HEADER = "Up next ({count}):"
    STATE_STATUS_QUEUE_ITEM = "{position}. {title} - {duration}"
    STATE_STATUS_MORE = "...and {count} more"

    # Error messages
    ERROR_NO_PLAYER = "❌ No audio player found for this server."
    ERROR_INVALID_URL = "❌ Invalid URL provided. Must be a valid YouTube video URL."
    ERROR_PLAYLIST_NOT_SUPPORTED = "❌ YouTube playlists are not supported."
    ERROR_RESOLUTION_FAILED = "❌ Could not load that link: {error}"
    ERROR_COULD_NOT_JOIN_VOICE = "❌ I couldn't join your voice channel."
    ERROR_NOT_IN_VOICE = "❌ You must be in a voice channel to use this command."
    ERROR_GUILD_ONLY = "❌ This command can only be used in a server."
    ERROR_COMMAND_FAILED = "❌ Command failed. See logs."
