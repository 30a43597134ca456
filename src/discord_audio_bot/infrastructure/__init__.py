"""Infrastructure adapters for yt-dlp, FFmpeg, and Discord."""
