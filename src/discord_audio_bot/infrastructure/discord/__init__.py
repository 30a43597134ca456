"""Discord-facing layer: bot, cogs, guards, and voice adapters."""
