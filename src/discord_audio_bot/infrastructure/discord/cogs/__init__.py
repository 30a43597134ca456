"""Discord cogs exposing the bot's slash commands."""
