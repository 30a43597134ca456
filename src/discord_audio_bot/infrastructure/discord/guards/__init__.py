"""Interaction guard helpers for slash commands."""
