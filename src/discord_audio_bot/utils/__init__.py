"""Shared helpers: log formatting and Discord reply formatting."""
