"""Relay unread feed entries to chat rooms."""

__version__ = "0.1.0"
