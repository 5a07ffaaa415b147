"""Rift Reviewer backend: match cache and player statistics."""
