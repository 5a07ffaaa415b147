"""Insights feature: optional AI coaching comments."""
