"""Matches feature: match records, participant index, cache resolution and ingestion."""
