"""Players feature: aggregation engine and the player history view."""
