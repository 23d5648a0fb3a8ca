"""Transit map service for a single agency's static GTFS feed."""
