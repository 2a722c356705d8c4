"""JSON persistence."""
