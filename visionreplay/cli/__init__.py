"""Command-line interface for visionreplay."""
