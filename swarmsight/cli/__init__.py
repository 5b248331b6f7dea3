"""Command-line interface for SwarmSight."""
