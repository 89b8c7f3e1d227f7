"""HTTP API for the live context engine."""
