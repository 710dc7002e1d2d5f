"""HTTP API for tillprint."""
