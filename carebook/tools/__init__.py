"""Operation boundary for the API layer."""
