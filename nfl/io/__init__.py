"""HTTP feeds and persistence adapters."""
