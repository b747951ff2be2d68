"""Device planning, partitioning and layout operations."""
