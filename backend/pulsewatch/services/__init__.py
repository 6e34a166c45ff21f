"""Domain services: validation, lifecycle, aggregation and background jobs."""
