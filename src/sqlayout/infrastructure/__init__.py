"""Infrastructure layer: schema model and SQL generation utilities."""
