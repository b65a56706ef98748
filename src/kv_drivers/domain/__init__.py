"""Domain layer - errors, value objects and consistency services."""
