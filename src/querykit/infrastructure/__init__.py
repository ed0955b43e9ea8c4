"""Infrastructure Layer - configuration, database access, security and logging."""
