"""Connection lifecycle for PostgreSQL and Redis."""
