"""Storage layer: PostgreSQL (asyncpg) and optional Redis cache."""
