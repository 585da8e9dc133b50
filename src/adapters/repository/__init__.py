"""Repository adapters - Database implementations."""

from .postgres import (
    PostgresAccountRepository,
    PostgresActivityRepository,
    create_pool,
    run_migrations,
)

__all__ = [
    "PostgresAccountRepository",
    "PostgresActivityRepository",
    "create_pool",
    "run_migrations",
]
