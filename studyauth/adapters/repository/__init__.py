"""Repository adapters - Database and in-memory implementations."""

from .memory import InMemoryIdentityRepository, InMemoryOTPRepository
from .postgres import PostgresIdentityRepository, PostgresOTPRepository, run_migrations

__all__ = [
    "InMemoryIdentityRepository",
    "InMemoryOTPRepository",
    "PostgresIdentityRepository",
    "PostgresOTPRepository",
    "run_migrations",
]
