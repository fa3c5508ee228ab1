"""tinydb-migrator: versioned migrations for TinyDB databases."""

from .controller import MigrationResult, MigrationStatus, Migrator
from .engine import Applied, Pending, Step, correlate, merge
from .errors import (
    ConsistencyError,
    ExecutionError,
    MigratorError,
    ProcedureError,
    RegistryError,
    StoreError,
    UsageError,
)
from .migration import Baseline, FunctionMigration, Migration, MigrationRecord
from .registry import MigrationRegistry
from .store import HistoryStore, TinyDBHistoryStore

__version__ = "0.1.0"

__all__ = [
    "Applied",
    "Baseline",
    "ConsistencyError",
    "ExecutionError",
    "FunctionMigration",
    "HistoryStore",
    "Migration",
    "MigrationRecord",
    "MigrationRegistry",
    "MigrationResult",
    "MigrationStatus",
    "Migrator",
    "MigratorError",
    "Pending",
    "ProcedureError",
    "RegistryError",
    "Step",
    "StoreError",
    "TinyDBHistoryStore",
    "UsageError",
    "correlate",
    "merge",
    "__version__",
]
