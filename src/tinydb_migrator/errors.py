"""Exceptions raised by tinydb-migrator."""

from .constants import NO_VERSION


class MigratorError(Exception):
    """
    Base class for every error raised by the migrator.

    Controller operations fill in ``old_version`` and ``new_version`` before the
    error leaves them, so callers can tell how far a multi-step operation got.
    ``new_version`` is the last version reached before the failure; steps that
    completed before it are not rolled back.
    """

    def __init__(self, message: str, old_version: int = NO_VERSION, new_version: int = NO_VERSION):
        super().__init__(message)
        self.old_version = old_version
        self.new_version = new_version

    def with_versions(self, old_version: int, new_version: int) -> "MigratorError":
        """Record the versions reached when the error was raised and return self."""
        self.old_version = old_version
        self.new_version = new_version
        return self


# Usage errors: detected before touching the store


class UsageError(MigratorError):
    """Raised when a command line cannot be interpreted."""

    pass


class CommandRequiredError(UsageError):
    def __init__(self) -> None:
        super().__init__("A command is required")


class UnexpectedCommandError(UsageError):
    def __init__(self, command: str):
        super().__init__(f"Unexpected command '{command}'")
        self.command = command


class VersionRequiredError(UsageError):
    def __init__(self) -> None:
        super().__init__("A version number is required")


class InvalidVersionFormatError(UsageError):
    def __init__(self, value: str):
        super().__init__(f"Invalid version argument '{value}': expected an integer")
        self.value = value


# Registry errors: raised while building the registry


class RegistryError(MigratorError, ValueError):
    """Raised when the list of migrations cannot form a valid registry."""

    pass


class DuplicateVersionError(RegistryError):
    def __init__(self, version: int):
        super().__init__(f"Migration version {version} is declared more than once")
        self.version = version


class InvalidVersionError(RegistryError):
    def __init__(self, version: int, reason: str):
        super().__init__(f"Migration version {version} is invalid: {reason}")
        self.version = version


# Consistency errors: the code's migrations diverged from the recorded history


class ConsistencyError(MigratorError):
    """
    Raised when the recorded history and the registry disagree.

    This indicates that the set of migrations in code has diverged from what
    was previously applied. It is reported and never resolved automatically.
    """

    pass


class TargetVersionNotFoundError(ConsistencyError):
    def __init__(self, version: int):
        super().__init__(f"Target version {version} is not a known migration")
        self.version = version


class MissingMigrationError(ConsistencyError):
    def __init__(self, version: int):
        super().__init__(f"Recorded migration {version} has no matching migration in code")
        self.version = version


# Execution errors: a forward or backward procedure failed


class ExecutionError(MigratorError):
    """Raised when a migration procedure fails."""

    pass


class ProcedureError(ExecutionError):
    """
    Raised when a migration's ``up`` or ``down`` procedure raises.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, version: int, name: str, direction: str, error: Exception):
        super().__init__(f"Migration {version} ({name}) failed during {direction}: {error}")
        self.version = version
        self.name = name
        self.direction = direction


# Store errors: the history store could not be read or written


class StoreError(MigratorError):
    """
    Raised when the history store fails.

    Wraps storage failures (unreadable or corrupt database file, permission
    problems) as well as violations of the store contract.
    """

    pass


class TableExistsError(StoreError):
    def __init__(self, table: str):
        super().__init__(f"Table '{table}' already exists")
        self.table = table


class RecordNotFoundError(StoreError):
    def __init__(self, message: str = "Record not found"):
        super().__init__(message)


class DuplicateRecordError(StoreError):
    def __init__(self, version: int):
        super().__init__(f"A record for version {version} already exists")
        self.version = version
