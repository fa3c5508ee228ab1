"""Constants used throughout tinydb-migrator."""

# Sentinel (baseline) migration representing "no migrations applied"
SENTINEL_VERSION = 1
SENTINEL_NAME = "-"

# Returned as a version when the history holds no record at all
NO_VERSION = 0

# Versions are stored as signed 64-bit integers
MIN_VERSION = -(2**63)
MAX_VERSION = 2**63 - 1

# Database table names
DB_TABLE_MIGRATIONS = "migrations"

# Record keys
RECORD_KEY_VERSION = "version"

# Configuration lookup
CONFIG_ENV_VAR = "TINYDB_MIGRATOR_CONFIG"
DEFAULT_CONFIG_PATH = "~/.config/tinydb-migrator/config.toml"

# Migration source format: "package.module:attribute"
MIGRATIONS_SOURCE_SEPARATOR = ":"

# Command names understood by Migrator.run()
COMMAND_INIT = "init"
COMMAND_UP = "up"
COMMAND_DOWN = "down"
COMMAND_RESET = "reset"
COMMAND_VERSION = "version"
COMMAND_SET_VERSION = "set_version"

# Display
DATETIME_DISPLAY_FORMAT = "%Y-%m-%d %H:%M"

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
