"""Resolve migration lists from "module:attribute" sources."""

import importlib
import logging

from .constants import MIGRATIONS_SOURCE_SEPARATOR
from .migration import Migration

logger = logging.getLogger(__name__)


def load_migrations(source: str) -> list[Migration]:
    """
    Import the migrations named by ``source``.

    Examples:
        myapp.migrations:MIGRATIONS      -> the MIGRATIONS list
        myapp.migrations:get_migrations  -> the list returned by get_migrations()

    Args:
        source: Import path in "package.module:attribute" form

    Returns:
        List of migrations

    Raises:
        ValueError: If the source is malformed, cannot be imported, or does not
            yield a list of migrations
    """
    module_name, separator, attribute = source.partition(MIGRATIONS_SOURCE_SEPARATOR)
    if not separator or not module_name or not attribute:
        raise ValueError(f"Invalid migrations source '{source}': expected 'package.module:attribute'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import migrations module '{module_name}': {e}") from e

    try:
        value = getattr(module, attribute)
    except AttributeError as e:
        raise ValueError(f"Module '{module_name}' has no attribute '{attribute}'") from e

    if callable(value):
        value = value()

    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Migrations source '{source}' must be a list of migrations")

    invalid = [item for item in value if not isinstance(item, Migration)]
    if invalid:
        raise ValueError(f"Migrations source '{source}' contains non-migration items: {invalid!r}")

    logger.debug(f"Loaded {len(value)} migration(s) from {source}")
    return list(value)
