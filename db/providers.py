"""
db/providers.py
---------------
Resolves a provider name into a DB-API 2.0 driver factory.

Built-in providers:
    psycopg2  (aliases: postgresql, postgres, npgsql)
    sqlite3   (alias: sqlite)

Any other name is imported as a DB-API module and used through its
module-level `connect()` and `paramstyle`.
"""

import importlib
from dataclasses import dataclass, field
from typing import Any, Callable

from db.errors import ProviderError, ProviderNotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_PARAMSTYLES = ("format", "pyformat", "qmark", "numeric")


@dataclass(frozen=True)
class ProviderFactory:
    """
    Creates connections for one database driver.

    Attributes:
        name: Canonical provider name.
        paramstyle: DB-API paramstyle used to render placeholders.
        connector: Callable taking the connection string and returning
            an open DB-API connection.
    """
    name: str
    paramstyle: str
    connector: Callable[[str], Any] = field(repr=False)

    def connect(self, connection_string: str):
        """Open a new connection using the stored connector."""
        return self.connector(connection_string)


_registry: dict[str, ProviderFactory] = {}


def register_provider(
    name: str,
    connect: Callable[[str], Any],
    paramstyle: str = "pyformat",
    aliases: tuple[str, ...] = (),
) -> ProviderFactory:
    """
    Register a driver under a provider name (and optional aliases).

    Args:
        name: Provider name used by callers.
        connect: Callable taking the connection string.
        paramstyle: DB-API paramstyle of the driver.
        aliases: Extra names resolving to the same factory.

    Returns:
        The registered ProviderFactory.

    Raises:
        ProviderError: If the paramstyle is not supported.
    """
    if paramstyle not in SUPPORTED_PARAMSTYLES:
        raise ProviderError(
            f"Provider {name!r} uses unsupported paramstyle {paramstyle!r}",
            {"provider": name, "paramstyle": paramstyle},
        )
    factory = ProviderFactory(name=name, paramstyle=paramstyle, connector=connect)
    for key in (name, *aliases):
        _registry[key.lower()] = factory
    return factory


def unregister_provider(name: str) -> None:
    """Remove every registry entry pointing at the named provider."""
    target = _registry.get(name.lower())
    if target is None:
        return
    for key in [k for k, v in _registry.items() if v is target]:
        del _registry[key]


def _connect_psycopg2(connection_string: str):
    import psycopg2
    return psycopg2.connect(connection_string)


def _connect_sqlite3(connection_string: str):
    import sqlite3
    return sqlite3.connect(connection_string)


def _from_module(name: str) -> ProviderFactory:
    try:
        module = importlib.import_module(name)
    except ImportError as e:
        raise ProviderNotFoundError(name) from e

    connect = getattr(module, "connect", None)
    paramstyle = getattr(module, "paramstyle", None)
    if not callable(connect) or paramstyle is None:
        raise ProviderNotFoundError(name)

    logger.info(f"Registered DB-API module '{name}' as provider ({paramstyle}).")
    return register_provider(name, connect, paramstyle)


def get_factory(provider: str) -> ProviderFactory:
    """
    Look up the factory for a provider name.

    Args:
        provider: Registered name or alias (case-insensitive), or the
            import name of a DB-API 2.0 module.

    Raises:
        ProviderNotFoundError: If nothing resolves under that name.
        ProviderError: If the driver's paramstyle is not supported.
    """
    if not provider:
        raise ProviderNotFoundError(provider)
    factory = _registry.get(provider.lower())
    if factory is not None:
        return factory
    return _from_module(provider)


register_provider("psycopg2", _connect_psycopg2, "pyformat", aliases=("postgresql", "postgres", "npgsql"))
register_provider("sqlite3", _connect_sqlite3, "qmark", aliases=("sqlite",))
