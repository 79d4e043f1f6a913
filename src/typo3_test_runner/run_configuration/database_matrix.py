"""Static database engine / version / driver compatibility table."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_DBMS = "sqlite"


@dataclass(frozen=True)
class DatabaseEngineSpec:
    """Accepted versions and drivers of one database engine."""

    name: str
    versions: tuple[str, ...] = ()
    default_version: str | None = None
    drivers: tuple[str, ...] = ()
    default_driver: str | None = None
    implied_driver: str | None = None

    @property
    def accepts_version(self) -> bool:
        return bool(self.versions)

    @property
    def accepts_driver(self) -> bool:
        return bool(self.drivers)


DATABASE_ENGINES: Mapping[str, DatabaseEngineSpec] = {
    "sqlite": DatabaseEngineSpec(name="sqlite", implied_driver="pdo_sqlite"),
    "mariadb": DatabaseEngineSpec(
        name="mariadb",
        versions=("10.5", "10.6", "10.11", "11.0", "11.4"),
        default_version="10.11",
        drivers=("mysqli", "pdo_mysql"),
        default_driver="mysqli",
    ),
    "mysql": DatabaseEngineSpec(
        name="mysql",
        versions=("8.0", "8.4", "9.0"),
        default_version="8.0",
        drivers=("mysqli", "pdo_mysql"),
        default_driver="mysqli",
    ),
    "postgres": DatabaseEngineSpec(
        name="postgres",
        versions=("12", "13", "14", "15", "16", "17"),
        default_version="16",
        implied_driver="pdo_pgsql",
    ),
}

PHP_VERSIONS = ("8.2", "8.3", "8.4", "8.5")
DEFAULT_PHP_VERSION = "8.4"
DEFAULT_XDEBUG_PORT = 9003
