"""Backing services each run configuration needs."""

from __future__ import annotations

from dataclasses import dataclass

from typo3_test_runner.readiness_probing import HttpTarget, TcpTarget
from typo3_test_runner.run_configuration import RunConfiguration
from typo3_test_runner.run_lifecycle import RunIdentity
from typo3_test_runner.suite_catalog import SuiteId

from .service_models import ServiceDescriptor

DATABASE_PASSWORD = "funcp"
POSTGRES_USER = "funcu"
MOCK_OAUTH_PORT = 8080
SQLITE_DATABASE_DIR = ".Build/web/typo3temp/var/tests/functional-sqlite-dbs/"


@dataclass(frozen=True)
class SqliteStorage:
    """Test-container settings for sqlite runs; no service container is involved."""

    environment: dict[str, str]
    tmpfs: tuple[str, ...]
    host_directory: str


def plan_services(config: RunConfiguration, identity: RunIdentity) -> tuple[ServiceDescriptor, ...]:
    """Return the services to start, in start order."""
    services: list[ServiceDescriptor] = []
    if config.suite.uses_services and config.database.engine != "sqlite":
        services.append(_database_service(config, identity))
    if config.suite.suite_id is SuiteId.E2E and config.project.mock_oauth:
        services.append(_mock_oauth_service(config, identity))
    return tuple(services)


def sqlite_storage(config: RunConfiguration) -> SqliteStorage | None:
    """Return sqlite test settings when the suite runs against sqlite."""
    if not config.uses_database or config.database.engine != "sqlite":
        return None
    directory = f"{config.project_root}/{SQLITE_DATABASE_DIR}"
    return SqliteStorage(
        environment={"typo3DatabaseDriver": "pdo_sqlite"},
        tmpfs=(f"{directory}:rw,noexec,nosuid",),
        host_directory=SQLITE_DATABASE_DIR,
    )


def _database_service(config: RunConfiguration, identity: RunIdentity) -> ServiceDescriptor:
    engine = config.database.engine
    images = config.project.images
    name = identity.container_name(f"{engine}-func")
    if engine == "postgres":
        return ServiceDescriptor(
            role=engine,
            image=images.postgres.format(version=config.database.version),
            container_name=name,
            environment={"POSTGRES_PASSWORD": DATABASE_PASSWORD, "POSTGRES_USER": POSTGRES_USER},
            tmpfs=("/var/lib/postgresql/data:rw,noexec,nosuid",),
            readiness=TcpTarget(host=name, port=5432),
            connection_environment={
                "typo3DatabaseDriver": "pdo_pgsql",
                "typo3DatabaseName": "bamboo",
                "typo3DatabaseUsername": POSTGRES_USER,
                "typo3DatabaseHost": name,
                "typo3DatabasePassword": DATABASE_PASSWORD,
            },
        )
    image_template = images.mariadb if engine == "mariadb" else images.mysql
    return ServiceDescriptor(
        role=engine,
        image=image_template.format(version=config.database.version),
        container_name=name,
        environment={"MYSQL_ROOT_PASSWORD": DATABASE_PASSWORD},
        tmpfs=("/var/lib/mysql/:rw,noexec,nosuid",),
        readiness=TcpTarget(host=name, port=3306),
        connection_environment={
            "typo3DatabaseDriver": config.database.effective_driver or "mysqli",
            "typo3DatabaseName": "func_test",
            "typo3DatabaseUsername": "root",
            "typo3DatabaseHost": name,
            "typo3DatabasePassword": DATABASE_PASSWORD,
        },
    )


def _mock_oauth_service(config: RunConfiguration, identity: RunIdentity) -> ServiceDescriptor:
    name = identity.container_name("mock-oauth")
    base_url = f"http://{name}:{MOCK_OAUTH_PORT}"
    return ServiceDescriptor(
        role="mock-oauth",
        image=config.project.images.mock_oauth,
        container_name=name,
        environment={"SERVER_PORT": str(MOCK_OAUTH_PORT)},
        readiness=HttpTarget(url=f"{base_url}/default/.well-known/openid-configuration"),
        connection_environment={"MOCK_OAUTH_URL": base_url},
    )
