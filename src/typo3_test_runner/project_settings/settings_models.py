"""Project settings entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class ImageSettings:  # pylint: disable=too-many-instance-attributes
    """Container image references; `{php}` and `{version}` are substituted at run time."""

    php: str = "ghcr.io/typo3/core-testing-{php}:latest"
    php_image_prefix: str = "ghcr.io/typo3/core-testing-"
    alpine: str = "docker.io/alpine:3.8"
    playwright: str = "mcr.microsoft.com/playwright:v1.57.0-noble"
    documentation: str = "ghcr.io/typo3-documentation/render-guides:latest"
    mock_oauth: str = "ghcr.io/navikt/mock-oauth2-server:3.0.1"
    mariadb: str = "docker.io/mariadb:{version}"
    mysql: str = "docker.io/mysql:{version}"
    postgres: str = "docker.io/postgres:{version}-alpine"

    def php_image(self, php_version: str) -> str:
        return self.php.format(php="php" + php_version.replace(".", ""))


@dataclass(frozen=True)
class ReadinessSettings:
    """Retry budget for service readiness probes."""

    tcp_attempts: int = 10
    http_attempts: int = 30
    interval_seconds: float = 1.0


@dataclass(frozen=True)
class ProjectSettings:  # pylint: disable=too-many-instance-attributes
    """Per-extension customisation of the runner."""

    network_prefix: str
    composer_root_version: str = "1.x-dev"
    e2e_base_url: str | None = None
    ci_workers: int = 4
    mock_oauth: bool = False
    images: ImageSettings = field(default_factory=ImageSettings)
    readiness: ReadinessSettings = field(default_factory=ReadinessSettings)
    source_path: Path | None = None

    @property
    def default_base_url(self) -> str:
        return self.e2e_base_url or f"https://{self.network_prefix}.ddev.site"
