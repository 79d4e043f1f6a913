"""Project settings scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

from .loader import DEFAULT_SETTINGS_LOCATION

DEFAULT_SETTINGS_FILENAME = str(DEFAULT_SETTINGS_LOCATION)

_SETTINGS_SCAFFOLD_TEMPLATE = """# Project settings for typo3-test-runner.
# Every key is optional; commented lines show the built-in defaults.

# Prefix of the per-run network name. Use your extension key.
network_prefix: "my-extension"

# Exported as COMPOSER_ROOT_VERSION to composer-based suites.
composer_root_version: "1.x-dev"

# Base URL of the TYPO3 instance used by the e2e suite.
# TYPO3_BASE_URL in the environment takes precedence.
# e2e_base_url: "https://my-extension.ddev.site"

# Fixed worker count for functionalParallel in CI.
# Interactive runs use half of the available CPUs.
ci_workers: 4

# Start a mock OAuth2 server next to the e2e suite.
mock_oauth: false

# images:
#   php: "ghcr.io/typo3/core-testing-{php}:latest"
#   php_image_prefix: "ghcr.io/typo3/core-testing-"
#   alpine: "docker.io/alpine:3.8"
#   playwright: "mcr.microsoft.com/playwright:v1.57.0-noble"
#   documentation: "ghcr.io/typo3-documentation/render-guides:latest"
#   mock_oauth: "ghcr.io/navikt/mock-oauth2-server:3.0.1"
#   mariadb: "docker.io/mariadb:{version}"
#   mysql: "docker.io/mysql:{version}"
#   postgres: "docker.io/postgres:{version}-alpine"

# readiness:
#   tcp_attempts: 10
#   http_attempts: 30
#   interval_seconds: 1
"""


def build_settings_scaffold() -> str:
    """Build a commented project settings file."""
    return _SETTINGS_SCAFFOLD_TEMPLATE


def write_settings_scaffold(output_path: Path | str) -> Path:
    """Write the project settings scaffold to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Project settings file already exists: {destination.resolve()}")
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(build_settings_scaffold(), encoding="utf-8")
    return destination.resolve()
