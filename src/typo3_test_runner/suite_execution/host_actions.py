"""Work done directly on the host instead of inside a container."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from typo3_test_runner.container_engine import ContainerEngine, RunnerEnvironmentError
from typo3_test_runner.suite_catalog import HostPreparation

LOGGER = logging.getLogger("typo3_test_runner.host")

COMMON_HOST_DIRECTORIES = (".Build/.cache", ".Build/web/typo3temp/var/tests")


class HostPreparationError(RunnerEnvironmentError):
    """Raised when the project directory is not in a usable state."""


def prepare_host(project_root: Path, preparation: HostPreparation) -> None:
    """Delete, then create, the project-relative paths a suite asks for."""
    for relative in preparation.remove_paths:
        remove_project_path(project_root, relative)
    for relative in (*COMMON_HOST_DIRECTORIES, *preparation.create_dirs):
        create_project_directory(project_root, relative)


def create_project_directory(project_root: Path, relative: str) -> None:
    target = project_root / relative
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise HostPreparationError(f"Could not create {target}: {exc}") from exc


def remove_project_path(project_root: Path, relative: str) -> None:
    target = project_root / relative
    try:
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        elif target.exists() or target.is_symlink():
            target.unlink()
        else:
            return
    except OSError as exc:
        raise HostPreparationError(
            f"Could not remove {target}: {exc}. Files created by a container may be "
            "owned by root; remove them manually and retry."
        ) from exc
    LOGGER.debug("removed %s", target)


def ensure_node_modules_writable(project_root: Path) -> None:
    """Refuse to run npm on a node_modules directory with root-owned entries."""
    node_modules = project_root / "node_modules"
    if not node_modules.is_dir():
        return
    for entry in node_modules.iterdir():
        if entry.lstat().st_uid == 0:
            raise HostPreparationError(
                "node_modules contains root-owned files. "
                "Please remove and retry: sudo rm -rf node_modules"
            )


def update_images(engine: ContainerEngine, image_prefix: str) -> int:
    """Pull every local image below `image_prefix`, then drop dangling ones.

    Returns 1 when any image failed to pull, else 0.
    """
    reference = f"{image_prefix}*"
    failures = 0
    for image in engine.list_images(reference):
        LOGGER.info("pulling %s", image)
        if not engine.pull_image(image).succeeded:
            LOGGER.warning("Could not pull %s", image)
            failures += 1
    for image_id in engine.list_images(reference, dangling=True):
        if not engine.remove_image(image_id).succeeded:
            LOGGER.warning("Could not remove dangling image %s", image_id)
    return min(failures, 1)
