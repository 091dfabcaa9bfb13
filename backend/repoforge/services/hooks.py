"""
Hook installer - writes server-side hook scripts into bare repos.

Installing is idempotent: a hook whose content already matches is left
untouched (no write, no chmod, no backup) as long as its mode and drop-in
directory are in place too. Changed hooks are backed up to
{hook}.{unix_timestamp} before being replaced.
"""

import logging
import os
import shutil
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

from repoforge.config import get_settings
from repoforge.services.repo_paths import RepositoryLocation

logger = logging.getLogger(__name__)

HOOK_MODE = 0o775
DROP_IN_SUFFIX = ".secondary.d"
TEMPLATE_SUFFIX = "-hook"


@dataclass(frozen=True)
class HookSpec:
    name: str
    content: bytes


class InstallStatus(str, Enum):
    UNCHANGED = "unchanged"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass
class InstallResult:
    hook: str
    status: InstallStatus
    reason: str | None = None  # OS error text when status is FAILED
    backup_path: Path | None = None

    @property
    def ok(self) -> bool:
        return self.status != InstallStatus.FAILED


def load_hook_specs(templates_dir: Path, names: Iterable[str] = ("post-receive",)) -> list[HookSpec]:
    """Read the bundled hook templates ({name}-hook files)."""
    specs = []
    for name in names:
        template = Path(templates_dir) / f"{name}{TEMPLATE_SUFFIX}"
        specs.append(HookSpec(name=name, content=template.read_bytes()))
    return specs


class HookInstaller:
    """Installs hook scripts and their drop-in directories."""

    def __init__(self, templates_dir: Path):
        self.templates_dir = Path(templates_dir)

    def install_hook(self, location: RepositoryLocation, spec: HookSpec) -> InstallResult:
        hook_file = location.hooks_dir / spec.name
        try:
            current = hook_file.read_bytes() if hook_file.exists() else None
            if current == spec.content and self._is_complete(hook_file, location.hooks_dir, spec.name):
                return InstallResult(hook=spec.name, status=InstallStatus.UNCHANGED)

            # Matching content left by an interrupted install only needs mode and drop-in repaired
            backup_path = None
            if current != spec.content:
                if current is not None:
                    backup_path = self._backup(hook_file)
                hook_file.write_bytes(spec.content)

            self._normalize_mode(hook_file)
            self._ensure_drop_in_dir(location.hooks_dir, spec.name)
        except OSError as e:
            logger.warning(f"Failed to install {spec.name} hook in {location.path}: {e}")
            return InstallResult(hook=spec.name, status=InstallStatus.FAILED, reason=str(e))

        logger.info(f"Installed {spec.name} hook in {location.path}")
        return InstallResult(hook=spec.name, status=InstallStatus.INSTALLED, backup_path=backup_path)

    def install_all(self, location: RepositoryLocation, specs: Iterable[HookSpec]) -> list[InstallResult]:
        return [self.install_hook(location, spec) for spec in specs]

    def _backup(self, hook_file: Path) -> Path:
        stamp = str(int(time.time()))
        backup = hook_file.with_name(f"{hook_file.name}.{stamp}")
        # Same-second reinstalls must not clobber an earlier backup
        counter = 1
        while backup.exists():
            backup = hook_file.with_name(f"{hook_file.name}.{stamp}.{counter}")
            counter += 1
        shutil.copy2(hook_file, backup)
        return backup

    def _is_complete(self, hook_file: Path, hooks_dir: Path, name: str) -> bool:
        return (
            (hook_file.stat().st_mode & 0o7777) == HOOK_MODE
            and (hooks_dir / f"{name}{DROP_IN_SUFFIX}").is_dir()
        )

    def _normalize_mode(self, path: Path) -> None:
        if (path.stat().st_mode & 0o7777) != HOOK_MODE:
            os.chmod(path, HOOK_MODE)

    def _ensure_drop_in_dir(self, hooks_dir: Path, name: str) -> None:
        drop_in = hooks_dir / f"{name}{DROP_IN_SUFFIX}"
        if drop_in.is_dir():
            return

        source = self.templates_dir / f"{name}{DROP_IN_SUFFIX}"
        if not source.is_dir():
            raise FileNotFoundError(f"Drop-in template directory not found: {source}")

        shutil.copytree(source, drop_in)
        self._normalize_mode(drop_in)
        for entry in drop_in.iterdir():
            self._normalize_mode(entry)


def get_hook_installer() -> HookInstaller:
    return HookInstaller(get_settings().hooks_dir)


def get_hook_specs() -> list[HookSpec]:
    settings = get_settings()
    return load_hook_specs(settings.hooks_dir, settings.hook_names)
