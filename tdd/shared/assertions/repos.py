"""
Assertion helpers for on-disk repositories and hook files.
"""
import stat
from pathlib import Path


def assert_file_mode(path: Path, expected: int) -> None:
    """Assert the permission bits of a file."""
    actual = stat.S_IMODE(path.stat().st_mode)
    assert actual == expected, f"Expected mode {expected:o} for {path}, got {actual:o}"


def assert_bare_repo(path: Path) -> None:
    """Assert a directory looks like a bare git repository."""
    assert path.is_dir(), f"{path} is not a directory"
    assert (path / "HEAD").exists(), f"{path} has no HEAD"
    assert (path / "objects").is_dir(), f"{path} has no objects dir"
    assert (path / "refs").is_dir(), f"{path} has no refs dir"


def hook_backups(hooks_dir: Path, name: str) -> list[Path]:
    """Timestamped backups of a hook ({name}.{unix_timestamp}[.n])."""
    prefix = f"{name}."
    return sorted(
        p for p in hooks_dir.iterdir()
        if p.name.startswith(prefix) and p.name[len(prefix):].split(".")[0].isdigit()
    )
