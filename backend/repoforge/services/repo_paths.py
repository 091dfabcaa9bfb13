"""
Repository locations derived from a project's path segment.

Nothing here touches the filesystem; a location is always recomputed
from the path so it can never drift from the project record.
"""

from dataclasses import dataclass
from pathlib import Path

from repoforge.config import Settings, get_settings


@dataclass(frozen=True)
class RepositoryLocation:
    path: Path  # {base_path}/{segment}.git
    url_to_repo: str  # Protocol URL used for clone/push
    web_url: str  # {host_url}/{segment}

    @property
    def hooks_dir(self) -> Path:
        return self.path / "hooks"


class RepoPathResolver:
    """Maps a project path segment to its on-disk repo and clone URLs."""

    def __init__(self, base_path: Path, host_url: str, ssh_user: str = "git", ssh_host: str = "localhost"):
        self.base_path = Path(base_path)
        self.host_url = host_url.rstrip("/")
        self.ssh_user = ssh_user
        self.ssh_host = ssh_host

    @classmethod
    def from_settings(cls, settings: Settings) -> "RepoPathResolver":
        return cls(
            base_path=settings.base_path,
            host_url=settings.host_url,
            ssh_user=settings.ssh_user,
            ssh_host=settings.ssh_host,
        )

    def repo_path(self, segment: str) -> Path:
        return self.base_path / f"{segment}.git"

    def url_to_repo(self, segment: str) -> str:
        return f"{self.ssh_user}@{self.ssh_host}:{segment}.git"

    def resolve(self, segment: str) -> RepositoryLocation:
        return RepositoryLocation(
            path=self.repo_path(segment),
            url_to_repo=self.url_to_repo(segment),
            web_url=f"{self.host_url}/{segment}",
        )


def get_resolver() -> RepoPathResolver:
    return RepoPathResolver.from_settings(get_settings())
