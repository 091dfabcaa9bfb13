"""
Read-only queries against an existing bare repository.
"""

from dataclasses import dataclass

from dulwich.errors import NotGitRepository, NotTreeError
from dulwich.objects import Commit
from dulwich.repo import Repo as DulwichRepo

from repoforge.exceptions import NotFoundError
from repoforge.services.repo_paths import RepositoryLocation

# Symbolic marker for "the commit HEAD points to"
HEAD = "HEAD"


@dataclass(frozen=True)
class Head:
    name: str
    commit_id: str


class RepositoryIntrospector:
    """Existence, tag, branch and tree lookups through dulwich."""

    def open(self, location: RepositoryLocation) -> DulwichRepo:
        try:
            return DulwichRepo(str(location.path))
        except NotGitRepository:
            raise NotFoundError(f"No repository at {location.path}")

    def exists(self, location: RepositoryLocation) -> bool:
        """True when the repo opens and has at least one branch."""
        try:
            repo = self.open(location)
        except Exception:
            return False
        try:
            return len(repo.refs.as_dict(b"refs/heads")) > 0
        except Exception:
            return False
        finally:
            repo.close()

    def tags(self, location: RepositoryLocation) -> list[str]:
        """Tag names sorted, then reversed."""
        repo = self.open(location)
        try:
            names = [name.decode("utf-8") for name in repo.refs.as_dict(b"refs/tags")]
        finally:
            repo.close()
        return sorted(names, reverse=True)

    def heads(self, location: RepositoryLocation) -> list[Head]:
        repo = self.open(location)
        try:
            refs = repo.refs.as_dict(b"refs/heads")
        finally:
            repo.close()
        return sorted(
            (Head(name=name.decode("utf-8"), commit_id=sha.decode("ascii")) for name, sha in refs.items()),
            key=lambda head: head.name,
        )

    def commit(self, location: RepositoryLocation, ref: str = HEAD) -> Commit:
        """Resolve a ref name, branch, tag or hex sha to a commit."""
        repo = self.open(location)
        try:
            return self._resolve_commit(repo, ref)
        finally:
            repo.close()

    def tree(self, location: RepositoryLocation, commit_ref: "str | Commit" = HEAD, path: str | None = None):
        """Tree of a commit, or the object at `path` inside it."""
        repo = self.open(location)
        try:
            commit = commit_ref if isinstance(commit_ref, Commit) else self._resolve_commit(repo, commit_ref)
            tree = repo[commit.tree]
            if not path:
                return tree
            try:
                _, sha = tree.lookup_path(repo.object_store.__getitem__, path.strip("/").encode("utf-8"))
                return repo[sha]
            except (KeyError, NotTreeError):
                raise NotFoundError(f"Path '{path}' not found in commit {commit.id.decode('ascii')[:8]}")
        finally:
            repo.close()

    def _resolve_commit(self, repo: DulwichRepo, ref: str) -> Commit:
        candidates = [ref.encode("utf-8")]
        if ref != HEAD:
            candidates += [f"refs/heads/{ref}".encode(), f"refs/tags/{ref}".encode()]

        for candidate in candidates:
            try:
                obj = repo[candidate]
            except (KeyError, ValueError):
                continue
            # Peel annotated tags down to the commit
            while not isinstance(obj, Commit) and hasattr(obj, "object"):
                obj = repo[obj.object[1]]
            if isinstance(obj, Commit):
                return obj
        raise NotFoundError(f"Commit '{ref}' not found")
