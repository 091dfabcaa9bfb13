"""
Helpers for building commits and refs in bare test repos with dulwich.
"""
import time

from dulwich.objects import Blob, Commit, Tag, Tree
from dulwich.repo import Repo as DulwichRepo


def _build_tree(repo: DulwichRepo, files: dict[str, bytes]) -> Tree:
    tree = Tree()
    subdirs: dict[str, dict[str, bytes]] = {}
    for path, content in files.items():
        head, _, rest = path.partition("/")
        if rest:
            subdirs.setdefault(head, {})[rest] = content
            continue
        blob = Blob.from_string(content)
        repo.object_store.add_object(blob)
        tree.add(head.encode(), 0o100644, blob.id)

    for name, sub_files in subdirs.items():
        subtree = _build_tree(repo, sub_files)
        tree.add(name.encode(), 0o040000, subtree.id)

    repo.object_store.add_object(tree)
    return tree


def commit_files(
    repo: DulwichRepo,
    files: dict[str, bytes],
    branch: str = "master",
    message: str = "Commit",
) -> bytes:
    """Commit `files` (paths may contain '/') on top of `branch`.

    Returns the new commit id.
    """
    ref = f"refs/heads/{branch}".encode()
    tree = _build_tree(repo, files)

    commit = Commit()
    commit.tree = tree.id
    commit.parents = [repo.refs[ref]] if ref in repo.refs else []
    commit.author = commit.committer = b"Test <test@example.com>"
    commit.author_time = commit.commit_time = int(time.time())
    commit.author_timezone = commit.commit_timezone = 0
    commit.encoding = b"UTF-8"
    commit.message = message.encode()
    repo.object_store.add_object(commit)

    repo.refs[ref] = commit.id
    return commit.id


def tag_commit(repo: DulwichRepo, name: str, commit_id: bytes, annotated: bool = False) -> None:
    """Point refs/tags/{name} at a commit, optionally through a tag object."""
    target = commit_id
    if annotated:
        tag = Tag()
        tag.tagger = b"Test <test@example.com>"
        tag.message = f"Release {name}".encode()
        tag.name = name.encode()
        tag.object = (Commit, commit_id)
        tag.tag_time = int(time.time())
        tag.tag_timezone = 0
        repo.object_store.add_object(tag)
        target = tag.id
    repo.refs[f"refs/tags/{name}".encode()] = target
