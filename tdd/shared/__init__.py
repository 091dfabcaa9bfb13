# Cross-cutting test utilities shared across all test types

from .git_helpers import (
    commit_files,
    tag_commit,
)

from .mocks import (
    GatewayCall,
    MockGateway,
)

__all__ = [
    # Git helpers
    "commit_files",
    "tag_commit",
    # Gateway mocks
    "GatewayCall",
    "MockGateway",
]
