"""Abstract interface for the access-control gateway."""

from abc import ABC, abstractmethod

from repoforge.models import Project


class AccessControlGateway(ABC):
    """Registers, creates and removes repositories on the repository host.

    Implementations raise AccessDeniedError when the host refuses an
    operation and GatewayUnavailableError for every other failure
    (including timeouts). No other exception type may escape.
    """

    @abstractmethod
    async def materialize(self, path: str, project: Project) -> None:
        """Ensure the repository for `path` exists and is registered.

        Safe to call for a repository that already exists; the call is then
        an update of its registration. Repeated calls leave the same state
        as a single one.
        """
        ...

    @abstractmethod
    async def destroy(self, project: Project) -> None:
        """Deregister and remove the project's repository.

        A repository that is already gone is a successful no-op.
        """
        ...
