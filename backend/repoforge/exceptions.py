"""
Exception types raised across repoforge.

Gateway failures come in two flavours: AccessDeniedError is surfaced to the
user as a named, recoverable condition, everything else collapses into
GatewayUnavailableError ("try again later").
"""


class RepoforgeError(Exception):
    """Base class for repoforge errors."""
    pass


class ProjectValidationError(RepoforgeError):
    """Raised when project attributes are rejected before provisioning."""

    def __init__(self, messages: list[str]):
        self.messages = messages
        super().__init__("; ".join(messages))


class GatewayError(RepoforgeError):
    """Raised when the access-control gateway fails an operation."""

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(detail)


class AccessDeniedError(GatewayError):
    """The gateway refused the operation for lack of privilege."""
    pass


class GatewayUnavailableError(GatewayError):
    """Any other gateway failure: crash, I/O error, timeout."""
    pass


class NotFoundError(RepoforgeError):
    """Requested ref or tree path does not exist in the repository."""
    pass
