# Access-control gateway: interface plus the local git host adapter

from repoforge.services.gateway.base import AccessControlGateway
from repoforge.services.gateway.local import LocalGitGateway, get_gateway

__all__ = [
    "AccessControlGateway",
    "LocalGitGateway",
    "get_gateway",
]
