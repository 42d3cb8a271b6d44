"""Source resolvers for the supported distributions."""

from typing import Dict, Optional, Type

from common.http_client import HttpClient
from common.platform import PlatformInfo
from versioning.models import Distribution

from .base import SourceResolver
from .gds import GDSResolver
from .github import GitHubClient
from .graalvm import GraalVMResolver
from .graalvm_ce import GraalVMCommunityResolver
from .liberica import LibericaResolver
from .mandrel import MandrelResolver

RESOLVERS: Dict[Distribution, Type[SourceResolver]] = {
    Distribution.GRAALVM_JDK: GraalVMResolver,
    Distribution.GRAALVM_CE: GraalVMCommunityResolver,
    Distribution.GRAALVM_EE: GDSResolver,
    Distribution.MANDREL: MandrelResolver,
    Distribution.LIBERICA: LibericaResolver,
}


def get_resolver(
    distribution: Distribution,
    http: HttpClient,
    platform: PlatformInfo,
    github: Optional[GitHubClient] = None,
    gds_token: Optional[str] = None,
) -> SourceResolver:
    """Create the resolver for ``distribution``.

    Raises:
        ValueError: If the distribution has no resolver.
    """
    resolver_cls = RESOLVERS.get(distribution)
    if resolver_cls is None:
        raise ValueError(f"Unsupported distribution: {distribution}")
    if resolver_cls is GDSResolver:
        return GDSResolver(http, platform, github=github, gds_token=gds_token)
    return resolver_cls(http, platform, github=github)


__all__ = [
    "SourceResolver",
    "GitHubClient",
    "GraalVMResolver",
    "GraalVMCommunityResolver",
    "GDSResolver",
    "MandrelResolver",
    "LibericaResolver",
    "RESOLVERS",
    "get_resolver",
]
