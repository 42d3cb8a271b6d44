"""setup-graalvm - acquire GraalVM, Mandrel and Liberica JDKs.

    Returns:
        int: Exit code
"""
import asyncio
import logging
import os
import sys

import semantic_version

from constants import Constants, ExitCodes
from args import parse_args
from cli_config import ConfigError, build_config
from acquisition.notices import check_for_updates
from acquisition.orchestrator import AcquisitionOrchestrator
from common.errors import AcquisitionError, AuthRejected, DownloadFailed, UpstreamUnavailable
from common.http_client import HttpClient
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from resolvers.graalvm_ce import locked_legacy_version
from versioning.models import Distribution, VersionDescriptor
from versioning.normalizer import try_normalize

logger = logging.getLogger(__name__)

OPTIONS_URL = "https://github.com/graalvm/setup-graalvm/tree/main#options"


class UsageError(Exception):
    """The combination of options is not supported."""


def _java_at_least(java_version: str, minimum: str, strict: bool) -> bool:
    if strict:
        try:
            parsed = semantic_version.Version(java_version)
        except ValueError:
            return False
    else:
        coerced = try_normalize(java_version)
        if coerced is None:
            return True
        parsed = semantic_version.Version(f"{coerced.major}.{coerced.minor}.{coerced.patch}")
    return parsed >= semantic_version.Version(minimum)


def select_descriptor(
    java_version: str,
    distribution: str = "",
    version: str = "",
    gds_token: str = "",
    java_package: str = "jdk",
    notices: bool = True,
) -> VersionDescriptor:
    """Decide which distribution and release the options refer to.

    An explicit distribution, or no ``version``, selects the GraalVM for
    JDK 17+ family. A ``version`` without distribution selects legacy
    GraalVM releases (Enterprise when a GDS token is given), dev builds or
    Mandrel.

    Raises:
        UsageError: For unsupported option combinations.
    """
    if distribution or not version:
        if distribution == Distribution.GRAALVM_JDK.value:
            return VersionDescriptor(Distribution.GRAALVM_JDK, java_version)
        if distribution == Distribution.GRAALVM_CE.value:
            return VersionDescriptor(Distribution.GRAALVM_CE, java_version)
        if distribution == Distribution.MANDREL.value:
            if not version.startswith(Constants.MANDREL_NAMESPACE):
                raise UsageError(f"Mandrel requires the 'version' option (see {OPTIONS_URL}).")
            return VersionDescriptor(Distribution.MANDREL, version, java_version=java_version)
        if distribution == Distribution.LIBERICA.value:
            return VersionDescriptor(Distribution.LIBERICA, java_version, java_package=java_package)
        if distribution == Distribution.GRAALVM_EE.value:
            return VersionDescriptor(
                Distribution.GRAALVM_EE, version or Constants.VERSION_LATEST, java_version=java_version
            )
        if distribution:
            raise UsageError(f"Unsupported distribution: {distribution}")
        if java_version == Constants.VERSION_DEV:
            logger.info(
                "This build is using GraalVM Community Edition. To select a specific distribution, "
                "use the 'distribution' option (see %s).", OPTIONS_URL
            )
            return VersionDescriptor(Distribution.GRAALVM_CE, Constants.VERSION_DEV)
        logger.info(
            "This build is using the new Oracle GraalVM. To select a specific distribution, "
            "use the 'distribution' option (see %s).", OPTIONS_URL
        )
        return VersionDescriptor(Distribution.GRAALVM_JDK, java_version)

    if version == Constants.VERSION_LATEST:
        if java_version.startswith("17") or _java_at_least(java_version, "20.0.0", strict=True):
            logger.info(
                "This build is using the new Oracle GraalVM. To select a specific distribution, "
                "use the 'distribution' option (see %s).", OPTIONS_URL
            )
            return VersionDescriptor(Distribution.GRAALVM_JDK, java_version)
        if gds_token:
            # GraalVM 22.x is locked to its last release for this JDK
            return VersionDescriptor(
                Distribution.GRAALVM_EE, locked_legacy_version(java_version), java_version=java_version
            )
        return VersionDescriptor(Distribution.GRAALVM_CE, Constants.VERSION_LATEST, java_version=java_version)

    if version == Constants.VERSION_DEV:
        if gds_token:
            raise UsageError("Downloading GraalVM EE dev builds is not supported")
        if not _java_at_least(java_version, "21.0.0", strict=False):
            logger.warning(
                "GraalVM dev builds are only available for JDK 21. This build is now using a "
                "stable release of GraalVM for JDK %s.", java_version
            )
            return VersionDescriptor(Distribution.GRAALVM_JDK, java_version)
        return VersionDescriptor(Distribution.GRAALVM_CE, Constants.VERSION_DEV)

    if version.startswith(Constants.MANDREL_NAMESPACE):
        return VersionDescriptor(Distribution.MANDREL, version, java_version=java_version)

    if notices:
        notice = check_for_updates(version, java_version)
        if notice:
            logger.warning(notice)
    return _legacy_descriptor(version, java_version, gds_token)


def _legacy_descriptor(version: str, java_version: str, gds_token: str) -> VersionDescriptor:
    if gds_token:
        return VersionDescriptor(Distribution.GRAALVM_EE, version, java_version=java_version)
    return VersionDescriptor(Distribution.GRAALVM_CE, version, java_version=java_version)


def exit_code_for(error: BaseException) -> ExitCodes:
    """Map an exception to the process exit code."""
    if isinstance(error, (UsageError, ConfigError)):
        return ExitCodes.USAGE_ERROR
    if isinstance(error, AuthRejected):
        return ExitCodes.AUTH_ERROR
    if isinstance(error, (UpstreamUnavailable, DownloadFailed)):
        return ExitCodes.CONNECTION_ERROR
    return ExitCodes.ACQUISITION_ERROR


def _setup_logging(args) -> None:
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()
    if getattr(args, "QUIET", False):
        for handler in logging.getLogger().handlers:
            if getattr(handler, "stream", None) in (sys.stderr, sys.stdout):
                handler.setLevel(logging.CRITICAL)
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


async def run(args) -> str:
    """Acquire the JDK selected by ``args`` and return its home directory."""
    config = build_config(args)
    descriptor = select_descriptor(
        args.JAVA_VERSION,
        distribution=args.DISTRIBUTION or "",
        version=args.VERSION or "",
        gds_token=config.gds_token or "",
        java_package=args.JAVA_PACKAGE,
        notices=config.check_for_updates,
    )
    if is_debug_enabled(logger):
        logger.debug(
            "Selected distribution",
            extra=extra_context(
                event="decision",
                component="cli",
                action="select_descriptor",
                distribution=descriptor.distribution.value,
                version=descriptor.version,
                java_version=descriptor.java_version,
            ),
        )
    async with HttpClient(user_agent=config.user_agent, timeout=config.request_timeout) as http:
        orchestrator = AcquisitionOrchestrator(config, http)
        home = await orchestrator.acquire(descriptor)
    return str(home)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)
    try:
        home = asyncio.run(run(args))
    except (AcquisitionError, UsageError, ConfigError) as exc:
        logger.error("%s", exc)
        sys.exit(exit_code_for(exc).value)
    except OSError as exc:
        logger.error("Filesystem error: %s", exc)
        sys.exit(ExitCodes.ACQUISITION_ERROR.value)
    logger.info("GraalVM home: %s", home)
    print(home)
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
