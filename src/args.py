"""Argument parsing for setup-graalvm."""

import argparse

from versioning.models import Distribution


def build_parser():
    """Builds the argument parser."""
    parser = argparse.ArgumentParser(
        prog="setup-graalvm",
        description=(
            "Download, verify and cache GraalVM, Mandrel and Liberica JDKs"
        ),
        add_help=True,
    )

    parser.add_argument("-j", "--java-version",
                        dest="JAVA_VERSION",
                        help="Java version, e.g. 21, 17.0.9, 24-ea, latest-ea or dev",
                        action="store", type=str,
                        required=True)
    parser.add_argument("-d", "--distribution",
                        dest="DISTRIBUTION",
                        help="Distribution to install (default: graalvm, or derived from --version)",
                        action="store", type=str,
                        choices=[d.value for d in Distribution],
                        default="")
    parser.add_argument("-v", "--version",
                        dest="VERSION",
                        help="GraalVM or Mandrel release version (legacy releases and Mandrel only)",
                        action="store", type=str,
                        default="")
    parser.add_argument("--java-package",
                        dest="JAVA_PACKAGE",
                        help="Java package for Liberica (jdk or jdk+fx)",
                        action="store", type=str,
                        default="jdk")

    parser.add_argument("--gds-token",
                        dest="GDS_TOKEN",
                        help="Download token for GraalVM Enterprise Edition",
                        action="store", type=str)
    parser.add_argument("--github-token",
                        dest="GITHUB_TOKEN",
                        help="GitHub token used for API requests",
                        action="store", type=str)
    parser.add_argument("--tool-cache",
                        dest="TOOL_CACHE",
                        help="Tool cache directory",
                        action="store", type=str)
    parser.add_argument("--temp-dir",
                        dest="TEMP_DIR",
                        help="Directory for downloads",
                        action="store", type=str)
    parser.add_argument("--no-check-for-updates",
                        dest="CHECK_FOR_UPDATES",
                        help="Do not print upgrade notices for outdated releases.",
                        action="store_false")

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML or YML)",
                        action="store",
                        type=str)

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
