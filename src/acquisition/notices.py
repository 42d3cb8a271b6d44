"""Upgrade notices for outdated GraalVM releases."""

from typing import Optional

MIGRATION_GUIDE = (
    "https://github.com/graalvm/setup-graalvm#migrating-from-graalvm-223-or-earlier-"
    "to-the-new-graalvm-for-jdk-17-and-later"
)


def check_for_updates(graalvm_version: str, java_version: str) -> Optional[str]:
    """Return an upgrade notice for the requested release, or None."""
    if java_version == "20":
        return (
            "A new GraalVM release is available! Please consider upgrading to GraalVM for JDK 21: "
            "https://medium.com/graalvm/graalvm-for-jdk-21-is-here-ee01177dd12d"
        )
    if graalvm_version and java_version in ("17", "19"):
        recommended = "17" if java_version == "17" else "21"
        return (
            f"A new GraalVM release is available! Please consider upgrading to GraalVM for JDK "
            f"{recommended}. Instructions: {MIGRATION_GUIDE}"
        )
    if graalvm_version.startswith("22.3.") and java_version == "11":
        return (
            "Please consider upgrading your project to Java 17+. GraalVM 22.3.X releases are the "
            "last to support JDK11: https://github.com/oracle/graal/issues/5063"
        )
    return None
