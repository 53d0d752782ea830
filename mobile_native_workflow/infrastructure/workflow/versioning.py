"""Semantic version comparison for CLI plugin checks."""

import re

SEMVER_PATTERN = re.compile(
    r"^v?(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)


def parse_semver(version: str) -> tuple[int, int, int, tuple[str, ...]]:
    """Parse MAJOR.MINOR.PATCH[-prerelease][+build]. Build metadata is ignored."""
    match = SEMVER_PATTERN.match(version.strip())
    if not match:
        raise ValueError(f"Invalid semantic version: {version}")
    prerelease = tuple(match.group(4).split(".")) if match.group(4) else ()
    return int(match.group(1)), int(match.group(2)), int(match.group(3)), prerelease


def _prerelease_key(prerelease: tuple[str, ...]) -> tuple:
    # A release sorts after any of its prereleases; numeric identifiers sort before alphanumeric ones
    if not prerelease:
        return ((2,),)
    return tuple((0, int(part), "") if part.isdigit() else (1, 0, part) for part in prerelease)


def semver_key(version: str) -> tuple:
    major, minor, patch, prerelease = parse_semver(version)
    return major, minor, patch, _prerelease_key(prerelease)


def version_gte(version: str, minimum: str) -> bool:
    """True if version has equal or higher precedence than minimum."""
    return semver_key(version) >= semver_key(minimum)
