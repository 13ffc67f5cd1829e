"""Semantic version handling for node versions and edge bindings."""
from __future__ import annotations

import re

from lattice.models.enums import DriftSeverity

_STRICT_SEMVER = re.compile(r"^\d+\.\d+\.\d+$")

BUMP_PARTS = ("major", "minor", "patch")


def parse_version(version: str | None) -> tuple[int, int, int]:
    """Split a version string into ``(major, minor, patch)``.

    Missing or non-numeric components count as 0; this never raises.
    """
    parts = (version or "").strip().split(".")
    numbers: list[int] = []
    for part in parts[:3]:
        try:
            numbers.append(int(part))
        except ValueError:
            numbers.append(0)
    while len(numbers) < 3:
        numbers.append(0)
    return numbers[0], numbers[1], numbers[2]


def is_valid_version(version: str | None) -> bool:
    """True for a strict ``MAJOR.MINOR.PATCH`` string."""
    return bool(version) and _STRICT_SEMVER.match(str(version).strip()) is not None


def classify_drift(bound: str | None, current: str | None) -> DriftSeverity:
    """Classify how far ``current`` has moved past ``bound``.

    Major dominates minor dominates patch. A bound version equal to or ahead
    of the current one is not drift.
    """
    b_major, b_minor, b_patch = parse_version(bound)
    c_major, c_minor, c_patch = parse_version(current)

    if c_major > b_major:
        return DriftSeverity.MAJOR
    if c_major == b_major and c_minor > b_minor:
        return DriftSeverity.MINOR
    if c_major == b_major and c_minor == b_minor and c_patch > b_patch:
        return DriftSeverity.PATCH
    return DriftSeverity.NONE


def bump_version(version: str | None, part: str = "patch") -> str:
    """Return ``version`` incremented by ``part`` (``major``, ``minor`` or ``patch``).

    Raises:
        ValueError: If ``part`` is not a recognised component.
    """
    major, minor, patch = parse_version(version)
    if part == "major":
        return f"{major + 1}.0.0"
    if part == "minor":
        return f"{major}.{minor + 1}.0"
    if part == "patch":
        return f"{major}.{minor}.{patch + 1}"
    raise ValueError(f"Invalid version part '{part}'; expected one of: {', '.join(BUMP_PARTS)}")
