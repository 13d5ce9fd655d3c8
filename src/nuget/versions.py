"""NuGet version and identity comparison helpers."""

from __future__ import annotations


def normalize_version(version: str) -> str:
    """Strip trailing zero segments so ``1.0.0.0`` and ``1`` compare equal.

    Segments are removed from the right one at a time while more than one
    segment remains: ``1.0.0.0 -> 1``, ``1.2.0 -> 1.2``, ``1.0.1`` unchanged.
    """
    segments = version.strip().split(".")
    while len(segments) > 1 and segments[-1] == "0":
        segments.pop()
    return ".".join(segments)


def same_package(left_id: str, left_version: str, right_id: str, right_version: str) -> bool:
    """Case-insensitive id match plus normalized version match."""
    return (
        left_id.lower() == right_id.lower()
        and normalize_version(left_version) == normalize_version(right_version)
    )
