"""Parsing of dotnet restore diagnostic output."""
from __future__ import annotations

import re
from typing import List

from constants import Constants
from .models import PackageRef

# e.g. "error NU1202: Package recaptcha 1.0.5 is not compatible with net47 (.NETFramework,Version=v4.7)."
_INCOMPATIBLE_RE = re.compile(
    r"Package\s+(\S+)\s+(\d[0-9A-Za-z.\-+]*)\s+is\s+not\s+compatible",
    re.IGNORECASE,
)
_ERROR_CODE_RE = re.compile(r"\b(NU\d{4})\b")


def has_incompatibility_signal(text: str) -> bool:
    """True when the output carries the target-incompatibility error code."""
    return Constants.INCOMPATIBLE_CODE in (text or "")


def extract_incompatible_packages(text: str) -> List[PackageRef]:
    """Return every package the resolver reported as incompatible with the target.

    Duplicates are preserved; an absent signal yields an empty list.
    """
    if not has_incompatibility_signal(text):
        return []
    return [
        PackageRef(id=match.group(1), version=match.group(2))
        for match in _INCOMPATIBLE_RE.finditer(text)
    ]


def extract_error_codes(text: str) -> List[str]:
    """Unique NuGet error/warning codes (``NUxxxx``) in order of first appearance."""
    codes: List[str] = []
    for match in _ERROR_CODE_RE.finditer(text or ""):
        if match.group(1) not in codes:
            codes.append(match.group(1))
    return codes
