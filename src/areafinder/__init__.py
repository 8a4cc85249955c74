"""areafinder: postcode and town search over a static service-area directory."""

from areafinder.client import AreaFinder
from areafinder.exceptions import (
    AreaFinderError,
    CoverageConflict,
    DirectoryInvalid,
    DirectoryNotFound,
    MalformedAreaCode,
    PostcodeInvalid,
)
from areafinder.models import (
    AreaGroup,
    AreaRecord,
    CoverageResult,
    FlattenedArea,
    SearchResult,
)

__all__ = [
    "AreaFinder",
    "AreaGroup",
    "AreaRecord",
    "FlattenedArea",
    "SearchResult",
    "CoverageResult",
    "AreaFinderError",
    "PostcodeInvalid",
    "DirectoryNotFound",
    "DirectoryInvalid",
    "MalformedAreaCode",
    "CoverageConflict",
]
