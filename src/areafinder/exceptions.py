"""Custom exception hierarchy for areafinder."""


class AreaFinderError(Exception):
    """Base exception for all areafinder errors."""


class PostcodeInvalid(AreaFinderError):
    """The provided string is not a valid UK postcode."""

    def __init__(self, postcode: str):
        self.postcode = postcode
        super().__init__(f"Invalid UK postcode: '{postcode}'")


class DirectoryNotFound(AreaFinderError):
    """The area directory file does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Area directory not found at: {path}")


class DirectoryInvalid(AreaFinderError):
    """The area directory exists but its contents are malformed."""

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"Invalid area directory {source}: {detail}")


class MalformedAreaCode(DirectoryInvalid):
    """A (possibly compound) area code does not follow the segment grammar."""

    def __init__(self, source: str, prefix: str, code: str):
        self.prefix = prefix
        self.code = code
        super().__init__(source, f"malformed code '{code}' under '{prefix}'")


class CoverageConflict(AreaFinderError):
    """A postal district is claimed by more than one display name."""

    def __init__(self, district: str, names: tuple[str, str]):
        self.district = district
        self.names = names
        super().__init__(
            f"District {district} maps to both '{names[0]}' and '{names[1]}'"
        )
