"""Exception hierarchy for depfresh.

Manifest errors are fatal and reach the CLI. Registry errors are absorbed by
the metadata cache and turn into a skipped branch.
"""


class DepfreshError(Exception):
    """Base class for all depfresh errors."""


class ConfigError(DepfreshError):
    """Invalid runtime configuration."""


class ManifestError(DepfreshError):
    """The project manifest could not be used."""

    def __init__(self, path, message):
        super().__init__(message)
        self.path = path


class ManifestNotFoundError(ManifestError):
    """The manifest file does not exist."""


class ManifestParseError(ManifestError):
    """The manifest is not valid JSON or has the wrong shape."""


class RegistryError(DepfreshError):
    """Base class for registry failures of a single package."""

    def __init__(self, package_name, message):
        super().__init__(message)
        self.package_name = package_name


class RegistryFetchError(RegistryError):
    """Transport failure or non-success HTTP status."""

    def __init__(self, package_name, message, status=None):
        super().__init__(package_name, message)
        self.status = status


class PackageNotFoundError(RegistryFetchError):
    """The registry answered 404 for the package."""


class RegistryParseError(RegistryError):
    """The registry body is not JSON or lacks the expected shape."""


class InvalidDependencyMap(DepfreshError, ValueError):
    """A dependency map is not a mapping of package name to range string."""
