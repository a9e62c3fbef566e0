"""mdblog exception hierarchy.

Keep this module small and dependency-free: it is imported broadly across the
project and by tests. The converter itself never raises any of these.
"""


class MdblogError(Exception):
    """Base exception for all mdblog errors."""


class MdblogConfigError(MdblogError):
    """Raised for invalid user configuration."""


class MdblogManifestError(MdblogError):
    """Raised when the blog directory or manifest file cannot be used."""


class MdblogPostError(MdblogError):
    """Raised when a post listed in the manifest cannot be read."""


class MdblogBuildError(MdblogError):
    """Raised when rendered pages cannot be written to the output directory."""
