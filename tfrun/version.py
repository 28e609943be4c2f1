"""Version of the tfrun package."""

_VERSION = "0.18.1"


def module_version() -> str:
    """Return the version of this package."""
    return _VERSION