"""
Version of the installed jctl distribution
"""

from importlib.metadata import version, PackageNotFoundError

DISTRIBUTION = "jctl"


def get_version() -> str:
    """Installed jctl version, or "unknown" when running from an uninstalled checkout"""
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return "unknown"
