"""Top-level package for gh-release-installer.

Download, verify (SHA-256), install or launch binaries published on
GitHub Releases.

License: MIT
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gh-release-installer")
except PackageNotFoundError:
    # Fallback for development environments where package isn't installed
    __version__ = "dev"
