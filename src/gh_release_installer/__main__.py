"""Allow ``python -m gh_release_installer``."""

from gh_release_installer.main import main

main()
