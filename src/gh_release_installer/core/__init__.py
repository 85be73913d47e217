"""Release resolution, download, verification, caching and deployment."""
