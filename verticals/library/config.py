"""Library vertical configuration.

Loads the LibraryConfig from the patterns module once per process,
demonstrating how verticals use the domain config pattern.
"""

from functools import lru_cache

from patterns.domain_config import LibraryConfig


@lru_cache(maxsize=1)
def get_config() -> LibraryConfig:
    """Process-wide configuration from LIBRARY_* environment variables."""
    return LibraryConfig.from_env()
