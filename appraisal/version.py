from __future__ import annotations

"""
appraisal.version - package version string.

Rules:
- BASE_VERSION is the semver of this package.
- If APPRAISAL_VERSION is set in the environment, that wins (useful for
  builds that stamp a local suffix).
"""

import os

# Bump this on intentional releases.
BASE_VERSION = "0.1.0"


def get_version() -> str:
    override = os.environ.get("APPRAISAL_VERSION")
    if override:
        return override.strip()
    return BASE_VERSION


__version__ = get_version()

__all__ = ["BASE_VERSION", "get_version", "__version__"]
