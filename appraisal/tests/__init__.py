"""
appraisal.tests helpers

- Deterministic test defaults (Hypothesis profile).
- Path helpers: PKG_ROOT
"""

from __future__ import annotations

import os
from pathlib import Path

from hypothesis import settings

# ----- Paths -----
HERE = Path(__file__).resolve()
PKG_ROOT = HERE.parents[1]          # .../appraisal

# Hypothesis defaults: faster local runs, deeper CI runs
# Local: fewer examples for snappy feedback; no global deadline to avoid flakiness on CI
settings.register_profile("local", settings(max_examples=60, deadline=None))
# CI: more coverage
settings.register_profile("ci", settings(max_examples=200, deadline=None))
# Pick profile by env, default to local unless CI is set
_profile = os.environ.get("HYPOTHESIS_PROFILE") or ("ci" if os.environ.get("CI") else "local")
settings.load_profile(_profile)
