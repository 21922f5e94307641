from __future__ import annotations
"""
Appraisal - commit-reveal price discovery sessions.

Voters stake principal on a concealed appraisal of an asset, reveal it after
the voting deadline, and are scored against the stake-weighted consensus:
accurate voters share the session profit, inaccurate ones forfeit part of
their stake. Submodules are lazily imported to keep import time minimal.

Public surface (lazily loaded):
- config, errors, metrics, clock
- engine, registry, ledger, control
- commitment, weighting, scoring, exchange
- interfaces, treasury, payments
- model, scenario, cli
"""


import importlib
from typing import List

from .version import __version__

__all__: List[str] = [
    "__version__",
    # lazily importable subpackages/modules
    "config",
    "errors",
    "metrics",
    "clock",
    "engine",
    "registry",
    "ledger",
    "control",
    "commitment",
    "weighting",
    "scoring",
    "exchange",
    "interfaces",
    "treasury",
    "payments",
    "model",
    "scenario",
    "cli",
]

# --- Lazy module loader (PEP 562) -------------------------------------------------

_lazy_modules = set(__all__) - {"__version__"}


def __getattr__(name: str):
    if name in _lazy_modules:
        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(set(globals().keys()) | _lazy_modules)


def get_version() -> str:
    """Return the package version string."""
    return __version__
