from __future__ import annotations
"""
appraisal.config - configuration for the appraisal session engine

Covers:
- Minimum stake per vote (base units; 1 currency unit = 10**18 base units)
- Maximum voting window a session may be opened with
- Listing cost notional (reward units) charged to non-originator openers
- Exchange curve used to price one reward unit in base currency
- Administrator identity (may designate the privileged originator)

Environment overrides (all optional; sensible defaults provided):

  # Staking
  APPRAISAL_MIN_STAKE=5000000000000000

  # Voting window (seconds)
  APPRAISAL_MAX_VOTING_WINDOW_S=86400

  # Listing (reward units in base units)
  APPRAISAL_LISTING_NOTIONAL=5000000000000000000

  # Exchange curve (base units)
  APPRAISAL_EXCHANGE_BASE_PRICE=1000000000000000
  APPRAISAL_EXCHANGE_INCREMENT=1000000000000

  # Roles
  APPRAISAL_ADMIN=admin

You can also load from a JSON or YAML file via
`APPRAISAL_CONFIG_FILE=/path/to/config.(json|yaml|yml)`.
File values override defaults; environment overrides the file.
"""


from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional
import json
import os
from pathlib import Path

import yaml


ONE_DAY_S = 86_400


# -------------------------- Data classes --------------------------


@dataclass
class StakeParams:
    """Minimum stake accepted by `commit` (base units)."""
    min_stake: int = 5_000_000_000_000_000      # 0.005 currency units

    def validate(self) -> None:
        if self.min_stake <= 0:
            raise ValueError(f"min_stake must be positive (got {self.min_stake}).")


@dataclass
class WindowParams:
    """Upper bound on the voting window a session can be opened with."""
    max_voting_window_s: int = ONE_DAY_S

    def validate(self) -> None:
        if not (0 < self.max_voting_window_s <= ONE_DAY_S):
            raise ValueError(
                f"max_voting_window_s must be in (0, {ONE_DAY_S}] (got {self.max_voting_window_s})."
            )


@dataclass
class ListingParams:
    """Listing cost notional, expressed in reward units (base units)."""
    notional: int = 5_000_000_000_000_000_000   # 5 reward units

    def validate(self) -> None:
        if self.notional < 0:
            raise ValueError("listing notional must be non-negative.")


@dataclass
class ExchangeCurve:
    """
    Linear-in-issuance price of one reward unit in base currency:

        price = base_price + issued * increment // 10**18
    """
    base_price: int = 1_000_000_000_000_000     # 0.001 currency per reward unit
    increment: int = 1_000_000_000_000          # +0.000001 per reward unit issued

    def validate(self) -> None:
        if self.base_price <= 0:
            raise ValueError("exchange base_price must be positive.")
        if self.increment < 0:
            raise ValueError("exchange increment must be non-negative.")


@dataclass
class EngineConfig:
    """Top-level configuration container."""
    stake: StakeParams = field(default_factory=StakeParams)
    window: WindowParams = field(default_factory=WindowParams)
    listing: ListingParams = field(default_factory=ListingParams)
    exchange: ExchangeCurve = field(default_factory=ExchangeCurve)

    token_decimals: int = 18  # informational (base unit = 1e-18 currency)
    admin: str = "admin"

    def validate(self) -> None:
        self.stake.validate()
        self.window.validate()
        self.listing.validate()
        self.exchange.validate()
        if self.token_decimals <= 0:
            raise ValueError("token_decimals must be positive.")
        if not self.admin:
            raise ValueError("admin must be a non-empty identity.")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -------------------------- Loaders --------------------------


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(str(v).replace("_", ""))
    except ValueError as e:
        raise ValueError(f"Invalid int for {name}: {v!r}") from e


def from_env(base: Optional[EngineConfig] = None, prefix: str = "APPRAISAL_") -> EngineConfig:
    """
    Build an EngineConfig from environment variables, optionally layering on top of `base`.
    """
    cfg = base or EngineConfig()

    min_stake = _getenv_int(f"{prefix}MIN_STAKE", cfg.stake.min_stake)
    max_window = _getenv_int(f"{prefix}MAX_VOTING_WINDOW_S", cfg.window.max_voting_window_s)
    notional = _getenv_int(f"{prefix}LISTING_NOTIONAL", cfg.listing.notional)
    base_price = _getenv_int(f"{prefix}EXCHANGE_BASE_PRICE", cfg.exchange.base_price)
    increment = _getenv_int(f"{prefix}EXCHANGE_INCREMENT", cfg.exchange.increment)
    admin = os.getenv(f"{prefix}ADMIN") or cfg.admin

    new_cfg = EngineConfig(
        stake=StakeParams(min_stake=min_stake),
        window=WindowParams(max_voting_window_s=max_window),
        listing=ListingParams(notional=notional),
        exchange=ExchangeCurve(base_price=base_price, increment=increment),
        token_decimals=cfg.token_decimals,
        admin=admin,
    )
    new_cfg.validate()
    return new_cfg


def from_file(path: str | os.PathLike[str]) -> EngineConfig:
    """
    Load configuration from a JSON or YAML file.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")

    stake = data.get("stake", {})
    window = data.get("window", {})
    listing = data.get("listing", {})
    exchange = data.get("exchange", {})

    cfg = EngineConfig(
        stake=StakeParams(min_stake=int(stake.get("min_stake", StakeParams().min_stake))),
        window=WindowParams(
            max_voting_window_s=int(window.get("max_voting_window_s", WindowParams().max_voting_window_s)),
        ),
        listing=ListingParams(notional=int(listing.get("notional", ListingParams().notional))),
        exchange=ExchangeCurve(
            base_price=int(exchange.get("base_price", ExchangeCurve().base_price)),
            increment=int(exchange.get("increment", ExchangeCurve().increment)),
        ),
        token_decimals=int(data.get("token_decimals", EngineConfig().token_decimals)),
        admin=str(data.get("admin", EngineConfig().admin)),
    )
    cfg.validate()
    return cfg


def load() -> EngineConfig:
    """
    Load configuration using the following precedence:
      1) File at $APPRAISAL_CONFIG_FILE (JSON/YAML)
      2) Environment variables (APPRAISAL_*), applied on top of defaults or file values
    """
    file_path = os.getenv("APPRAISAL_CONFIG_FILE")
    base = from_file(file_path) if file_path else EngineConfig()
    return from_env(base=base)


# -------------------------- Utilities --------------------------


def pretty(cfg: Optional[EngineConfig] = None) -> str:
    """Return a human-readable JSON string of the current config."""
    obj = (cfg or load()).to_dict()
    return json.dumps(obj, indent=2, sort_keys=True)


__all__ = [
    "ONE_DAY_S",
    "StakeParams",
    "WindowParams",
    "ListingParams",
    "ExchangeCurve",
    "EngineConfig",
    "from_env",
    "from_file",
    "load",
    "pretty",
]
