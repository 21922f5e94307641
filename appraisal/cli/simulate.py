from __future__ import annotations

"""
appraisal.cli.simulate
----------------------

Drive a scripted appraisal session end to end and print the outcome.

Examples
--------
# Run a YAML scenario and print a table
python -m appraisal.cli.simulate run scenario.yaml

# Same, as JSON
python -m appraisal.cli.simulate run scenario.yaml --json

# Show the effective engine configuration (file + environment)
python -m appraisal.cli.simulate config
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from ..config import EngineConfig, from_file, load, pretty
from ..errors import AppraisalError
from ..exchange import UNIT
from ..scenario import ScenarioResult, load_scenario, run_scenario

app = typer.Typer(
    name="appraisal-simulate",
    add_completion=False,
    no_args_is_help=True,
    help="Run scripted commit-reveal appraisal sessions against an in-memory engine.",
)

# -------------------- utils --------------------


def _pad(s: str, n: int) -> str:
    if len(s) <= n:
        return s + " " * (n - len(s))
    if n <= 4:
        return s[:n]
    return s[: n - 1] + "…"


def _fmt_amt(a: int) -> str:
    # Whole currency units, max 6 decimals, trailing zeros stripped
    s = f"{a / UNIT:.6f}".rstrip("0").rstrip(".")
    return s if s else "0"


def _render_table(res: ScenarioResult) -> str:
    cols = [("voter", 12), ("stake", 12), ("appraisal", 12), ("base", 5),
            ("harvested", 12), ("principal", 12), ("profit", 12)]
    lines = [
        f"session {res.key['asset']}/{res.key['instance']}#{res.key['nonce']}",
        f"final appraisal: {res.final_appraisal if res.final_appraisal is not None else '-'}",
        "",
        " ".join(_pad(name, w) for name, w in cols),
        " ".join("-" * w for _, w in cols),
    ]
    for v in res.voters:
        row = [
            v.name,
            _fmt_amt(v.stake),
            str(v.appraisal) if v.revealed else "(hidden)",
            str(v.base),
            _fmt_amt(v.harvested),
            _fmt_amt(v.principal_returned),
            _fmt_amt(v.profit),
        ]
        lines.append(" ".join(_pad(c, w) for c, (_, w) in zip(row, cols)))
    lines.append("")
    for memo, amt in sorted(res.treasury_received.items()):
        lines.append(f"treasury {memo}: {_fmt_amt(amt)}")
    if res.closed_by is not None:
        lines.append(f"closed ({res.close_reason}) by {res.closed_by}, caller fee {_fmt_amt(res.caller_fee)}")
    return "\n".join(lines)


# -------------------- commands --------------------


@app.command("run")
def run_cmd(
    scenario: Path = typer.Argument(..., exists=True, dir_okay=False, help="Scenario file (JSON or YAML)."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, dir_okay=False,
                                          help="Engine config file; defaults to $APPRAISAL_CONFIG_FILE/env."),
    json_out: bool = typer.Option(False, "--json", help="Emit JSON instead of a table."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity to stderr."),
) -> None:
    """Run SCENARIO through open, commit, reveal, settle, harvest and claim."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        cfg: EngineConfig = from_file(config) if config else load()
        res = run_scenario(load_scenario(scenario), cfg)
    except AppraisalError as e:
        typer.echo(json.dumps({"error": e.to_dict()}, indent=2), err=True)
        raise typer.Exit(code=1)
    except ValueError as e:
        typer.echo(f"invalid scenario or config: {e}", err=True)
        raise typer.Exit(code=2)

    if json_out:
        typer.echo(json.dumps(res.to_dict(), indent=2, sort_keys=True))
    else:
        typer.echo(_render_table(res))


@app.command("config")
def config_cmd() -> None:
    """Print the effective engine configuration."""
    typer.echo(pretty())


if __name__ == "__main__":
    app()
