"""Replay command - apply a scenario file to a fresh hierarchy."""

import asyncio
import sys
from pathlib import Path

import cyclopts
from pydantic import ValidationError as PydanticValidationError

from roletree.cli.console import get_console
from roletree.cli.scenario import Scenario, ScenarioRunner
from roletree.domain.shared.error import RoleTreeError

app = cyclopts.App(name="replay", help="Replay a role scenario")


@app.default
def replay(path: Path, *, tree: bool = True) -> None:
    """Apply the grants, revokes and checks in a scenario file.

    Exits with status 1 if any step does not match its expectation.

    Args:
        path: Scenario YAML file.
        tree: Print the resulting role tree.
    """
    console = get_console()

    if not path.exists():
        console.error(f"Scenario not found: {path}")
        sys.exit(1)

    try:
        scenario = Scenario.load(path)
    except (PydanticValidationError, RoleTreeError) as e:
        console.error(f"Invalid scenario {path}", hint=str(e))
        sys.exit(1)

    if not scenario.steps:
        console.warning(f"Scenario {path} has no steps")
    console.info(f"Replaying {len(scenario.steps)} steps from {path} as root {scenario.root}")

    runner = ScenarioRunner(scenario)
    outcomes = asyncio.run(runner.run())

    rows = [
        {
            "kind": o.kind,
            "step": o.description,
            "result": "[green]pass[/green]" if o.passed else "[red]FAIL[/red]",
            "detail": o.detail,
        }
        for o in outcomes
    ]
    console.table(
        rows,
        [("kind", "Kind"), ("step", "Step"), ("result", "Result"), ("detail", "Detail")],
        title=str(path),
        numbered=True,
    )

    if tree:
        console.role_tree(*runner.tree())

    failed = [o for o in outcomes if not o.passed]
    if failed:
        console.error(f"{len(failed)} of {len(outcomes)} steps did not match")
        sys.exit(1)
    console.success(f"All {len(outcomes)} steps matched")
