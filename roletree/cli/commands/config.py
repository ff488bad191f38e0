"""Config commands."""

import cyclopts

from roletree.cli.console import get_console
from roletree.config import Config

app = cyclopts.App(name="config", help="Inspect roletree configuration")


@app.command
def show() -> None:
    """Print the resolved configuration (env, .env and ROLETREE_CONFIG_FILE)."""
    console = get_console()
    config = Config()
    console.print_json(config.model_dump_json())
