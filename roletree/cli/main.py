"""Main CLI application using Cyclopts."""

import cyclopts

from roletree.cli.commands import config, replay
from roletree.config import Config, configure_logging

app = cyclopts.App(
    name="roletree",
    help="Hierarchical role authorization - CLI",
)

app.command(replay.app, name="replay")
app.command(config.app, name="config")


def main() -> None:
    configure_logging(Config().logging)
    app()
