"""Console output for the CLI.

Provides a Console class that wraps rich for consistent, polished output.
All CLI output should go through this module.
"""

from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table
from rich.tree import Tree


class Console:
    """CLI output manager wrapping rich.

    Provides consistent formatting for success/error messages, tables,
    and the role tree.
    """

    def __init__(
        self,
        *,
        force_terminal: bool | None = None,
        quiet: bool = False,
    ) -> None:
        """Initialize the console.

        Args:
            force_terminal: Force terminal mode (True/False) or auto-detect (None).
            quiet: Suppress non-essential output.
        """
        self._console = RichConsole(
            force_terminal=force_terminal,
            stderr=False,
        )
        self._err_console = RichConsole(
            force_terminal=force_terminal,
            stderr=True,
        )
        self._quiet = quiet

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        """Print a success message."""
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    # -------------------------------------------------------------------------
    # Structured output
    # -------------------------------------------------------------------------

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console (pass-through to rich)."""
        self._console.print(*args, **kwargs)

    def print_json(self, data: str) -> None:
        """Print a JSON document with highlighting."""
        self._console.print_json(data)

    def table(
        self,
        rows: list[dict[str, Any]],
        columns: list[tuple[str, str]],  # (key, header)
        *,
        title: str | None = None,
        numbered: bool = False,
    ) -> None:
        """Print a table.

        Args:
            rows: List of dicts containing row data.
            columns: List of (key, header) tuples defining columns.
            title: Optional table title.
            numbered: Add a # column with row numbers.
        """
        table = Table(title=title, show_header=True, header_style="bold")

        if numbered:
            table.add_column("#", style="dim", width=3)

        for key, header in columns:
            table.add_column(header)

        for i, row in enumerate(rows, 1):
            values = [str(row.get(key, "")) for key, _ in columns]
            if numbered:
                table.add_row(str(i), *values)
            else:
                table.add_row(*values)

        self._console.print(table)

    def role_tree(
        self,
        root: str,
        children: dict[str, list[str]],
        holders: dict[str, int],
    ) -> None:
        """Print the role hierarchy as a tree, with holder counts per role."""

        def label(role: str) -> str:
            count = holders.get(role, 0)
            style = "bold" if count else "dim"
            return f"[{style}]{role}[/{style}] ({count} holder{'s' if count != 1 else ''})"

        tree = Tree(label(root))
        stack = [(tree, root)]
        while stack:
            node, role = stack.pop()
            for child in children.get(role, []):
                stack.append((node.add(label(child)), child))

        self._console.print(tree)


# Module-level default instance for convenience
_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
