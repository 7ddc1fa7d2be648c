"""Main CLI entry point for avgdown.

This module provides the main click group and lazy loading
of subcommand modules to keep startup fast.
"""

import logging

import click
from rich.console import Console

# Console for rich output
console = Console()


class LazyGroup(click.Group):
    """A click Group that lazily loads commands.

    Command modules are only imported when they are actually invoked.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the lazy group.

        Args:
            lazy_subcommands: Mapping of command names to module paths.
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """List all available commands."""
        base = super().list_commands(ctx)
        lazy = list(self._lazy_subcommands.keys())
        return sorted(set(base + lazy))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, lazily loading if needed."""
        if cmd_name in self.commands:
            return self.commands[cmd_name]

        if cmd_name in self._lazy_subcommands:
            return self._lazy_load(cmd_name)

        return None

    def _lazy_load(self, cmd_name: str) -> click.Command:
        """Lazily load a command from its module path."""
        import importlib

        module_path = self._lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)

        cmd = getattr(module, cmd_name, None)
        if not isinstance(cmd, click.Command):
            raise click.ClickException(f"Could not find command '{cmd_name}' in {module_path}")

        self.add_command(cmd)
        return cmd


LAZY_SUBCOMMANDS = {
    "calc": "avgdown.cli.calc",
    "scan": "avgdown.cli.scan",
    "prefs": "avgdown.cli.prefs",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def init_logging(level: str) -> None:
    """Route log records through rich on stderr."""
    from rich.logging import RichHandler

    handler = RichHandler(console=Console(stderr=True), show_path=False)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="avgdown")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """avgdown - average down a losing position to a target loss.

    Works out how many shares to buy so a position's average cost puts it
    at a chosen loss percentage, and scans a portfolio for positions whose
    loss already exceeds a threshold.

    \b
    Quick Start:
      avgdown calc --page position.html --target 20
      avgdown calc --price 50 --avg-cost 100 --shares 10 -t 20
      avgdown scan --page portfolio.html --threshold 15
      avgdown prefs show
    """
    from avgdown.config import get_log_level, load_config

    ctx.ensure_object(dict)
    config = load_config()
    ctx.obj["config"] = config

    init_logging("DEBUG" if verbose else get_log_level(config))


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
