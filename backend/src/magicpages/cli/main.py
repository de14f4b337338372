"""MagicPages CLI entry point."""

import click


@click.group()
def cli():
    """MagicPages — lifecycle hooks for page classes."""
    pass


# Register subcommand groups
from magicpages.cli.migrate_cmd import migrate  # noqa: E402
from magicpages.cli.templates_cmd import templates  # noqa: E402

cli.add_command(templates)
cli.add_command(migrate)
