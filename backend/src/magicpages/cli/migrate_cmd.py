"""Migrate CLI command — run migrate() of changed magic page classes."""

import logging
from pathlib import Path

import click

from magicpages.cli.templates_cmd import load_site, site_option


@click.command()
@site_option
@click.option("--force", is_flag=True, default=False, help="Migrate regardless of file changes.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log each migration.")
def migrate(site_file: Path, force: bool, verbose: bool):
    """Run migrate() of magic page classes whose files changed."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    site = load_site(site_file)
    site.boot()
    migrated = site.magic.migrations.run(force=force)
    if not migrated:
        click.echo("No migrations to run.")
        return
    for template_name in migrated:
        click.echo(f"  ✓ migrated {template_name}")
    click.echo(click.style(f"\n{len(migrated)} template(s) migrated.", fg="green", bold=True))
