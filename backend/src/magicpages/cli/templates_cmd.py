"""Template CLI commands — list and inspect magic templates."""

from pathlib import Path

import click

from magicpages.core.capabilities import CapabilityRegistry, is_magic
from magicpages.site.site import Site

site_option = click.option(
    "--site",
    "site_file",
    default="site.yaml",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Site definition YAML (config and templates).",
)


def load_site(site_file: Path) -> Site:
    try:
        return Site.from_yaml(site_file)
    except ValueError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)


@click.group()
def templates():
    """Template commands."""
    pass


@templates.command("list")
@site_option
def list_cmd(site_file: Path):
    """List templates with their magic capabilities."""
    site = load_site(site_file)
    registry = CapabilityRegistry()

    if not len(site.templates):
        click.echo("No templates defined.")
        return

    click.echo(f"{len(site.templates)} template(s):")
    for template in site.templates:
        page = site.pages.new_page(template)
        class_name = type(page).__name__
        if not is_magic(page):
            click.echo(f"  - {template.name} ({class_name})")
            continue
        present = registry.for_page(page).present()
        names = ", ".join(c.value for c in present) or "no capabilities"
        click.echo(f"  ✓ {template.name} ({class_name}): {names}")

    if not site.config.is_enabled:
        click.echo(click.style("\nMagic pages are disabled (useMagicClasses).", fg="yellow"))


@templates.command()
@site_option
@click.argument("name")
def inspect(site_file: Path, name: str):
    """Show capabilities, accessors and class file of a template."""
    site = load_site(site_file)
    template = site.templates.get(name)
    if template is None:
        click.echo(f"Error: Template '{name}' not found", err=True)
        raise SystemExit(1)

    site.boot()
    magic = site.magic
    page = site.pages.new_page(template)

    click.echo(click.style(f"Template: {template.name}", bold=True))
    click.echo(f"Class: {type(page).__module__}.{type(page).__name__}")
    click.echo(f"File: {magic.paths.resolve(page)}")
    if not is_magic(page):
        click.echo("Magic: no")
        return
    click.echo("Magic: yes")

    click.echo("\nCapabilities:")
    for capability, present in magic.capabilities.for_page(page).as_dict().items():
        mark = click.style("✓", fg="green") if present else " "
        click.echo(f"  [{mark}] {capability}")

    accessors = magic.accessors.accessors(template.name)
    if accessors:
        click.echo("\nAccessors:")
        for method, field_name in sorted(accessors.items()):
            click.echo(f"  {method}() -> {field_name}")

    bindings = magic.binder.table.for_class(type(page))
    if bindings:
        click.echo("\nBindings:")
        for binding in bindings:
            click.echo(f"  {binding.event} -> {binding.capability.value}")
