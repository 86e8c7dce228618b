"""Entry point for the folio command line."""

import click

from folio import __version__
from folio.cli.build import build
from folio.cli.serve import serve


@click.group()
@click.version_option(__version__, prog_name="folio")
def cli() -> None:
    """Folio static site generator."""


cli.add_command(build)
cli.add_command(serve)


if __name__ == "__main__":
    cli()
