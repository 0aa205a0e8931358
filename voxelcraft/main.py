from typer import Typer

from .cli.commands import build, mappings, versions


def main():
    app = Typer(add_completion=False, no_args_is_help=True)
    app.command()(build)
    app.command()(versions)
    app.command()(mappings)
    app()
