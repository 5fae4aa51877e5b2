import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from typeorm_to_prisma.cli.migrate import run, schema
from typeorm_to_prisma.cli.serve import serve_app

app = typer.Typer(
    name="typeorm-to-prisma",
    help="TypeORM to Prisma codemod: rewrite repository usage and extract a Prisma schema.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log every rewrite decision.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


app.command("run")(run)
app.command("schema")(schema)
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
