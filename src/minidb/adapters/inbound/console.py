"""Command line interface for minidb.

Commands:
    repl   Interactive shell; statements end with ``;``
    exec   Execute one statement and print the result
    serve  Run the REST API
"""

import json
from pathlib import Path
from typing import Any, Callable, Optional

import typer

from minidb import __version__
from minidb.adapters.inbound.rest_api import run_server
from minidb.application import DatabaseEngine
from minidb.domain.errors import MiniDBError
from minidb.infrastructure.config import Config, get_config
from minidb.infrastructure.logging import setup_logging, setup_logging_from
from minidb.infrastructure.metrics import setup_metrics
from minidb.infrastructure.tracing import setup_tracing_from


PROMPT = "db > "
CONTINUATION_PROMPT = "... "
EXIT_COMMANDS = {"exit", "quit"}
NULL_TEXT = "null"


app = typer.Typer(
    name="minidb",
    help="Embedded relational engine with a restricted SQL dialect",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"minidb version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING", "--log-level",
        help="Log level for engine events (written to stderr)"
    ),
    log_format: str = typer.Option(
        "console", "--log-format",
        help="Log format: console or json"
    ),
    version: Optional[bool] = typer.Option(
        None, "--version", "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
) -> None:
    """minidb - parse, execute and persist a small SQL dialect."""
    setup_logging(level=log_level, log_format=log_format)


# ----------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------


def _cell(value: Any) -> str:
    return NULL_TEXT if value is None else str(value)


def render_table(rows: list[dict[str, Any]]) -> str:
    """Render rows as a fixed-width bordered table.

    Columns are taken from the first row, in its key order.
    """
    if not rows:
        return ""

    columns = list(rows[0])
    widths = {
        col: max(len(col), *(len(_cell(row.get(col))) for row in rows))
        for col in columns
    }

    separator = "+" + "+".join("-" * (widths[col] + 2) for col in columns) + "+"
    header = "|" + "|".join(f" {col.ljust(widths[col])} " for col in columns) + "|"
    lines = [separator, header, separator]
    for row in rows:
        lines.append(
            "|" + "|".join(f" {_cell(row.get(col)).ljust(widths[col])} " for col in columns) + "|"
        )
    lines.append(separator)
    return "\n".join(lines)


def render_result(result: Any) -> str:
    """Render one statement result the way the shell prints it."""
    if isinstance(result, list):
        if not result:
            return "(no results)"
        return f"{render_table(result)}\n({len(result)} row(s))"

    if isinstance(result, dict):
        keys = set(result)
        if keys == {"message"}:
            return str(result["message"])
        if keys == {"updated"}:
            return f"{result['updated']} row(s) updated."
        if keys == {"deleted"}:
            return f"{result['deleted']} row(s) deleted."
        return json.dumps(result, indent=2)

    return str(result)


# ----------------------------------------------------------------------
# Shell
# ----------------------------------------------------------------------


def run_repl(engine: DatabaseEngine, read_line: Callable[[str], str] = input) -> None:
    """Read statements until ``exit``/``quit`` or end of input.

    Lines are joined with a space until the buffer ends with ``;``.
    Errors are printed to stderr and the loop continues.
    """
    typer.echo("minidb interactive shell")
    typer.echo('Type SQL statements (end with ;), or "exit"/"quit" to exit.\n')

    buffer = ""
    while True:
        try:
            line = read_line(CONTINUATION_PROMPT if buffer else PROMPT)
        except EOFError:
            break

        if not buffer and line.strip().lower() in EXIT_COMMANDS:
            break

        buffer = f"{buffer} {line}".rstrip() if buffer else line.rstrip()
        if not buffer.endswith(";"):
            continue

        sql = buffer[:-1].strip()
        buffer = ""
        if sql:
            try:
                typer.echo(render_result(engine.execute(sql)))
            except (MiniDBError, OSError) as e:
                typer.echo(f"Error: {e}", err=True)
        typer.echo()

    typer.echo("\nGoodbye!")


def _open_engine(data_dir: Optional[Path]) -> DatabaseEngine:
    return DatabaseEngine(data_dir=data_dir, config=Config())


DATA_DIR_OPTION = typer.Option(
    None, "--data-dir", "-d",
    help="Directory holding table records (default: $MINIDB_STORAGE__DATA_DIR or ./storage)"
)


@app.command()
def repl(data_dir: Optional[Path] = DATA_DIR_OPTION) -> None:
    """Start the interactive shell."""
    with _open_engine(data_dir) as engine:
        run_repl(engine)


@app.command("exec")
def exec_statement(
    sql: str = typer.Argument(..., help="Statement to execute"),
    data_dir: Optional[Path] = DATA_DIR_OPTION,
) -> None:
    """Execute a single statement and print its result."""
    with _open_engine(data_dir) as engine:
        try:
            result = engine.execute(sql)
        except (MiniDBError, OSError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1)

    typer.echo(render_result(result))


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port"),
    data_dir: Optional[Path] = DATA_DIR_OPTION,
    metrics: bool = typer.Option(
        False, "--metrics/--no-metrics",
        help="Expose Prometheus metrics on the configured metrics port"
    ),
) -> None:
    """Run the REST API."""
    config = get_config()
    setup_logging_from(config.observability)
    setup_tracing_from(config.observability)
    if metrics:
        setup_metrics(port=config.server.metrics_port)

    with DatabaseEngine(data_dir=data_dir, config=config) as engine:
        run_server(engine, host=host or config.server.host, port=port or config.server.port)


if __name__ == "__main__":
    app()
