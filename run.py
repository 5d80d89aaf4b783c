import os
from pathlib import Path
from typing import Optional

import typer

from medscript.commons.engine import DEFAULT_SETTINGS, MedScriptEngine, load_settings
from medscript.commons.logger import setup_logging

app = typer.Typer(add_completion=False, help="MedScript prescription shorthand compiler")


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as ex:
        typer.echo(f"Cannot read {path}: {ex}", err=True)
        raise typer.Exit(code=1)


def _make_engine(settings_path: Optional[Path]) -> MedScriptEngine:
    settings = load_settings(str(settings_path) if settings_path else DEFAULT_SETTINGS)
    log = setup_logging(settings.paths.logs_root, os.getenv("LOG_LEVEL", settings.app.log_level))
    log.info(f"{settings.app.name} starting")
    return MedScriptEngine(settings)


def _print_tokens(engine: MedScriptEngine, text: str) -> None:
    typer.echo("=== TOKENS ===")
    for tok in engine.tokens(text):
        typer.echo(str(tok))


@app.command("compile")
def compile_file(
    file: Path = typer.Argument(..., help="MedScript source file"),
    tokens: Optional[bool] = typer.Option(None, "--tokens/--no-tokens", help="dump the token stream"),
    settings: Optional[Path] = typer.Option(None, help="settings YAML"),
):
    """Compile FILE and print diagnostics followed by the JSON rendering."""
    engine = _make_engine(settings)
    text = _read_source(file)
    result = engine.compile(text)

    show_tokens = engine.settings.output.show_tokens if tokens is None else tokens
    if show_tokens:
        _print_tokens(engine, text)
        typer.echo("")

    typer.echo("=== DIAGNOSTICS ===")
    if not result.diagnostics:
        typer.echo("(none)")
    for diag in result.diagnostics:
        typer.echo(str(diag))

    typer.echo("")
    typer.echo("=== JSON OUTPUT ===")
    typer.echo(result.json_text, nl=False)


@app.command("tokens")
def dump_tokens(
    file: Path = typer.Argument(..., help="MedScript source file"),
    settings: Optional[Path] = typer.Option(None, help="settings YAML"),
):
    """Print only the token stream of FILE."""
    engine = _make_engine(settings)
    _print_tokens(engine, _read_source(file))


if __name__ == "__main__":
    app()
