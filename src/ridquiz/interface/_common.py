"""Helpers shared by the CLI command modules."""

from typing import Any

import typer
from pydantic import ValidationError

from ridquiz.application.catalog import CatalogError
from ridquiz.application.config import AppConfig, resolve_config
from ridquiz.application.factory import build_quiz_session
from ridquiz.application.session_engine import QuizSession


def _resolve_with_overrides(**overrides: Any) -> AppConfig:
    """Resolve config, letting explicitly given CLI values win."""
    try:
        return resolve_config(overrides)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(p) for p in err["loc"])
        typer.secho(f"Invalid option {field}: {err['msg']}", fg="red", err=True)
        raise typer.Exit(2)


def _build_session_or_exit(config: AppConfig) -> QuizSession:
    try:
        return build_quiz_session(config)
    except CatalogError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1)
