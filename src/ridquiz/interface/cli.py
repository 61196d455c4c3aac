"""ridquiz CLI: root commands and the settings/config subgroups."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from ridquiz.application.catalog import CatalogError, load_catalog
from ridquiz.application.config import resolve_config
from ridquiz.application.factory import get_settings_store
from ridquiz.domain.settings import QuizSettings
from ridquiz.interface._common import _build_session_or_exit, _resolve_with_overrides

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="ridquiz: drill the meaning and gender of Ukrainian nouns.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Subgroups
# ---------------------------------------------------------------------------

settings_app = typer.Typer(help="Show and change quiz settings.", no_args_is_help=True)
app.add_typer(settings_app, name="settings")

config_app = typer.Typer(help="Inspect ridquiz configuration.")
app.add_typer(config_app, name="config")

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for ridquiz."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    logging.getLogger().setLevel(_LOG_LEVELS.get(verbose, logging.DEBUG))


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def play(
    ctx: typer.Context,
    catalog: Annotated[
        Path | None,
        typer.Option("--catalog", help="Vocabulary YAML. Defaults to the bundled list."),
    ] = None,
    settings: Annotated[
        Path | None, typer.Option("--settings", help="Settings file to read and update.")
    ] = None,
    seed: Annotated[int | None, typer.Option(help="Seed shuffles for a repeatable session.")] = None,
    ephemeral: Annotated[
        bool, typer.Option("--ephemeral", help="Do not read or write the settings file.")
    ] = False,
    notifier: Annotated[
        str | None,
        typer.Option(help="Answer feedback: console, log, none."),
    ] = None,
):
    """[bold green]Play[/bold green] a quiz session."""
    config = _resolve_with_overrides(
        catalog_path=catalog,
        settings_path=settings,
        seed=seed,
        ephemeral=ephemeral or None,
        notifier=notifier,
        verbose=ctx.obj.get("verbose", 0),
    )
    session = _build_session_or_exit(config)

    from ridquiz.interface.play import run_session

    show_instructions = get_settings_store(config).load().show_instructions
    run_session(session, show_instructions=show_instructions)
    typer.echo(session.score_text)


@app.command()
def words(
    catalog: Annotated[Path | None, typer.Option("--catalog", help="Vocabulary YAML.")] = None,
    category: Annotated[str | None, typer.Option(help="Only words in this category.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List the words in the catalog."""
    config = _resolve_with_overrides(catalog_path=catalog)
    try:
        cat = load_catalog(config.catalog_path)
    except CatalogError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1)

    entries = cat.by_category(category) if category else list(cat.all())

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": e.id,
                        "word": e.word,
                        "meaning": e.meaning,
                        "gender": e.gender.value,
                        "categories": sorted(e.categories),
                    }
                    for e in entries
                ],
                ensure_ascii=False,
                indent=2,
            )
        )
        return

    for e in entries:
        tags = ", ".join(sorted(e.categories))
        typer.echo(f"{e.word:<18} {e.meaning:<18} {e.gender.value:<10} {tags}")
    typer.echo(f"\n{len(entries)} words")


@app.command()
def categories(
    catalog: Annotated[Path | None, typer.Option("--catalog", help="Vocabulary YAML.")] = None,
    settings: Annotated[Path | None, typer.Option("--settings", help="Settings file.")] = None,
):
    """List categories; active filters are marked with '*'."""
    config = _resolve_with_overrides(catalog_path=catalog, settings_path=settings)
    try:
        cat = load_catalog(config.catalog_path)
    except CatalogError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1)

    active = get_settings_store(config).load().active_categories
    for name in cat.categories():
        marker = "*" if name in active else " "
        typer.echo(f"{marker} {name:<14} {len(cat.by_category(name))}")

    unknown = sorted(active - set(cat.categories()))
    if unknown:
        typer.secho(f"Active but not in catalog: {', '.join(unknown)}", fg="yellow")


# ---------------------------------------------------------------------------
# Settings subgroup
# ---------------------------------------------------------------------------

SettingsPathOption = Annotated[
    Path | None, typer.Option("--settings", help="Settings file. Defaults to config.")
]


@settings_app.command("show")
def settings_show(settings: SettingsPathOption = None):
    """Display the stored quiz settings."""
    config = _resolve_with_overrides(settings_path=settings)
    current = get_settings_store(config).load()
    typer.echo(json.dumps(current.model_dump(mode="json"), ensure_ascii=False, indent=2))


@settings_app.command("set")
def settings_set(
    key: Annotated[str, typer.Argument(help="Setting name, e.g. session_length.")],
    value: Annotated[str, typer.Argument(help="New value. Categories are comma-separated.")],
    settings: SettingsPathOption = None,
):
    """Change one quiz setting."""
    if key not in QuizSettings.model_fields:
        typer.secho(
            f"Unknown setting {key!r}. Known: {', '.join(QuizSettings.model_fields)}",
            fg="red",
            err=True,
        )
        raise typer.Exit(2)

    config = _resolve_with_overrides(settings_path=settings)
    store = get_settings_store(config)
    data = store.load().model_dump()
    data[key] = value.split(",") if key == "active_categories" else value

    try:
        updated = QuizSettings.model_validate(data)
    except ValidationError as e:
        typer.secho(f"Invalid value for {key}: {e.errors()[0]['msg']}", fg="red", err=True)
        raise typer.Exit(2)

    store.save(updated)
    typer.secho(f"{key} = {json.dumps(updated.model_dump(mode='json')[key])}", fg="green")


@settings_app.command("toggle-category")
def settings_toggle_category(
    name: Annotated[str, typer.Argument(help="Category to switch on or off.")],
    catalog: Annotated[Path | None, typer.Option("--catalog", help="Vocabulary YAML.")] = None,
    settings: SettingsPathOption = None,
):
    """Switch a category filter on or off and report the resulting deck size."""
    config = _resolve_with_overrides(
        catalog_path=catalog, settings_path=settings, notifier="none"
    )
    session = _build_session_or_exit(config)
    now_active = session.toggle_category(name)
    state = "on" if now_active else "off"
    typer.echo(f"{name}: {state} ({len(session.working_deck)} words in next session)")


@settings_app.command("reset")
def settings_reset(settings: SettingsPathOption = None):
    """Restore default quiz settings."""
    config = _resolve_with_overrides(settings_path=settings)
    get_settings_store(config).save(QuizSettings())
    typer.secho("Settings reset to defaults.", fg="green")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
