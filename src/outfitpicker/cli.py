"""Command line interface for the outfit picker."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from outfitpicker.config import (
    ConfigError,
    ConfigManager,
    OutfitPickerConfig,
    resolve_with_precedence,
)
from outfitpicker.errors import OutfitPickerError
from outfitpicker.scanning import CategoryState
from outfitpicker.selection import OutfitPicker, OutfitSelection
from outfitpicker.state import CacheDecodeError

console = Console()

_STATE_LABELS = {
    CategoryState.HAS_OUTFITS: "[green]ready[/green]",
    CategoryState.EMPTY: "[dim]empty[/dim]",
    CategoryState.NO_MATCHING_FILES: "[yellow]no outfits[/yellow]",
    CategoryState.USER_EXCLUDED: "[magenta]excluded[/magenta]",
}


def _configure_logging(level: str) -> None:
    """Route log records to stderr through Rich at the configured level."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if not any(isinstance(handler, RichHandler) for handler in root.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)
    raise click.ClickException(message) from original


def _error_code(exc: OutfitPickerError) -> str:
    if isinstance(exc, CacheDecodeError):
        return "cache_corrupt"
    return type(exc).__name__.removesuffix("Error").lower() or "error"


def _fail(exc: OutfitPickerError, json_output: bool) -> None:
    message = str(exc)
    if isinstance(exc, CacheDecodeError) and not json_output:
        message += " Run `outfitpicker factory-reset` to start over."
    _handle_cli_error(message, code=_error_code(exc), json_output=json_output, original=exc)


def _emit(message: Any, *, quiet: bool) -> None:
    if not quiet:
        console.print(message)


def _selection_payload(selection: OutfitSelection) -> dict[str, Any]:
    return {
        "category": selection.outfit.category_name,
        "file": selection.outfit.file_name,
        "path": str(selection.outfit.file_path),
        "rotation_progress": selection.rotation_progress,
        "rotation_was_reset": selection.rotation_was_reset,
    }


def _render_selection(selection: OutfitSelection, *, quiet: bool) -> None:
    if selection.rotation_was_reset:
        _emit(
            f"[yellow]Every outfit in {selection.outfit.category_name} was worn; "
            "starting a new rotation.[/yellow]",
            quiet=quiet,
        )
    _emit(
        f"[bold]{selection.outfit.file_name}[/bold] from {selection.outfit.category_name} "
        f"([cyan]{selection.rotation_progress:.0%}[/cyan] of rotation worn)",
        quiet=quiet,
    )


class _Context:
    """Lazily constructed state shared across subcommands."""

    def __init__(self, overrides: dict[str, Any], json_output: bool, quiet: bool) -> None:
        self.overrides = overrides
        self.manager = ConfigManager()
        self._json_flag = json_output
        self._quiet_flag = quiet
        self._config: OutfitPickerConfig | None = None
        self._picker: OutfitPicker | None = None

    @property
    def config(self) -> OutfitPickerConfig:
        if self._config is None:
            self._config = self.manager.load(cli_overrides=self.overrides)
            _configure_logging(self._config.logging.level)
        return self._config

    @property
    def picker(self) -> OutfitPicker:
        if self._picker is None:
            self._picker = OutfitPicker.from_config_manager(self.manager, config=self.config)
        return self._picker

    @property
    def json_output(self) -> bool:
        return self._json_flag or (self._config is not None and self._config.cli.json_default)

    @property
    def quiet(self) -> bool:
        return self._quiet_flag or (self._config is not None and self._config.cli.quiet_default)


pass_state = click.make_pass_decorator(_Context)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="outfitpicker")
@click.option(
    "--root", type=click.Path(file_okay=False, path_type=str), help="Outfit root override."
)
@click.option(
    "--cache",
    "cache_path",
    type=click.Path(dir_okay=False, path_type=str),
    help="Cache file override.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of formatted text.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def cli(
    ctx: click.Context,
    root: str | None,
    cache_path: str | None,
    json_output: bool,
    quiet: bool,
) -> None:
    """Outfit picker rotates through outfit categories without repeats."""
    overrides: dict[str, Any] = {}
    if root:
        overrides["root"] = root
    if cache_path:
        overrides["cache.path"] = cache_path
    ctx.obj = _Context(overrides, json_output, quiet)


@cli.command()
@pass_state
def categories(state: _Context) -> None:
    """List categories with their state and rotation progress."""
    try:
        infos = state.picker.get_categories()
    except OutfitPickerError as exc:
        _fail(exc, state.json_output)
        return

    if state.json_output:
        console.print_json(
            data={
                "categories": [
                    {
                        "name": info.category.name,
                        "path": str(info.category.path),
                        "state": info.state.value,
                        "outfits": info.outfit_count,
                        "worn": info.worn_count,
                    }
                    for info in infos
                ]
            }
        )
        return

    table = Table(title=f"Categories in {state.picker.root}")
    table.add_column("Category")
    table.add_column("State")
    table.add_column("Worn", justify="right")
    for info in infos:
        worn = f"{info.worn_count}/{info.outfit_count}" if info.outfit_count else "-"
        table.add_row(info.category.name, _STATE_LABELS[info.state], worn)
    _emit(table, quiet=state.quiet)


@cli.command()
@click.argument("category", required=False)
@pass_state
def pick(state: _Context, category: str | None) -> None:
    """Pick a random unworn outfit from CATEGORY, or from any category."""
    try:
        if category is None:
            selection = state.picker.select_random_outfit_across_categories()
        else:
            selection = state.picker.select_random_outfit(category)
    except OutfitPickerError as exc:
        _fail(exc, state.json_output)
        return

    if selection is None:
        if state.json_output:
            console.print_json(data={"selection": None})
        else:
            _emit("[yellow]No outfits available.[/yellow]", quiet=state.quiet)
        return
    if state.json_output:
        console.print_json(data={"selection": _selection_payload(selection)})
        return
    _render_selection(selection, quiet=state.quiet)


@cli.command()
@click.argument("category")
@click.argument("file_name")
@pass_state
def select(state: _Context, category: str, file_name: str) -> None:
    """Choose FILE_NAME from CATEGORY and record it as worn."""
    try:
        selection = state.picker.select_outfit_manually(category, file_name)
    except OutfitPickerError as exc:
        _fail(exc, state.json_output)
        return
    if state.json_output:
        console.print_json(data={"selection": _selection_payload(selection)})
        return
    _render_selection(selection, quiet=state.quiet)


@cli.command()
@click.argument("category")
@click.argument("file_name")
@pass_state
def wear(state: _Context, category: str, file_name: str) -> None:
    """Mark FILE_NAME in CATEGORY as worn."""
    try:
        state.picker.wear_outfit(category, file_name)
    except OutfitPickerError as exc:
        _fail(exc, state.json_output)
        return
    if state.json_output:
        console.print_json(data={"worn": {"category": category, "file": file_name}})
        return
    _emit(f"[green]Marked {file_name} in {category} as worn.[/green]", quiet=state.quiet)


@cli.command()
@click.argument("category")
@pass_state
def status(state: _Context, category: str) -> None:
    """Show rotation progress for CATEGORY."""
    try:
        worn, total = state.picker.get_rotation_status(category)
        complete = state.picker.is_rotation_complete(category)
    except OutfitPickerError as exc:
        _fail(exc, state.json_output)
        return
    if state.json_output:
        console.print_json(
            data={"category": category, "worn": worn, "total": total, "complete": complete}
        )
        return
    suffix = " [yellow](rotation complete)[/yellow]" if complete else ""
    _emit(f"{category}: {worn} of {total} outfits worn{suffix}", quiet=state.quiet)


@cli.command("list")
@click.argument("category")
@click.option("--worn", "only_worn", is_flag=True, help="Only list worn outfits.")
@click.option("--unworn", "only_unworn", is_flag=True, help="Only list unworn outfits.")
@pass_state
def list_outfits(state: _Context, category: str, only_worn: bool, only_unworn: bool) -> None:
    """List the outfits in CATEGORY with their worn status."""
    if only_worn and only_unworn:
        raise click.UsageError("--worn and --unworn are mutually exclusive.")
    try:
        outfit_state = state.picker.get_outfit_state(category)
    except OutfitPickerError as exc:
        _fail(exc, state.json_output)
        return

    worn_names = {outfit.file_name for outfit in outfit_state.worn_outfits}
    if only_worn:
        outfits = outfit_state.worn_outfits
    elif only_unworn:
        outfits = outfit_state.available_outfits
    else:
        outfits = outfit_state.all_outfits

    if state.json_output:
        console.print_json(
            data={
                "category": category,
                "outfits": [
                    {"file": outfit.file_name, "worn": outfit.file_name in worn_names}
                    for outfit in outfits
                ],
            }
        )
        return
    for outfit in outfits:
        marker = "[dim]worn[/dim]" if outfit.file_name in worn_names else "[green]new[/green]"
        _emit(f"  {marker} {outfit.file_name}", quiet=state.quiet)
    _emit(outfit_state.status_text, quiet=state.quiet)


@cli.command()
@click.argument("category", required=False)
@click.option("--all", "reset_all", is_flag=True, help="Reset every category.")
@pass_state
def reset(state: _Context, category: str | None, reset_all: bool) -> None:
    """Start a new rotation for CATEGORY, or for every category with --all."""
    if bool(category) == reset_all:
        raise click.UsageError("Provide either CATEGORY or --all.")
    try:
        if reset_all:
            state.picker.reset_all_categories()
        else:
            state.picker.reset_category(category or "")
    except OutfitPickerError as exc:
        _fail(exc, state.json_output)
        return
    target = "all categories" if reset_all else category
    if state.json_output:
        console.print_json(data={"reset": target})
        return
    _emit(f"[green]Rotation reset for {target}.[/green]", quiet=state.quiet)


@cli.command()
@click.argument("name")
@pass_state
def exclude(state: _Context, name: str) -> None:
    """Exclude category NAME from selection."""
    try:
        state.picker.exclude_category(name)
    except OutfitPickerError as exc:
        _fail(exc, state.json_output)
        return
    if state.json_output:
        console.print_json(data={"excluded": name})
        return
    _emit(f"[green]Excluded {name}.[/green]", quiet=state.quiet)


@cli.command()
@click.argument("name")
@pass_state
def include(state: _Context, name: str) -> None:
    """Re-include a previously excluded category NAME."""
    try:
        state.picker.include_category(name)
    except OutfitPickerError as exc:
        _fail(exc, state.json_output)
        return
    if state.json_output:
        console.print_json(data={"included": name})
        return
    _emit(f"[green]Included {name}.[/green]", quiet=state.quiet)


@cli.command("factory-reset")
@click.confirmation_option(prompt="Delete the rotation cache and configuration?")
@pass_state
def factory_reset(state: _Context) -> None:
    """Delete the rotation cache and configuration file."""
    try:
        state.picker.factory_reset()
    except OutfitPickerError as exc:
        _fail(exc, state.json_output)
        return
    _emit("[green]Cache and configuration removed.[/green]", quiet=state.quiet)


@cli.group()
def config() -> None:
    """Manage outfit picker configuration values."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        resolved = manager.load(include_env=not no_env)
    except OutfitPickerError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(resolved.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        parsed_value = yaml.safe_load(value) if value.strip() else None
        before, updated = manager.update({key: parsed_value})
    except (OutfitPickerError, yaml.YAMLError) as exc:
        raise click.ClickException(f"Unable to set {key}: {exc}") from exc

    before_text = yaml.safe_dump(before, sort_keys=False).splitlines()
    after_text = yaml.safe_dump(updated.model_dump(mode="python"), sort_keys=False).splitlines()
    diff = list(difflib.unified_diff(before_text, after_text, "before", "after", lineterm=""))
    if diff:
        console.print(Syntax("\n".join(diff), "diff", word_wrap=True))
    console.print(f"[green]Updated {key} to {parsed_value!r}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an editor and validate the result."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        original = manager.read_text()
    except OutfitPickerError as exc:
        raise click.ClickException(str(exc)) from exc
    edited = click.edit(original, extension=".yaml")
    if edited is None or edited == original:
        console.print("[yellow]No changes made.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
        if not isinstance(parsed, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        validated = resolve_with_precedence(defaults=OutfitPickerConfig(), file_overrides=parsed)
    except (ConfigError, yaml.YAMLError) as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc

    try:
        manager.save(validated)
    except OutfitPickerError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Configuration updated at {Path(manager.config_path)}.[/green]")


def main() -> None:
    cli()


__all__ = ["cli", "main"]
