"""CLI tests for outfit selection commands."""

import json
import os
from pathlib import Path
from typing import Any, List

from click.testing import CliRunner, Result

from outfitpicker.cli import cli
from outfitpicker.state import CacheRepository


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env: dict[str, Any] = {key: None for key in os.environ if key.startswith("OUTFITPICKER__")}
    env["HOME"] = str(tmp_path)
    return env


def _outfit_root(tmp_path: Path) -> Path:
    root = tmp_path / "outfits"
    for category, files in {
        "Casual": ["a.avatar", "b.avatar"],
        "Formal": ["c.avatar"],
        "Empty": [],
    }.items():
        (root / category).mkdir(parents=True)
        for file_name in files:
            (root / category / file_name).write_text("", encoding="utf-8")
    return root


def _invoke(tmp_path: Path, args: List[str]) -> Result:
    """Run the CLI against a temporary outfit tree and cache.

    Args:
        tmp_path: Pytest temporary directory used as HOME.
        args: Subcommand arguments appended after the root and cache options.

    Returns:
        Result: Click's captured invocation result.
    """
    root = tmp_path / "outfits"
    if not root.exists():
        _outfit_root(tmp_path)
    runner = CliRunner()
    base = ["--root", str(root), "--cache", str(tmp_path / "cache.json")]
    return runner.invoke(cli, base + args, env=_env_with_home(tmp_path))


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Outfit picker rotates" in result.output
    for command in ("categories", "pick", "wear", "status", "reset"):
        assert command in result.output


def test_categories_json(tmp_path: Path) -> None:
    result = _invoke(tmp_path, ["--json", "categories"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    states = {entry["name"]: entry["state"] for entry in payload["categories"]}
    assert states == {"Casual": "has_outfits", "Empty": "empty", "Formal": "has_outfits"}


def test_categories_table(tmp_path: Path) -> None:
    result = _invoke(tmp_path, ["categories"])

    assert result.exit_code == 0, result.output
    assert "Casual" in result.output
    assert "ready" in result.output


def test_pick_records_selection(tmp_path: Path) -> None:
    result = _invoke(tmp_path, ["--json", "pick", "Formal"])

    assert result.exit_code == 0, result.output
    selection = json.loads(result.stdout)["selection"]
    assert selection["file"] == "c.avatar"
    assert selection["rotation_progress"] == 1.0
    assert selection["rotation_was_reset"] is False

    cache = CacheRepository(tmp_path / "cache.json").load()
    assert cache.worn_set(str(tmp_path / "outfits" / "Formal")) == {"c.avatar"}


def test_pick_empty_category_reports_nothing(tmp_path: Path) -> None:
    result = _invoke(tmp_path, ["pick", "Empty"])

    assert result.exit_code == 0
    assert "No outfits available." in result.output


def test_wear_then_status(tmp_path: Path) -> None:
    wear = _invoke(tmp_path, ["wear", "Casual", "a.avatar"])
    assert wear.exit_code == 0, wear.output

    status = _invoke(tmp_path, ["status", "Casual"])

    assert status.exit_code == 0
    assert "Casual: 1 of 2 outfits worn" in status.output


def test_list_unworn(tmp_path: Path) -> None:
    _invoke(tmp_path, ["wear", "Casual", "a.avatar"])

    result = _invoke(tmp_path, ["--json", "list", "Casual", "--unworn"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["outfits"] == [{"file": "b.avatar", "worn": False}]


def test_reset_category(tmp_path: Path) -> None:
    _invoke(tmp_path, ["wear", "Casual", "a.avatar"])

    result = _invoke(tmp_path, ["reset", "Casual"])
    status = _invoke(tmp_path, ["--json", "status", "Casual"])

    assert result.exit_code == 0
    assert json.loads(status.stdout) == {
        "category": "Casual",
        "worn": 0,
        "total": 2,
        "complete": False,
    }


def test_reset_requires_target(tmp_path: Path) -> None:
    result = _invoke(tmp_path, ["reset"])

    assert result.exit_code != 0
    assert "Provide either CATEGORY or --all" in result.output


def test_unknown_outfit_fails(tmp_path: Path) -> None:
    result = _invoke(tmp_path, ["wear", "Casual", "zzz.avatar"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_unknown_category_json_error(tmp_path: Path) -> None:
    result = _invoke(tmp_path, ["--json", "status", "Sport"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["error"]["code"] == "categorynotfound"


def test_corrupt_cache_suggests_factory_reset(tmp_path: Path) -> None:
    (tmp_path / "cache.json").write_text("{broken", encoding="utf-8")

    result = _invoke(tmp_path, ["pick", "Casual"])

    assert result.exit_code == 1
    assert "factory-reset" in result.output


def test_exclude_persists_to_config(tmp_path: Path) -> None:
    result = _invoke(tmp_path, ["exclude", "Formal"])
    listing = _invoke(tmp_path, ["categories"])

    assert result.exit_code == 0, result.output
    states = {entry["name"]: entry["state"] for entry in json.loads(listing.stdout)["categories"]}
    assert states["Formal"] == "user_excluded"

    _invoke(tmp_path, ["include", "Formal"])
    listing = _invoke(tmp_path, ["--json", "categories"])
    states = {entry["name"]: entry["state"] for entry in json.loads(listing.stdout)["categories"]}
    assert states["Formal"] == "has_outfits"


def test_factory_reset_removes_files(tmp_path: Path) -> None:
    _invoke(tmp_path, ["wear", "Casual", "a.avatar"])
    assert (tmp_path / "cache.json").exists()

    result = _invoke(tmp_path, ["factory-reset", "--yes"])

    assert result.exit_code == 0, result.output
    assert not (tmp_path / "cache.json").exists()
    assert not (tmp_path / ".outfitpicker" / "config.yaml").exists()


def test_undecodable_cache_suggests_factory_reset(tmp_path: Path) -> None:
    (tmp_path / "cache.json").write_bytes(b"\xff\xfe\x00garbage")

    listing = _invoke(tmp_path, ["categories"])
    result = _invoke(tmp_path, ["pick", "Casual"])

    assert listing.exit_code == 0, listing.output
    assert "Casual" in listing.output
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "factory-reset" in result.output


def test_invalid_logging_level_reports_config_error(tmp_path: Path) -> None:
    _outfit_root(tmp_path)
    env = _env_with_home(tmp_path)
    env["OUTFITPICKER__LOGGING__LEVEL"] = "verbose"

    result = CliRunner().invoke(cli, ["--root", str(tmp_path / "outfits"), "categories"], env=env)

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Invalid configuration values" in result.output


def test_exclude_and_include_emit_json(tmp_path: Path) -> None:
    excluded = _invoke(tmp_path, ["--json", "exclude", "Formal"])
    included = _invoke(tmp_path, ["--json", "include", "Formal"])

    assert json.loads(excluded.stdout) == {"excluded": "Formal"}
    assert json.loads(included.stdout) == {"included": "Formal"}
