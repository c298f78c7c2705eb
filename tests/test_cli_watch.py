from pathlib import Path

import pytest
from typer.testing import CliRunner

from steak_watcher import cli
from steak_watcher.errors import ConfigError
from steak_watcher.notify import IN_STOCK

runner = CliRunner()

PAGE = """
<div class="product-item">
  <div class="product-title">Ribeye 500g</div>
  <div class="product-price">1500 руб. 1200 руб.</div>
  <button>Купить</button>
</div>
<div class="product-item">
  <div class="product-title">Chicken</div>
  <div class="product-price">300 руб.</div>
  <button>Уведомить</button>
</div>
<div class="product-item"></div>
"""


def test_watch_passes_options(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: dict[str, object] = {}

    def fake_run_watcher(**kwargs: object) -> None:
        calls.update(kwargs)

    monkeypatch.setattr(cli, "run_watcher", fake_run_watcher)

    result = runner.invoke(
        cli.app, ["watch", "--config", "my.yaml", "--env", ".env.prod", "--once", "--dry-run"]
    )

    assert result.exit_code == 0, result.output
    assert calls == {
        "config_path": "my.yaml",
        "dotenv_path": ".env.prod",
        "once": True,
        "dry_run": True,
    }


def test_watch_reports_config_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run_watcher(**kwargs: object) -> None:
        raise ConfigError("Set tracking.url in the config file or TARGET_URL in env")

    monkeypatch.setattr(cli, "run_watcher", fake_run_watcher)

    result = runner.invoke(cli.app, ["watch"])

    assert result.exit_code == 1
    assert "TARGET_URL" in result.output


def test_parse_local_file(tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    page.write_text(PAGE, encoding="utf-8")

    result = runner.invoke(cli.app, ["parse", str(page)])

    assert result.exit_code == 0, result.output
    assert "Products: 2 (blocks=3 skipped=1)" in result.output
    assert "- Ribeye 500g - 1200 руб. [AVAILABLE]" in result.output
    assert "- Chicken - 300 руб. [OUT OF STOCK]" in result.output


def test_parse_with_track_renders_message(tmp_path: Path) -> None:
    page = tmp_path / "page.html"
    page.write_text(PAGE, encoding="utf-8")

    result = runner.invoke(cli.app, ["parse", str(page), "--track", "RIBEYE"])

    assert result.exit_code == 0, result.output
    assert "Products: 1" in result.output
    assert f"• Ribeye 500g - 1200 руб. [{IN_STOCK}]" in result.output
    assert "Chicken" not in result.output


def test_schedule_command() -> None:
    ok = runner.invoke(cli.app, ["schedule", "@every 15m"])
    assert ok.exit_code == 0
    assert "interval" in ok.output

    bad = runner.invoke(cli.app, ["schedule", "@sometimes"])
    assert bad.exit_code != 0
