"""Tests for the ``python -m docflow`` launcher."""

from __future__ import annotations

from docflow import __main__ as cli


def test_defaults_come_from_settings(monkeypatch):
    monkeypatch.setenv("PORT", "8123")
    from docflow.config import reset_settings_cache

    reset_settings_cache()
    args = cli.parse_args([])

    assert args.port == 8123
    assert args.reload is False


def test_main_runs_uvicorn_with_arguments(monkeypatch):
    calls: list[tuple[str, dict]] = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    cli.main(["--host", "127.0.0.1", "--port", "9000", "--reload"])

    app, kwargs = calls[0]
    assert app == "docflow.main:app"
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9000
    assert kwargs["reload"] is True
    assert kwargs["reload_dirs"][0].endswith("docflow")
