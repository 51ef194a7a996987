from __future__ import annotations

import importlib

import pytest


def test_console_entrypoint_exposes_app() -> None:
    pytest.importorskip("typer")

    module = importlib.import_module("aurora_voice.main")

    assert hasattr(module, "app")
    assert module.app is not None


def test_ask_prints_intent_and_reply() -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from aurora_voice.main import app

    result = typer_testing.CliRunner().invoke(app, ["ask", "hello there"], catch_exceptions=False)

    assert result.exit_code == 0
    assert "greeting" in result.stdout
    assert "Aurora" in result.stdout


def test_chat_runs_typed_turns_until_input_ends(monkeypatch) -> None:
    typer_testing = pytest.importorskip("typer.testing")
    from aurora_voice import main

    monkeypatch.setattr(main.settings, "thinking_delay_seconds", 0.0)

    result = typer_testing.CliRunner().invoke(
        main.app,
        ["chat"],
        input="can you tell me the time?\n",
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert "It is" in result.stdout
    assert "stopped" in result.stdout
