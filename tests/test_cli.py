from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List

import httpx
import pytest
from click.testing import CliRunner

from forge.cli import main

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FORGE_URL", raising=False)
    monkeypatch.delenv("FORGE_TIMEOUT", raising=False)


def _invoke(runner: CliRunner, args: List[str], handler: Handler, **kwargs: Any):
    obj: Dict[str, Any] = {"transport": httpx.MockTransport(handler)}
    return runner.invoke(main, args, obj=obj, **kwargs)


def test_help_lists_commands(runner: CliRunner) -> None:
    result = runner.invoke(main, ["--help"], catch_exceptions=False)

    assert result.exit_code == 0
    assert "render" in result.output
    assert "health" in result.output


def test_health_ok(runner: CliRunner) -> None:
    seen: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200)

    result = _invoke(runner, ["--url", "http://render:3000/", "health"], handler)

    assert result.exit_code == 0
    assert "healthy" in result.output
    assert seen == ["http://render:3000/health"]


def test_health_unhealthy_exit_code(runner: CliRunner) -> None:
    result = _invoke(runner, ["health"], lambda request: httpx.Response(503))

    assert result.exit_code == 2
    assert "not healthy" in result.output


def test_health_connection_error_exit_code(runner: CliRunner) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    result = _invoke(runner, ["health"], handler)

    assert result.exit_code == 1
    assert "connection error" in result.output


def test_render_html_file_with_options(runner: CliRunner, tmp_path: Path) -> None:
    payloads: List[Dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payloads.append(json.loads(request.content))
        return httpx.Response(200, content=b"%PDF-1.7 data")

    source = tmp_path / "page.html"
    source.write_text("<h1>Hello</h1>", encoding="utf-8")
    output = tmp_path / "page.pdf"

    result = _invoke(
        runner,
        [
            "render",
            str(source),
            "-o",
            str(output),
            "--paper",
            "a4",
            "--orientation",
            "LANDSCAPE",
            "--title",
            "Hello",
            "--no-bookmarks",
            "--watermark",
            "DRAFT",
            "--colors",
            "8",
            "--palette",
            "#000000, #ffffff",
        ],
        handler,
    )

    assert result.exit_code == 0, result.output
    assert output.read_bytes() == b"%PDF-1.7 data"
    assert "Wrote" in result.output
    assert payloads == [
        {
            "html": "<h1>Hello</h1>",
            "format": "pdf",
            "paper": "a4",
            "orientation": "landscape",
            "quantize": {"colors": 8, "palette": ["#000000", "#ffffff"]},
            "pdf": {"title": "Hello", "bookmarks": False, "watermark": {"text": "DRAFT"}},
        }
    ]


def test_render_url_source_with_preset_palette(runner: CliRunner, tmp_path: Path) -> None:
    payloads: List[Dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payloads.append(json.loads(request.content))
        return httpx.Response(200, content=b"png")

    output = tmp_path / "shot.png"
    result = _invoke(
        runner,
        ["render", "https://example.com", "-o", str(output), "--format", "png", "--palette", "EINK"],
        handler,
    )

    assert result.exit_code == 0, result.output
    assert payloads == [{"url": "https://example.com", "format": "png", "quantize": {"palette": "eink"}}]


def test_render_reads_stdin(runner: CliRunner, tmp_path: Path) -> None:
    payloads: List[Dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payloads.append(json.loads(request.content))
        return httpx.Response(200, content=b"ok")

    result = _invoke(runner, ["render", "-", "-o", str(tmp_path / "out.pdf")], handler, input="<p>stdin</p>")

    assert result.exit_code == 0, result.output
    assert payloads[0]["html"] == "<p>stdin</p>"


def test_render_server_error_reports_message(runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "page.html"
    source.write_text("<p>x</p>", encoding="utf-8")
    output = tmp_path / "out.pdf"

    result = _invoke(
        runner,
        ["render", str(source), "-o", str(output), "--paper", "b99"],
        lambda request: httpx.Response(422, json={"error": "bad paper size"}),
    )

    assert result.exit_code == 1
    assert "bad paper size" in result.output
    assert not output.exists()


def test_render_unwritable_output_reports_message(runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "page.html"
    source.write_text("<p>x</p>", encoding="utf-8")
    output = tmp_path / "missing" / "out.pdf"

    result = _invoke(
        runner,
        ["render", str(source), "-o", str(output)],
        lambda request: httpx.Response(200, content=b"%PDF"),
    )

    assert result.exit_code == 1
    assert "Cannot write" in result.output
    assert not output.exists()


def test_render_missing_source_file(runner: CliRunner, tmp_path: Path) -> None:
    result = _invoke(
        runner,
        ["render", str(tmp_path / "nope.html"), "-o", str(tmp_path / "out.pdf")],
        lambda request: httpx.Response(200),
    )

    assert result.exit_code == 1
    assert "Cannot read" in result.output


def test_render_unknown_palette_is_usage_error(runner: CliRunner, tmp_path: Path) -> None:
    source = tmp_path / "page.html"
    source.write_text("<p>x</p>", encoding="utf-8")

    result = _invoke(
        runner,
        ["render", str(source), "-o", str(tmp_path / "out.pdf"), "--palette", "sepia"],
        lambda request: httpx.Response(200),
    )

    assert result.exit_code == 2
    assert "unknown palette preset" in result.output


def test_config_file_is_applied(runner: CliRunner, tmp_path: Path) -> None:
    seen: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200)

    config = tmp_path / "forge.toml"
    config.write_text('[client]\nbase_url = "http://configured:4000"\n', encoding="utf-8")

    result = _invoke(runner, ["--config", str(config), "health"], handler)

    assert result.exit_code == 0, result.output
    assert seen == ["http://configured:4000/health"]


def test_invalid_config_exits_with_message(runner: CliRunner, tmp_path: Path) -> None:
    config = tmp_path / "forge.toml"
    config.write_text("[client]\nretries = 3\n", encoding="utf-8")

    result = _invoke(runner, ["--config", str(config), "health"], lambda request: httpx.Response(200))

    assert result.exit_code == 1
    assert "Invalid keys" in result.output


def test_non_positive_timeout_is_rejected(runner: CliRunner) -> None:
    result = _invoke(runner, ["--timeout", "0", "health"], lambda request: httpx.Response(200))

    assert result.exit_code == 1
    assert "--timeout" in result.output
