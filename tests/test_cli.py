"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from refdocs.cli import _build_parser, _summarise, main
from refdocs.models import NamespaceVersion, NamespaceVersionGroup


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "process"])
    assert args.verbose is True
    assert args.command == "process"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["list", "--verbose"])
    assert args.verbose is True
    assert args.command == "list"


def test_cli_process_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["process", "api", "--max-depth", "3", "-o", "graph.json"])
    assert args.source == "api"
    assert args.max_depth == 3
    assert args.output == "graph.json"
    assert args.config == "."
    assert args.verbose is False


def test_cli_accepts_logging_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["process", "-q", "--log-file", "refdocs.log"])
    assert args.quiet is True
    assert args.log_file == "refdocs.log"

    args = parser.parse_args(["list"])
    assert args.quiet is False
    assert args.log_file is None


def test_summarise_reports_empty_run() -> None:
    assert _summarise([]) == ["No annotated packages found"]


def test_summarise_lists_kinds() -> None:
    group = NamespaceVersionGroup(NamespaceVersion("webapp.test", "v1"), kinds={"B", "A"})
    assert _summarise([group]) == ["webapp.test/v1: 0 types; kinds: A, B"]


def test_main_list_prints_groups(guestbook_api: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["list", str(guestbook_api), "--config", str(tmp_path)])

    out = capsys.readouterr().out
    assert out.strip() == "webapp.test.k8s.elastic.co/v1: 13 types; kinds: Embedded, Guestbook, GuestbookList"


def test_main_process_writes_output(guestbook_api: Path, tmp_path: Path) -> None:
    output = tmp_path / "graph.json"

    main(["process", str(guestbook_api), "--config", str(tmp_path), "-o", str(output)])

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["groups"][0]["kinds"] == ["Embedded", "Guestbook", "GuestbookList"]


def test_main_uses_source_path_from_config(guestbook_api: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / ".refdocs.yml").write_text(
        f"source_path: {guestbook_api.as_posix()}\nprocessor:\n  ignore_types: ['List$']\n",
        encoding="utf-8",
    )

    main(["list", "--config", str(tmp_path)])

    out = capsys.readouterr().out
    assert "kinds: Embedded, Guestbook" in out
    assert "GuestbookList" not in out


def test_main_exits_on_missing_source(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["process", str(tmp_path / "missing"), "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "refdocs process failed" in capsys.readouterr().err


def test_main_rejects_negative_depth(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["list", str(tmp_path), "--config", str(tmp_path), "--max-depth", "-1"])

    assert excinfo.value.code == 1


def test_main_writes_log_file(guestbook_api: Path, tmp_path: Path) -> None:
    log_file = tmp_path / "refdocs.log"

    main(["list", str(guestbook_api), "--config", str(tmp_path), "--log-file", str(log_file)])

    assert "Processing API types in" in log_file.read_text(encoding="utf-8")
