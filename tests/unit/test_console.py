"""Unit tests for the command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from minidb.adapters.inbound.console import app, render_result, render_table, run_repl
from minidb.application import DatabaseEngine


runner = CliRunner()


@pytest.mark.unit
class TestRenderResult:
    """Tests for result rendering."""

    def test_message(self) -> None:
        assert render_result({"message": "Table t created"}) == "Table t created"

    def test_counts(self) -> None:
        assert render_result({"updated": 2}) == "2 row(s) updated."
        assert render_result({"deleted": 0}) == "0 row(s) deleted."

    def test_empty_rows(self) -> None:
        assert render_result([]) == "(no results)"

    def test_inserted_row_as_json(self) -> None:
        text = render_result({"id": 1, "name": None})
        assert json.loads(text) == {"id": 1, "name": None}

    def test_table(self) -> None:
        rows = [{"id": 1, "name": "Ann"}, {"id": 22, "name": None}]

        assert render_table(rows) == "\n".join(
            [
                "+----+------+",
                "| id | name |",
                "+----+------+",
                "| 1  | Ann  |",
                "| 22 | null |",
                "+----+------+",
            ]
        )
        assert render_result(rows).endswith("\n(2 row(s))")


@pytest.mark.unit
class TestRepl:
    """Tests for the interactive loop."""

    def _feed(self, lines: list[str]):
        pending = iter(lines)
        prompts: list[str] = []

        def read_line(prompt: str) -> str:
            prompts.append(prompt)
            try:
                return next(pending)
            except StopIteration:
                raise EOFError

        return read_line, prompts

    def test_multiline_statement(self, engine: DatabaseEngine, capsys: pytest.CaptureFixture[str]) -> None:
        read_line, prompts = self._feed(
            [
                "CREATE TABLE t(id INT,",
                "  name TEXT);",
                "INSERT INTO t VALUES(1, 'Ann');",
                "SELECT * FROM t;",
                "quit",
            ]
        )

        run_repl(engine, read_line)

        out = capsys.readouterr().out
        assert prompts[:2] == ["db > ", "... "]
        assert "Table t created" in out
        assert "| 1  | Ann  |" in out
        assert "(1 row(s))" in out
        assert out.rstrip().endswith("Goodbye!")

    def test_errors_go_to_stderr(self, engine: DatabaseEngine, capsys: pytest.CaptureFixture[str]) -> None:
        read_line, _ = self._feed(["SELECT * FROM nope;", "SELECT * FROM nope2;", "EXIT"])

        run_repl(engine, read_line)

        captured = capsys.readouterr()
        assert "Error: Table not found: nope" in captured.err
        assert "Error: Table not found: nope2" in captured.err

    def test_exit_only_on_empty_buffer(self, engine: DatabaseEngine, capsys: pytest.CaptureFixture[str]) -> None:
        read_line, prompts = self._feed(["CREATE TABLE t(id INT", "exit", ");"])

        run_repl(engine, read_line)

        # "exit" mid-statement is part of the statement text
        assert prompts == ["db > ", "... ", "... ", "db > "]
        assert "Error:" in capsys.readouterr().err


@pytest.mark.unit
class TestCommands:
    """Tests for the typer commands."""

    def test_exec(self, temp_dir: Path) -> None:
        data_dir = str(temp_dir / "data")

        result = runner.invoke(app, ["exec", "CREATE TABLE t(id INT)", "--data-dir", data_dir])
        assert result.exit_code == 0
        assert "Table t created" in result.stdout

        runner.invoke(app, ["exec", "INSERT INTO t VALUES(7);", "--data-dir", data_dir])
        result = runner.invoke(app, ["exec", "SELECT * FROM t", "--data-dir", data_dir])

        assert result.exit_code == 0
        assert "| 7  |" in result.stdout
        assert "(1 row(s))" in result.stdout

    def test_exec_error(self, temp_dir: Path) -> None:
        result = runner.invoke(
            app, ["exec", "SELECT * FROM ghosts", "--data-dir", str(temp_dir)]
        )
        assert result.exit_code == 1
        assert "Error: Table not found: ghosts" in result.output

    def test_repl_command(self, temp_dir: Path) -> None:
        result = runner.invoke(
            app,
            ["repl", "--data-dir", str(temp_dir)],
            input="CREATE TABLE t(id INT);\nquit\n",
        )

        assert result.exit_code == 0
        assert "Table t created" in result.stdout
        assert (temp_dir / "t.json").exists()

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "minidb version" in result.stdout
