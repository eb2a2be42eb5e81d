"""Tests for the treeplate command line interface."""

from __future__ import annotations

import pytest
import typer
from typer.testing import CliRunner

from treeplate.cli.app import app
from treeplate.cli.parsers import coerce_value, load_values_file, parse_file_mode, parse_value
from tests.conftest import build_tree

runner = CliRunner()


@pytest.fixture
def template_root(tmp_path):
    build_tree(
        tmp_path / "templates" / "skeleton",
        {
            "${{ name }}.txt": "count=${{ count }} debug=${{ debug }}",
            "raw": {"${{ name }}.txt": "${{ count }}"},
        },
    )
    return tmp_path / "templates"


class TestFetchCommand:
    def test_renders_into_workspace(self, template_root, workspace):
        result = runner.invoke(
            app,
            [
                "fetch",
                "./skeleton",
                "--workspace",
                str(workspace),
                "--target-path",
                "out",
                "--base-url",
                template_root.as_uri() + "/",
                "--value",
                "name=demo",
                "--value",
                "count=7",
                "--value",
                "debug=false",
                "--copy-without-render",
                "raw",
            ],
        )

        assert result.exit_code == 0, result.output
        out = workspace / "out"
        assert (out / "demo.txt").read_text(encoding="utf-8") == "count=7 debug=false"
        assert (out / "raw" / "${{ name }}.txt").read_text(encoding="utf-8") == "${{ count }}"
        assert str(out.resolve()) in result.output

    def test_values_file(self, template_root, workspace, tmp_path):
        values_file = tmp_path / "values.yaml"
        values_file.write_text("name: from-file\ncount: 1\ndebug: true\n", encoding="utf-8")

        result = runner.invoke(
            app,
            [
                "fetch",
                "./skeleton",
                "--workspace",
                str(workspace),
                "--base-url",
                template_root.as_uri() + "/",
                "--values-file",
                str(values_file),
                "--value",
                "count=2",
            ],
        )

        assert result.exit_code == 0, result.output
        assert (workspace / "from-file.txt").read_text(encoding="utf-8") == "count=2 debug=true"

    def test_target_outside_workspace_fails(self, template_root, workspace):
        result = runner.invoke(
            app,
            [
                "fetch",
                "./skeleton",
                "--workspace",
                str(workspace),
                "--target-path",
                "../escape",
                "--base-url",
                template_root.as_uri() + "/",
            ],
        )
        assert result.exit_code == 1
        assert not (workspace.parent / "escape").exists()

    def test_bad_value_argument(self, template_root, workspace):
        result = runner.invoke(
            app,
            ["fetch", "./skeleton", "--workspace", str(workspace), "--value", "novalue"],
        )
        assert result.exit_code != 0


class TestParsers:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("False", False),
            ("42", 42),
            ("-3", -3),
            ("1.5", 1.5),
            ("text", "text"),
            ("1.2.3", "1.2.3"),
        ],
    )
    def test_coerce_value(self, raw, expected):
        assert coerce_value(raw) == expected

    def test_parse_value_splits_on_first_equals(self):
        assert parse_value("query=a=b") == ("query", "a=b")

    def test_parse_value_requires_equals(self):
        with pytest.raises(typer.BadParameter):
            parse_value("name")

    def test_parse_value_requires_key(self):
        with pytest.raises(typer.BadParameter):
            parse_value("=value")

    def test_parse_file_mode(self):
        assert parse_file_mode("0755") == 0o755
        with pytest.raises(typer.BadParameter):
            parse_file_mode("999")

    def test_load_values_file_json(self, tmp_path):
        path = tmp_path / "values.json"
        path.write_text('{"items": ["a", "b"]}', encoding="utf-8")
        assert load_values_file(path) == {"items": ["a", "b"]}

    def test_load_values_file_rejects_lists(self, tmp_path):
        path = tmp_path / "values.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(typer.BadParameter):
            load_values_file(path)

    def test_load_values_file_empty(self, tmp_path):
        path = tmp_path / "values.yaml"
        path.write_text("", encoding="utf-8")
        assert load_values_file(path) == {}
