"""Tests for DDEV config mutation and commands."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
from ddev_workspace import ddev
from ddev_workspace.config import Settings
from ddev_workspace.errors import ExternalToolError, MutationError, NotFoundError

SETTINGS = Settings()


def write_config(workspace: Path, content: str) -> Path:
    config = workspace / ".ddev" / "config.yaml"
    config.parent.mkdir(parents=True, exist_ok=True)
    config.write_text(content)
    return config


def write_settings_php(workspace: Path, content: str) -> Path:
    path = workspace / "web" / "sites" / "default" / "settings.ddev.php"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestIdentifier:
    """Test identifier derivation."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("a", "a"),
            ("abc", "abc"),
            ("abcd", "abcd"),
            ("0001-new-task", "0001"),
            ("feature", "feat"),
        ],
    )
    def test_derive_identifier(self, name, expected):
        assert ddev.derive_identifier(name) == expected

    def test_custom_length(self):
        assert ddev.derive_identifier("0001-new-task", 2) == "00"

    def test_compose_and_host(self):
        assert ddev.compose_name("t1", "project") == "t1-project"
        assert ddev.db_host("t1-project") == "ddev-t1-project-db"


class TestReadProjectName:
    """Test reading the project name."""

    def test_reads_first_name_line(self, tmp_path):
        write_config(tmp_path, "type: php\nname: foo\nname: bar\n")
        assert ddev.read_project_name(tmp_path, SETTINGS) == "foo"

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            ddev.read_project_name(tmp_path, SETTINGS)

    def test_missing_name_line(self, tmp_path):
        write_config(tmp_path, "type: php\n# name: commented\n")
        with pytest.raises(NotFoundError):
            ddev.read_project_name(tmp_path, SETTINGS)

    def test_has_config(self, tmp_path):
        assert ddev.has_config(tmp_path, SETTINGS) is False
        write_config(tmp_path, "name: foo\n")
        assert ddev.has_config(tmp_path, SETTINGS) is True


class TestRenameProject:
    """Test project renaming."""

    def test_rename(self, tmp_path):
        config = write_config(tmp_path, "name: foo\ntype: php\n")

        new_name = ddev.rename_project(tmp_path, "bar", "foo", SETTINGS)

        assert new_name == "bar-foo"
        content = config.read_text()
        assert "name: bar-foo\n" in content
        assert "name: foo\n" not in content
        assert content.endswith("type: php\n")

    def test_rename_only_first_occurrence(self, tmp_path):
        config = write_config(tmp_path, "name: foo\nadditional_hostnames:\n- name: foo\n")

        ddev.rename_project(tmp_path, "bar", "foo", SETTINGS)

        assert config.read_text() == "name: bar-foo\nadditional_hostnames:\n- name: foo\n"

    def test_rename_missing_line_leaves_file_unchanged(self, tmp_path):
        original = b"name: other\ntype: php\n"
        config = tmp_path / ".ddev" / "config.yaml"
        config.parent.mkdir()
        config.write_bytes(original)

        with pytest.raises(MutationError):
            ddev.rename_project(tmp_path, "bar", "foo", SETTINGS)

        assert config.read_bytes() == original

    def test_rename_twice_fails(self, tmp_path):
        """A second run does not double-prefix the name."""
        config = write_config(tmp_path, "name: foo\n")
        ddev.rename_project(tmp_path, "bar", "foo", SETTINGS)

        with pytest.raises(MutationError):
            ddev.rename_project(tmp_path, "bar", "foo", SETTINGS)

        assert config.read_text() == "name: bar-foo\n"

    def test_rename_missing_file(self, tmp_path):
        with pytest.raises(MutationError):
            ddev.rename_project(tmp_path, "bar", "foo", SETTINGS)

    def test_longer_name_is_not_a_match(self, tmp_path):
        """``name: foobar`` is not the line ``name: foo``."""
        original = "name: foobar\ntype: php\n"
        config = write_config(tmp_path, original)

        with pytest.raises(MutationError):
            ddev.rename_project(tmp_path, "bar", "foo", SETTINGS)

        assert config.read_text() == original

    def test_other_key_ending_in_name_is_skipped(self, tmp_path):
        config = write_config(tmp_path, "hostname: foo\nname: foo\n")

        ddev.rename_project(tmp_path, "bar", "foo", SETTINGS)

        assert config.read_text() == "hostname: foo\nname: bar-foo\n"

    def test_write_failure_is_mutation_error(self, tmp_path):
        original = "name: foo\n"
        config = write_config(tmp_path, original)

        with patch("ddev_workspace.ddev.os.replace", side_effect=PermissionError("denied")):
            with pytest.raises(MutationError) as exc_info:
                ddev.rename_project(tmp_path, "bar", "foo", SETTINGS)

        assert "denied" in str(exc_info.value)
        assert config.read_text() == original
        assert [p.name for p in config.parent.iterdir()] == ["config.yaml"]


class TestRewriteSettings:
    """Test settings.ddev.php rewriting."""

    def test_rewrite(self, tmp_path):
        path = write_settings_php(
            tmp_path,
            "<?php\n\n/**\n * #ddev-generated\n */\n\n$host = 'db';\n$port = 3306;\n",
        )

        host = ddev.rewrite_settings(tmp_path, "0001-project", SETTINGS)

        assert host == "ddev-0001-project-db"
        content = path.read_text()
        assert "#ddev-generated" not in content
        assert '$host = "ddev-0001-project-db";' in content
        assert "$port = 3306;" in content

    def test_only_first_comment_block_removed(self, tmp_path):
        path = write_settings_php(
            tmp_path,
            '/* first */\n$host = "db";\n/* second */\n',
        )

        ddev.rewrite_settings(tmp_path, "x-project", SETTINGS)

        content = path.read_text()
        assert "first" not in content
        assert "/* second */" in content

    def test_no_comment_block(self, tmp_path):
        path = write_settings_php(tmp_path, '<?php\n$host  =  "db";\n')

        ddev.rewrite_settings(tmp_path, "x-project", SETTINGS)

        assert path.read_text() == '<?php\n$host = "ddev-x-project-db";\n'

    def test_missing_host_leaves_file_unchanged(self, tmp_path):
        original = "<?php\n/* banner */\n$port = 3306;\n"
        path = write_settings_php(tmp_path, original)

        with pytest.raises(MutationError):
            ddev.rewrite_settings(tmp_path, "x-project", SETTINGS)

        assert path.read_text() == original


class TestDdevCommands:
    """Test ddev command wrappers."""

    @patch("ddev_workspace.ddev.run_live")
    def test_start(self, mock_run, tmp_path):
        ddev.start(tmp_path)
        mock_run.assert_called_once_with(["ddev", "start"], cwd=tmp_path)

    @patch("ddev_workspace.ddev.run_live")
    def test_delete(self, mock_run, tmp_path):
        ddev.delete(tmp_path)
        mock_run.assert_called_once_with(["ddev", "delete", "--omit-snapshot", "--yes"], cwd=tmp_path)

    @patch("ddev_workspace.ddev.run_live")
    def test_import_db(self, mock_run, tmp_path):
        ddev.import_db(tmp_path, Path("/dumps/db.sql.gz"))
        mock_run.assert_called_once_with(
            ["ddev", "import-db", "--file=/dumps/db.sql.gz"], cwd=tmp_path
        )

    @patch("ddev_workspace.ddev.run_live")
    def test_failure_becomes_external_tool_error(self, mock_run, tmp_path):
        mock_run.side_effect = subprocess.CalledProcessError(1, ["ddev", "start"])

        with pytest.raises(ExternalToolError) as exc_info:
            ddev.start(tmp_path)

        assert exc_info.value.returncode == 1
        assert exc_info.value.command == ["ddev", "start"]

    @patch("ddev_workspace.ddev.run_live")
    def test_missing_executable(self, mock_run, tmp_path):
        mock_run.side_effect = FileNotFoundError("ddev")

        with pytest.raises(ExternalToolError) as exc_info:
            ddev.start(tmp_path)

        assert exc_info.value.returncode is None
