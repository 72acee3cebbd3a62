"""Tests for config loader module."""

import json
import os
import threading
from pathlib import Path

import pytest

from pybu.config import CleanupPolicy
from pybu.config.loader import (
    ConfigError,
    Configuration,
    find_config_file,
    generate_example_config,
    load_config,
)
from pybu.config.errors import ErrorKind, LoadError


class TestFindConfigFile:
    """Tests for find_config_file function."""

    def test_explicit_path_exists(self, config_file):
        """Test finding explicitly specified config file."""
        result = find_config_file(str(config_file))
        assert result == config_file

    def test_explicit_path_not_exists(self, tmp_path):
        """Test error when explicit path doesn't exist."""
        with pytest.raises(ConfigError, match="not found") as excinfo:
            find_config_file(str(tmp_path / "nonexistent.xml"))
        assert excinfo.value.kind is ErrorKind.NOT_FOUND

    def test_working_directory_config(self, config_file, monkeypatch):
        """Test finding pybu.xml in the working directory."""
        monkeypatch.chdir(config_file.parent)
        result = find_config_file(None)
        assert result == Path("pybu.xml")

    def test_dist_config(self, tmp_path, monkeypatch, minimal_config_xml):
        """Test falling back to pybu.xml.dist."""
        (tmp_path / "pybu.xml.dist").write_text(minimal_config_xml)
        monkeypatch.chdir(tmp_path)
        result = find_config_file(None)
        assert result == Path("pybu.xml.dist")

    def test_no_config_found(self, tmp_path, monkeypatch):
        """Test that the lookup does not crash in an empty directory."""
        monkeypatch.chdir(tmp_path)
        # User and system locations depend on the machine running the tests
        result = find_config_file(None)
        assert result is None or isinstance(result, Path)


class TestConfiguration:
    """Tests for the Configuration facade."""

    def test_filename_is_absolute(self, config_file):
        configuration = Configuration(config_file)
        assert configuration.filename == str(config_file)
        assert configuration.base_dir == str(config_file.parent)

    def test_construction_fails_on_missing_file(self, tmp_path):
        with pytest.raises(LoadError) as excinfo:
            Configuration(tmp_path / "missing.xml")
        assert excinfo.value.kind is ErrorKind.UNREADABLE

    def test_construction_fails_on_malformed_file(self, write_config):
        with pytest.raises(LoadError) as excinfo:
            Configuration(write_config("<pybu>", "bad.xml"))
        assert excinfo.value.kind is ErrorKind.MALFORMED

    def test_app_settings(self, config_file):
        settings = Configuration(config_file).get_app_settings()
        assert settings.to_dict() == {
            "bootstrap": os.path.join(str(config_file.parent), "bootstrap.py"),
            "verbose": True,
            "colors": False,
        }

    def test_bootstrap_search_paths(self, config_file, tmp_path):
        lib_dir = tmp_path / "lib"
        lib_dir.mkdir()
        (lib_dir / "bootstrap.py").write_text("")

        configuration = Configuration(config_file, search_paths=[str(lib_dir)])
        assert configuration.get_app_settings().bootstrap == str(
            lib_dir / "bootstrap.py"
        )

    def test_runtime_settings(self, config_file):
        settings = Configuration(config_file).get_runtime_settings()
        assert settings.include_paths == (
            os.path.join(str(config_file.parent), "lib"),
            "/usr/share/pybu",
        )
        assert settings.ini == {"memory_limit": "256M", "max_execution_time": "0"}

    def test_logging_settings(self, config_file):
        sinks = Configuration(config_file).get_logging_settings()
        base_dir = str(config_file.parent)
        assert [sink.type for sink in sinks] == ["json", "mail"]
        assert sinks[0].options["target"] == os.path.join(base_dir, "logs/backup.json")
        assert sinks[1].options == {
            "recipients": "admin@example.com",
            "target": os.path.join(base_dir, "mail.log"),
        }

    def test_backup_settings(self, config_file):
        plans = Configuration(config_file).get_backup_settings()
        assert [plan.name for plan in plans] == ["database", "files"]

        database, files = plans
        assert database.stop_on_error is True
        assert database.source.options == {"databases": "dbname", "tables": ""}
        assert len(database.checks) == 1
        assert [sync.type for sync in database.syncs] == ["rsync", "sftp"]
        assert database.syncs[0].skip_on_check_fail is False
        assert database.syncs[1].skip_on_check_fail is True
        assert database.cleanup is None

        assert files.target.dirname == "/mnt/backup"
        assert files.cleanup.type == "quantity"
        assert files.cleanup.skip_on_sync_fail is False
        assert files.cleanup.options == {"amount": "50"}

    def test_end_to_end_single_plan(self, write_config):
        """A plan with two syncs and no cleanup keeps an absolute target."""
        config_path = write_config(
            "<pybu><backups><backup>"
            '<source type="mysql"/>'
            '<target dirname="backup" filename="x.sql" compress="bzip2"/>'
            '<sync type="rsync"/>'
            '<sync type="sftp"/>'
            "</backup></backups></pybu>"
        )
        plans = Configuration(config_path).get_backup_settings()

        assert len(plans) == 1
        plan = plans[0]
        assert len(plan.syncs) == 2
        assert plan.cleanup is None
        assert os.path.isabs(plan.target.dirname)
        assert plan.target.dirname == str(config_path.parent) + "/backup"
        assert plan.target.compress == "bzip2"

    def test_queries_are_idempotent(self, config_file):
        configuration = Configuration(config_file)
        assert configuration.get_backup_settings() == configuration.get_backup_settings()
        assert configuration.get_logging_settings() == configuration.get_logging_settings()
        assert configuration.get_app_settings() == configuration.get_app_settings()
        assert configuration.get_runtime_settings() == configuration.get_runtime_settings()

    def test_queries_return_fresh_records(self, config_file):
        configuration = Configuration(config_file)
        first = configuration.get_backup_settings()
        first.clear()

        second = configuration.get_backup_settings()
        assert len(second) == 2
        assert second[0].source.options["databases"] == "dbname"

    def test_file_read_once(self, write_config, minimal_config_xml):
        config_path = write_config(minimal_config_xml)
        configuration = Configuration(config_path)
        config_path.unlink()

        assert len(configuration.get_backup_settings()) == 1

    def test_invalid_plan_aborts_backup_query_only(self, write_config):
        config_path = write_config(
            '<pybu verbose="true"><backups>'
            '<backup><source type="mysql"/><target/></backup>'
            "<backup><target/></backup>"
            "</backups></pybu>"
        )
        configuration = Configuration(config_path)

        with pytest.raises(ConfigError) as excinfo:
            configuration.get_backup_settings()
        assert excinfo.value.kind is ErrorKind.INVALID_SOURCE
        assert configuration.get_app_settings().verbose is True

    def test_concurrent_reads(self, config_file):
        configuration = Configuration(config_file)
        expected = configuration.get_backup_settings()
        results = []

        def read():
            results.append(configuration.get_backup_settings())

        threads = [threading.Thread(target=read) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 8
        assert all(result == expected for result in results)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_config(self, config_file):
        """Test loading a valid configuration file."""
        config, warnings = load_config(config_file)

        assert len(config.backups) == 2
        assert len(config.logging) == 2
        assert config.app.verbose is True
        assert config.get_backup("files").source.type == "tar"
        assert config.get_backup("unknown") is None
        assert warnings == []

    def test_load_minimal_config(self, minimal_config_file):
        """Test loading a minimal configuration file."""
        config, warnings = load_config(minimal_config_file)

        assert len(config.backups) == 1
        assert config.app.to_dict() == {}
        assert config.logging == ()
        assert warnings == []

    def test_load_nonexistent_file(self, tmp_path):
        """Test error when loading nonexistent file."""
        with pytest.raises(ConfigError, match="Could not read"):
            load_config(tmp_path / "nonexistent.xml")

    def test_load_invalid_xml(self, write_config):
        """Test error when loading invalid XML."""
        bad_config = write_config("this is not valid <xml", "bad.xml")

        with pytest.raises(ConfigError, match="Error loading file"):
            load_config(bad_config)

    def test_empty_config(self, write_config):
        """Test loading a config without backups."""
        config, warnings = load_config(write_config("<pybu/>"))
        assert config.backups == ()
        assert warnings == ["No backups configured"]

    def test_strict_checks_option(self, write_config):
        config_path = write_config(
            "<pybu><backups><backup>"
            '<source type="mysql"/><target/><check type="sizemin"/>'
            "</backup></backups></pybu>"
        )
        config, _ = load_config(config_path)
        assert config.backups[0].checks == ()

        with pytest.raises(ConfigError):
            load_config(config_path, strict_checks=True)

    def test_cleanup_policy_option(self, write_config):
        config_path = write_config(
            "<pybu><backups><backup>"
            '<source type="mysql"/><target/>'
            '<cleanup type="capacity"/><cleanup type="quantity"/>'
            "</backup></backups></pybu>"
        )
        config, _ = load_config(config_path)
        assert config.backups[0].cleanup.type == "quantity"

        with pytest.raises(ConfigError):
            load_config(config_path, cleanup_policy=CleanupPolicy.SINGLE)

    def test_to_dict_is_json_serializable(self, config_file):
        config, _ = load_config(config_file)
        data = json.loads(json.dumps(config.to_dict()))
        assert data["backups"][0]["name"] == "database"
        assert data["backups"][0]["cleanup"] is None
        assert data["backups"][1]["cleanup"]["type"] == "quantity"


class TestValidationWarnings:
    """Tests for non-fatal validation warnings."""

    def test_duplicate_names(self, write_config):
        plan = '<backup name="db"><source type="mysql"/><target dirname="a" filename="b"/></backup>'
        _, warnings = load_config(write_config(f"<pybu><backups>{plan}{plan}</backups></pybu>"))
        assert warnings == ["Duplicate backup name 'db'"]

    def test_incomplete_target(self, write_config):
        _, warnings = load_config(
            write_config(
                '<pybu><backups><backup><source type="mysql"/><target/></backup></backups></pybu>'
            )
        )
        assert "Backup '#1' has no target dirname" in warnings
        assert "Backup '#1' has no target filename" in warnings

    def test_bad_values(self, write_config):
        _, warnings = load_config(
            write_config(
                "<pybu><logging><log/></logging><backups>"
                '<backup name="db"><source type="mysql"/>'
                '<target dirname="a" filename="b"/>'
                '<check type="SizeMin" value="huge"/>'
                "<sync/>"
                '<cleanup type="mixed">'
                '<option name="size" value="1X"/>'
                '<option name="older" value="soon"/>'
                '<option name="amount" value="many"/>'
                "</cleanup>"
                "</backup></backups></pybu>"
            )
        )
        assert warnings == [
            "Backup 'db': check value 'huge' is not a size",
            "Backup 'db' has a sync without type",
            "Backup 'db': cleanup size '1X' is not a size",
            "Backup 'db': cleanup older 'soon' is not a duration",
            "Backup 'db': cleanup amount 'many' is not a number",
            "Log sink without type",
        ]

    def test_huge_numbers_do_not_abort_loading(self, write_config):
        huge = "9" * 400
        config, warnings = load_config(
            write_config(
                "<pybu><backups>"
                '<backup name="db"><source type="mysql"/>'
                '<target dirname="a" filename="b"/>'
                f'<check type="sizemin" value="{huge}"/>'
                f'<cleanup type="mixed"><option name="size" value="{huge}MB"/></cleanup>'
                "</backup></backups></pybu>"
            )
        )
        assert config.backups[0].checks[0].value == huge
        assert warnings == []


class TestGenerateExampleConfig:
    """Tests for generate_example_config function."""

    def test_example_loads_cleanly(self, write_config):
        config, warnings = load_config(write_config(generate_example_config()))
        assert warnings == []
        assert len(config.backups) == 1

        plan = config.backups[0]
        assert plan.name == "database"
        assert plan.source.type == "mysql"
        assert plan.cleanup.options == {"older": "2W"}
