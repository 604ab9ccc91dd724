"""Tests for the book-forge command line."""

import json

import pytest

from bookforge.cli import main


@pytest.fixture
def seed_file(tmp_path, seed):
    path = tmp_path / "library.json"
    path.write_text(json.dumps(seed), encoding="utf-8")
    return path


@pytest.mark.usefixtures("restore_root_logger")
class TestMain:
    """Tests for main()."""

    def test_outline(self, seed_file, capsys):
        code = main(["--seed", str(seed_file), "--log-file", "none", "--log-level", "ERROR"])

        out = capsys.readouterr().out
        assert code == 0
        assert "The Glass Orchard [b1]" in out
        assert "characters=2 plot_arcs=1 chapters=1 worlds=1 world_entries=5" in out

    def test_empty_store(self, capsys):
        code = main(["--log-file", "none", "--log-level", "ERROR"])

        assert code == 0
        assert "No books in store." in capsys.readouterr().out

    def test_check_clean(self, seed_file, capsys):
        code = main(["--seed", str(seed_file), "--check", "--log-file", "none"])

        assert code == 0
        assert "No dangling references." in capsys.readouterr().out

    def test_check_reports_dangling(self, tmp_path, seed, capsys):
        seed[0]["versions"][0]["plotArcs"][0]["characters"].append("c-gone")
        path = tmp_path / "library.yaml"
        path.write_text(json.dumps(seed), encoding="utf-8")

        code = main(["--seed", str(path), "--check", "--log-file", "none", "--log-level", "ERROR"])

        assert code == 1
        assert "plot_arc pa1 characters -> c-gone" in capsys.readouterr().out

    def test_broken_seed(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{nope", encoding="utf-8")

        code = main(["--seed", str(path), "--log-file", "none", "--log-level", "CRITICAL"])

        assert code == 1
        assert "Invalid JSON" in capsys.readouterr().err

    def test_unsupported_seed_path(self, capsys):
        code = main(["--seed", "library.csv", "--log-file", "none", "--log-level", "CRITICAL"])

        assert code == 1
        assert "seed_fixture_path" in capsys.readouterr().err

    def test_invalid_settings_file(self, isolate_settings_file, capsys):
        isolate_settings_file.write_text(json.dumps({"id_random_length": 2}))

        assert main(["--log-file", "none"]) == 1
        assert "invalid settings" in capsys.readouterr().err
