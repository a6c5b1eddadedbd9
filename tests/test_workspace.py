"""Tests for the scratch workspace."""

from pathlib import Path

import pytest

from swift_api_diff.workspace import DEFAULT_SCRATCH_NAME, scratch_workspace


def test_layout_and_cleanup(tmp_path):
    with scratch_workspace(parent=tmp_path) as run:
        assert run.root == tmp_path / DEFAULT_SCRATCH_NAME
        assert run.old_build_dir.is_dir()
        assert run.new_build_dir.is_dir()
        assert run.old_dump.name == "old.json"
        assert run.new_dump.name == "new.json"
        assert run.forward_report.name == "old_vs_new_report.txt"
        assert run.reversed_report.name == "new_vs_old_report.txt"
        run.forward_report.write_text("x")

    assert not run.root.exists()


def test_cleanup_on_error(tmp_path):
    with pytest.raises(RuntimeError):
        with scratch_workspace(parent=tmp_path) as run:
            (run.old_build_dir / "debug").mkdir()
            raise RuntimeError("build exploded")

    assert not (tmp_path / DEFAULT_SCRATCH_NAME).exists()


def test_stale_workspace_is_replaced(tmp_path):
    stale = tmp_path / DEFAULT_SCRATCH_NAME
    (stale / "build_old").mkdir(parents=True)
    (stale / "old.json").write_text("stale dump")

    with scratch_workspace(parent=tmp_path) as run:
        assert not run.old_dump.exists()
        assert run.old_build_dir.is_dir()

    assert not stale.exists()


def test_fixed_name(tmp_path):
    with scratch_workspace("custom_scratch", parent=tmp_path) as run:
        assert run.root == tmp_path / "custom_scratch"


def test_cleanup_when_build_dir_creation_fails(tmp_path, monkeypatch):
    real_mkdir = Path.mkdir

    def failing_mkdir(self, *args, **kwargs):
        if self.name == "build_new":
            raise PermissionError(13, "Permission denied", str(self))
        return real_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", failing_mkdir)

    with pytest.raises(PermissionError):
        with scratch_workspace(parent=tmp_path):
            pass

    assert not (tmp_path / DEFAULT_SCRATCH_NAME).exists()
