# tests/unit/storage/test_run_manager.py — v2
"""Tests for storage/run_manager.py — run ids and run lifecycle."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

import pytest

from wsindex.core.errors import ArtifactError
from wsindex.storage.run_manager import begin_run, generate_run_id

T0 = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestGenerateRunId:
    def test_format(self):
        assert re.fullmatch(r"RUN-20240102-[0-9a-f]{8}", generate_run_id("ws", "index.scan", T0))

    def test_deterministic(self):
        assert generate_run_id("ws", "index.scan", T0) == generate_run_id("ws", "index.scan", T0)

    def test_step_changes_id(self):
        assert generate_run_id("ws", "scan", T0) != generate_run_id("ws", "embed", T0)

    def test_timestamp_changes_id(self):
        later = T0 + timedelta(seconds=1)
        assert generate_run_id("ws", "scan", T0) != generate_run_id("ws", "scan", later)

    def test_naive_timestamp_is_utc(self):
        naive = T0.replace(tzinfo=None)
        assert generate_run_id("ws", "scan", naive) == generate_run_id("ws", "scan", T0)

    def test_offset_timestamp_normalized(self):
        shifted = T0.astimezone(timezone(timedelta(hours=2)))
        assert generate_run_id("ws", "scan", shifted) == generate_run_id("ws", "scan", T0)

    def test_default_uses_now(self):
        assert generate_run_id("ws", "scan").startswith("RUN-")


class TestBeginRun:
    def test_creates_artifact_dir(self, tmp_path):
        run = begin_run(tmp_path, "ws", "/repo", "index.scan", started_at=T0)
        assert run.artifact_dir == tmp_path / run.run_id
        assert run.artifact_dir.is_dir()
        assert run.run_id == generate_run_id("ws", "index.scan", T0)

    def test_caller_supplied_run_id(self, tmp_path):
        run = begin_run(tmp_path, "ws", "/repo", "index.scan", run_id="RUN-custom")
        assert run.run_id == "RUN-custom"
        assert (tmp_path / "RUN-custom").is_dir()

    def test_blank_run_id_is_derived(self, tmp_path):
        run = begin_run(tmp_path, "ws", "/repo", "index.scan", run_id="  ", started_at=T0)
        assert run.run_id == generate_run_id("ws", "index.scan", T0)

    def test_existing_dir_is_reused(self, tmp_path):
        begin_run(tmp_path, "ws", "/repo", "index.scan", run_id="RUN-x")
        run = begin_run(tmp_path, "ws", "/repo", "index.scan", run_id="RUN-x")
        assert run.artifact_dir.is_dir()

    def test_empty_step_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            begin_run(tmp_path, "ws", "/repo", "")
        assert list(tmp_path.iterdir()) == []

    def test_uncreatable_dir(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        with pytest.raises(ArtifactError):
            begin_run(blocker, "ws", "/repo", "index.scan")


class TestRunArtifacts:
    def test_duplicates_kept(self, tmp_path):
        run = begin_run(tmp_path, "ws", "/repo", "index.scan")
        run.add_artifact("a.ndjson")
        run.add_artifact("a.ndjson")
        assert run.artifacts() == ["a.ndjson", "a.ndjson"]

    def test_blank_ignored(self, tmp_path):
        run = begin_run(tmp_path, "ws", "/repo", "index.scan")
        run.add_artifact("  ")
        assert run.artifacts() == []

    def test_artifacts_returns_copy(self, tmp_path):
        run = begin_run(tmp_path, "ws", "/repo", "index.scan")
        run.add_artifact(tmp_path / "files.ndjson")
        snapshot = run.artifacts()
        snapshot.append("other")
        assert run.artifacts() == [str(tmp_path / "files.ndjson")]
