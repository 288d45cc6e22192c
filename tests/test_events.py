"""
Tests for the per-build NDJSON event log.
"""

from ebdeploy.events import DeployState, emit_event, get_status_from_events, read_events
from ebdeploy.state import get_ebdeploy_home, get_run_dir


def test_status_progression_basic(tmp_path):
    """Test the status follows the last recorded transition."""
    emit_event(tmp_path, "master-abc", DeployState.DESCRIPTOR_LOADED.value, {})
    assert get_status_from_events(tmp_path, "master-abc") == "descriptor_loaded"
    emit_event(tmp_path, "master-abc", DeployState.UPLOADED.value, {})
    assert get_status_from_events(tmp_path, "master-abc") == "uploaded"
    emit_event(tmp_path, "master-abc", DeployState.ENVIRONMENT_UPDATED.value, {})
    assert get_status_from_events(tmp_path, "master-abc") == "deployed"


def test_failure_before_registration(tmp_path):
    """Test a failure before registration reports plain failed."""
    emit_event(tmp_path, "master-abc", DeployState.UPLOADED.value, {})
    emit_event(tmp_path, "master-abc", DeployState.FAILED.value, {"error": "boom"})
    assert get_status_from_events(tmp_path, "master-abc") == "failed"


def test_every_state_has_a_status(tmp_path):
    """Test each deploy state maps to a known status."""
    for state in DeployState:
        version = f"master-{state.value.lower()}"
        emit_event(tmp_path, version, state.value, {})
        assert get_status_from_events(tmp_path, version) != "unknown"


def test_unknown_build(tmp_path):
    """Test a build without events reports unknown."""
    assert read_events(tmp_path, "master-000") == []
    assert get_status_from_events(tmp_path, "master-000") == "unknown"


def test_skips_malformed_lines(tmp_path):
    """Test truncated lines are ignored."""
    emit_event(tmp_path, "master-abc", DeployState.ARCHIVED.value, {"size": 10})
    with open(get_run_dir(tmp_path, "master-abc") / "logs.ndjson", "a") as f:
        f.write("{truncated\n")
    events = read_events(tmp_path, "master-abc")
    assert len(events) == 1
    assert events[0]["data"] == {"size": 10}


def test_slash_in_branch_name(tmp_path):
    """Test a branch with a slash gets a single encoded run directory."""
    emit_event(tmp_path, "feature/login-abc", DeployState.ARCHIVED.value, {})
    assert (tmp_path / "feature%2Flogin-abc" / "logs.ndjson").exists()


def test_similar_branch_names_keep_separate_logs(tmp_path):
    """Test feature/x and feature_x at the same commit do not share a log."""
    emit_event(tmp_path, "feature/x-abc", DeployState.ARCHIVED.value, {})
    emit_event(tmp_path, "feature_x-abc", DeployState.FAILED.value, {})

    assert [e["type"] for e in read_events(tmp_path, "feature/x-abc")] == ["ARCHIVED"]
    assert [e["type"] for e in read_events(tmp_path, "feature_x-abc")] == ["FAILED"]
    assert get_status_from_events(tmp_path, "feature/x-abc") == "archived"
    assert get_run_dir(tmp_path, "feature%2Fx-abc") != get_run_dir(tmp_path, "feature/x-abc")


def test_home_from_environment(tmp_path, monkeypatch):
    """Test EBDEPLOY_HOME overrides the project-local home."""
    monkeypatch.setenv("EBDEPLOY_HOME", str(tmp_path / "custom"))
    assert get_ebdeploy_home("/anywhere") == (tmp_path / "custom").resolve()
    monkeypatch.delenv("EBDEPLOY_HOME")
    assert get_ebdeploy_home(tmp_path) == (tmp_path / ".ebdeploy").resolve()
