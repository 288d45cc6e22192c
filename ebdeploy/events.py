"""
NDJSON event log of deployment state transitions.
"""

import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .state import UNVERSIONED_RUN, create_run_dir, get_run_dir

LOG_FILENAME = "logs.ndjson"


class DeployState(Enum):
    """States of a single deployment run."""
    INIT = "INIT"
    DESCRIPTOR_LOADED = "DESCRIPTOR_LOADED"
    ARCHIVED = "ARCHIVED"
    UPLOADED = "UPLOADED"
    VERSION_REGISTERED = "VERSION_REGISTERED"
    ENVIRONMENT_UPDATED = "ENVIRONMENT_UPDATED"
    FAILED = "FAILED"


STATUS_MAP = {
    DeployState.INIT.value: "init",
    DeployState.DESCRIPTOR_LOADED.value: "descriptor_loaded",
    DeployState.ARCHIVED.value: "archived",
    DeployState.UPLOADED.value: "uploaded",
    DeployState.VERSION_REGISTERED.value: "version_registered",
    DeployState.ENVIRONMENT_UPDATED.value: "deployed",
    DeployState.FAILED.value: "failed",
}


def emit_event(home: Path, build_version: Optional[str], event_type: str, data: Dict[str, Any]) -> None:
    """
    Append an event to the build's logs.ndjson file.

    Args:
        home: ebdeploy home directory
        build_version: Build version, or None before it is known
        event_type: Event type, a DeployState value (e.g., "UPLOADED")
        data: Event data
    """
    run_dir = create_run_dir(home, build_version or UNVERSIONED_RUN)

    event = {
        "ts": datetime.now().isoformat(),
        "type": event_type,
        "data": data
    }

    with open(run_dir / LOG_FILENAME, "a") as f:
        f.write(json.dumps(event) + "\n")
        f.flush()


def read_events(home: Path, build_version: str) -> List[Dict[str, Any]]:
    """
    Read all events recorded for a build version.

    Returns:
        List of events, oldest first
    """
    logs_file = get_run_dir(home, build_version) / LOG_FILENAME

    if not logs_file.exists():
        return []

    events = []
    with open(logs_file, "r") as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    continue  # Skip malformed lines

    return events


def get_status_from_events(home: Path, build_version: str) -> str:
    """
    Determine the last recorded state of a build version.

    A run that registered its version and then failed reports
    "registered_not_active" so it can be picked up for manual follow-up.
    """
    events = read_events(home, build_version)
    if not events:
        return "unknown"

    seen = {event.get("type") for event in events}
    last_type = events[-1].get("type", "")

    if last_type == DeployState.FAILED.value and DeployState.VERSION_REGISTERED.value in seen:
        return "registered_not_active"

    return STATUS_MAP.get(last_type, "unknown")
