"""
Deployment sequence: descriptor -> archive -> S3 upload -> version -> environment.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .archive import ProgressFunc, build_archive
from .beanstalk import DeploymentClient
from .descriptor import DeploymentDescriptor, build_descriptor
from .events import DeployState, emit_event
from .session import AwsSession
from .state import get_ebdeploy_home
from .upload import upload_archive

logger = logging.getLogger(__name__)


Recorder = Callable[[Optional[str], DeployState, Dict[str, Any]], None]
SessionFactory = Callable[[DeploymentDescriptor], AwsSession]


@dataclass
class DeployResult:
    """Outcome of a successful deployment."""
    descriptor: DeploymentDescriptor
    state: DeployState
    archive_size: int
    location: str   # s3://bucket/key

    def to_dict(self) -> Dict[str, Any]:
        config = self.descriptor.config
        return {
            "status": self.state.value,
            "build_version": self.descriptor.build_version,
            "build_key": self.descriptor.build_key,
            "location": self.location,
            "archive_size": self.archive_size,
            "application": config.application_name,
            "environment": config.environment_name,
        }


class EventRecorder:
    """Records state transitions in the per-build NDJSON log."""

    def __init__(self, home: Path):
        self.home = home

    def __call__(self, build_version: Optional[str], state: DeployState, data: Dict[str, Any]) -> None:
        emit_event(self.home, build_version, state.value, data)


def _safe_record(recorder: Recorder, build_version: Optional[str], state: DeployState,
                 data: Dict[str, Any]) -> None:
    """Record a transition; a log write failure never changes the deploy outcome."""
    try:
        recorder(build_version, state, data)
    except OSError as e:
        logger.warning(f"Could not record {state.value} for {build_version}: {e}")


def deploy(root, session_factory: Optional[SessionFactory] = None,
           progress: Optional[ProgressFunc] = None,
           recorder: Optional[Recorder] = None) -> DeployResult:
    """
    Deploy the project at ``root`` to Elastic Beanstalk.

    Steps run strictly in order and the first failure stops the run. The
    failing step's exception is re-raised unchanged after a FAILED
    transition is recorded. An unwritable event log is only logged as a
    warning and never changes the outcome. Nothing is retried or cleaned
    up, so a run that fails while updating the environment leaves the new
    version registered.

    Args:
        root: Project root containing deploy.json and .git
        session_factory: Builds the AWS session from the descriptor
        progress: Optional callback invoked with each archive path
        recorder: Receives (build_version, state, data) on every transition

    Returns:
        DeployResult in state ENVIRONMENT_UPDATED

    Raises:
        ConfigError, VCSError, PackagingError, UploadError, DeployError
    """
    root = Path(root)
    if session_factory is None:
        session_factory = AwsSession.from_descriptor
    if recorder is None:
        recorder = EventRecorder(get_ebdeploy_home(root))

    build_version: Optional[str] = None
    state = DeployState.INIT
    _safe_record(recorder, build_version, state, {"root": str(root)})

    def advance(new_state: DeployState, data: Dict[str, Any]) -> None:
        nonlocal state
        state = new_state
        _safe_record(recorder, build_version, state, data)
        logger.debug(f"{build_version}: {state.value}")

    try:
        descriptor = build_descriptor(root)
        config = descriptor.config
        build_version = descriptor.build_version
        advance(DeployState.DESCRIPTOR_LOADED, {
            "branch": config.branch,
            "commit": descriptor.commit_hash,
            "build_key": descriptor.build_key,
        })

        logger.info(f"Packaging {len(config.files)} entries for {build_version}")
        archive = build_archive(
            root,
            config.files,
            progress=progress,
            flatten_files=config.archive.flatten_files,
            sort_entries=config.archive.sort_entries,
        )
        advance(DeployState.ARCHIVED, {"size": len(archive)})

        session = session_factory(descriptor)
        upload_archive(session.s3(), config.bucket, descriptor.build_key, archive)
        location = f"s3://{config.bucket}/{descriptor.build_key}"
        advance(DeployState.UPLOADED, {"location": location})

        client = DeploymentClient(session.elasticbeanstalk())
        client.register_version(config.application_name, build_version,
                                config.bucket, descriptor.build_key)
        advance(DeployState.VERSION_REGISTERED, {"application": config.application_name})

        client.activate_version(config.environment_name, build_version)
        advance(DeployState.ENVIRONMENT_UPDATED, {"environment": config.environment_name})
    except Exception as e:
        _safe_record(recorder, build_version, DeployState.FAILED, {
            "from_state": state.value,
            "error_type": type(e).__name__,
            "error": str(e),
        })
        raise

    return DeployResult(
        descriptor=descriptor,
        state=state,
        archive_size=len(archive),
        location=location,
    )
