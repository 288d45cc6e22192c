"""
Shared fixtures: throwaway project trees with deploy.json and a git ref.
"""

import json

import pytest


def write_descriptor(root, **overrides):
    descriptor = {
        "files": ["Dockerfile"],
        "aws": {
            "region": "eu-west-1",
            "credentials": {"accessKey": "AKIATEST", "secretAccessKey": "secret"},
            "s3": {"bucket": "builds"},
            "elb": {"applicationName": "shop", "environmentName": "shop-prod"},
        },
        "branch": "master",
    }
    descriptor.update(overrides)
    (root / "deploy.json").write_text(json.dumps(descriptor))
    return descriptor


def write_ref(root, branch, content):
    ref = root / ".git" / "refs" / "heads" / branch
    ref.parent.mkdir(parents=True, exist_ok=True)
    ref.write_text(content)
    return ref


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Project with a Dockerfile, a config dir and master at deadbeef."""
    monkeypatch.setenv("EBDEPLOY_HOME", str(tmp_path / "home"))
    root = tmp_path / "app"
    root.mkdir()
    (root / "Dockerfile").write_text("FROM python:3.12\n")
    (root / "config").mkdir()
    (root / "config" / "app.yml").write_text("debug: false\n")
    (root / "config" / "nested").mkdir()
    (root / "config" / "nested" / "db.yml").write_text("host: db\n")
    write_descriptor(root)
    write_ref(root, "master", "deadbeef\n")
    return root
