"""Pytest configuration and fixtures for event exporter tests."""

from datetime import datetime, timezone

import pytest

from eventexporter.models import EnhancedEvent

from .fixtures import RecordingBackend


@pytest.fixture
def backend():
    """A backend accepting every push."""
    return RecordingBackend()


@pytest.fixture
def pod_event():
    """A warning event for a pod in the prod namespace."""
    event = EnhancedEvent()
    event.metadata.namespace = "default"
    event.reason = "my reason"
    event.type = "Warning"
    event.involved_object.kind = "Pod"
    event.involved_object.name = "nginx-server-123abc-456def"
    event.involved_object.namespace = "prod"
    event.message = 'Successfully pulled image "nginx:latest"'
    event.first_timestamp = datetime.now(timezone.utc)
    return event


@pytest.fixture
def node_event():
    """A cluster-scoped event for a node."""
    return EnhancedEvent(
        reason="NodeNotReady",
        message="Node worker-1 status is now: NodeNotReady",
        type="Warning",
        involved_object={"kind": "Node", "name": "worker-1"},
    )


@pytest.fixture
def event_json():
    """A Kubernetes event as delivered by the API server."""
    return {
        "metadata": {
            "name": "nginx.17a1b2c3",
            "namespace": "prod",
            "uid": "0f8e6a2c",
            "creationTimestamp": "2024-05-01T10:00:00Z",
        },
        "involvedObject": {
            "kind": "Pod",
            "namespace": "prod",
            "name": "nginx",
            "apiVersion": "v1",
            "labels": {"app": "nginx"},
            "ownerReferences": [{"apiVersion": "apps/v1", "kind": "ReplicaSet", "name": "nginx-7d9"}],
        },
        "reason": "BackOff",
        "message": "Back-off restarting failed container",
        "type": "Warning",
        "count": 3,
        "firstTimestamp": "2024-05-01T10:00:00Z",
        "lastTimestamp": "2024-05-01T10:05:00Z",
        "source": {"component": "kubelet", "host": "worker-1"},
        "clusterName": "prod-eu",
    }
