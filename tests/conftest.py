#!/usr/bin/env python3
"""
Shared pytest configuration and fixtures for all tests.
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest

# Add the parent directory to Python path so we can import the package
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from eks_rotator.cancellation import CancellationSignal  # noqa: E402
from eks_rotator.models import Group, Instance, InstanceGroup, Node  # noqa: E402

BASE_LAUNCH_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Shared Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_printer() -> Mock:
    """Shared mock printer for all test files.

    Returns:
        Mock: Mock printer instance with all required methods for testing
            output functionality without actual printing to console.
    """
    return Mock()


@pytest.fixture
def cancellation() -> CancellationSignal:
    """Fresh, un-fired cancellation signal."""
    return CancellationSignal()


# =============================================================================
# AWS Response Factories - shapes returned by boto3
# =============================================================================


@pytest.fixture
def ec2_instance_factory():
    """Factory fixture for DescribeInstances instance descriptions.

    Returns:
        Callable that creates one entry of Reservations[].Instances[]
    """

    def _create_instance(
        instance_id: str = "i-0123456789abcdef0",
        launch_offset_hours: int = 0,
        private_dns_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        return {
            "InstanceId": instance_id,
            "LaunchTime": BASE_LAUNCH_TIME + timedelta(hours=launch_offset_hours),
            "PrivateDnsName": private_dns_name or f"{instance_id}.ec2.internal",
            "State": {"Code": 16, "Name": "running"},
        }

    return _create_instance


@pytest.fixture
def asg_factory():
    """Factory fixture for DescribeAutoScalingGroups group descriptions.

    Returns:
        Callable that creates one entry of AutoScalingGroups[]
    """

    def _create_group(
        name: str = "asg-1",
        instance_ids: Optional[List[str]] = None,
        tags: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        instance_ids = instance_ids or []
        return {
            "AutoScalingGroupName": name,
            "DesiredCapacity": len(instance_ids),
            "Instances": [
                {"InstanceId": instance_id, "LifecycleState": "InService", "HealthStatus": "Healthy"}
                for instance_id in instance_ids
            ],
            "Tags": [
                {"Key": key, "Value": value, "ResourceId": name, "ResourceType": "auto-scaling-group"}
                for key, value in (tags or {}).items()
            ],
        }

    return _create_group


@pytest.fixture
def paginated_client():
    """Factory fixture for boto3 client mocks whose paginators return canned pages.

    Returns:
        Callable(pages_by_operation) -> Mock. get_paginator(op).paginate(**kwargs)
        returns the pages registered for op; every paginate call is recorded on
        client.paginate_calls as (operation, kwargs).
    """

    def _create_client(pages_by_operation: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> Mock:
        pages_by_operation = pages_by_operation or {}
        client = Mock()
        client.paginate_calls = []

        def _get_paginator(operation):
            paginator = Mock()

            def _paginate(**kwargs):
                client.paginate_calls.append((operation, kwargs))
                pages = pages_by_operation.get(operation, [])
                if callable(pages):
                    return pages(**kwargs)
                return iter(pages)

            paginator.paginate = Mock(side_effect=_paginate)
            return paginator

        client.get_paginator = Mock(side_effect=_get_paginator)
        return client

    return _create_client


# =============================================================================
# Kubernetes Node Factories
# =============================================================================


@pytest.fixture
def node_item_factory():
    """Factory fixture for Kubernetes Node objects as printed by 'kubectl get -o json'.

    Returns:
        Callable that creates a Node object dictionary
    """

    def _create_node_item(
        name: str = "ip-10-0-1-5.ec2.internal",
        uid: str = "uid-1",
        instance_id: str = "i-0123456789abcdef0",
        ready: bool = True,
        zone: str = "us-east-1a",
    ) -> Dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "Node",
            "metadata": {"name": name, "uid": uid, "labels": {"topology.kubernetes.io/zone": zone}},
            "spec": {"providerID": f"aws:///{zone}/{instance_id}"},
            "status": {
                "conditions": [
                    {"type": "MemoryPressure", "status": "False"},
                    {"type": "DiskPressure", "status": "False"},
                    {"type": "Ready", "status": "True" if ready else "False"},
                ]
            },
        }

    return _create_node_item


@pytest.fixture
def node_list(node_item_factory):
    """Wraps node items into a NodeList dictionary."""

    def _create_node_list(*items: Dict[str, Any]) -> Dict[str, Any]:
        return {"apiVersion": "v1", "kind": "List", "items": list(items)}

    return _create_node_list


# =============================================================================
# Model Factories - for orchestrator tests that mock the adapters
# =============================================================================


@pytest.fixture
def instance_group_factory():
    """Factory fixture for InstanceGroup values.

    Returns:
        Callable(instance_id, launch_offset_hours, group_name) -> InstanceGroup
    """

    def _create_instance_group(
        instance_id: str, launch_offset_hours: int = 0, group_name: str = "asg-1"
    ) -> InstanceGroup:
        instance = Instance(
            instance_id=instance_id,
            launch_time=BASE_LAUNCH_TIME + timedelta(hours=launch_offset_hours),
            private_dns_name=f"{instance_id}.ec2.internal",
            group_name=group_name,
        )
        return InstanceGroup(instance=instance, group=Group(name=group_name, instance_ids=(instance_id,)))

    return _create_instance_group


@pytest.fixture
def node_for():
    """Builds the Node that corresponds to an instance ID."""

    def _node_for(instance_id: str, ready: bool = True) -> Node:
        return Node(
            name=f"node-{instance_id}",
            uid=f"uid-{instance_id}",
            provider_id=f"aws:///us-east-1a/{instance_id}",
            conditions=(("Ready", "True" if ready else "False"),),
        )

    return _node_for
