#!/usr/bin/env python3
"""
Pytest tests for the models module.
"""

import os
import sys

import pytest

# Add parent directory to path for module imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from eks_rotator.models import Cluster, Group, Instance, Node  # noqa: E402


class TestNode:
    """Test cases for Node parsing, readiness and instance matching."""

    def test_from_kubernetes(self, node_item_factory) -> None:
        node = Node.from_kubernetes(
            node_item_factory(name="ip-10-0-1-5.ec2.internal", uid="uid-9", instance_id="i-0123456789abcdef0")
        )

        assert node.name == "ip-10-0-1-5.ec2.internal"
        assert node.uid == "uid-9"
        assert node.provider_id == "aws:///us-east-1a/i-0123456789abcdef0"
        assert node.is_ready

    def test_not_ready_node(self, node_item_factory) -> None:
        assert not Node.from_kubernetes(node_item_factory(ready=False)).is_ready

    def test_node_without_conditions_is_not_ready(self) -> None:
        node = Node.from_kubernetes({"metadata": {"name": "fresh", "uid": "u"}, "spec": {}, "status": {}})

        assert not node.is_ready
        assert node.provider_id == ""

    def test_ready_requires_status_true(self) -> None:
        node = Node(name="n", uid="u", conditions=(("Ready", "Unknown"),))
        assert not node.is_ready

    @pytest.mark.parametrize(
        "instance_id, expected",
        [
            ("i-0123456789abcdef0", True),
            ("i-0123456789abcdef", False),
            ("i-0123456789abcdef01", False),
            ("i-fffffffffffffffff", False),
            ("", False),
        ],
    )
    def test_matches_instance_is_a_suffix_match(self, instance_id, expected) -> None:
        node = Node(name="n", uid="u", provider_id="aws:///us-east-1a/i-0123456789abcdef0")
        assert node.matches_instance(instance_id) is expected


class TestGroup:
    """Test cases for Group parsing."""

    def test_from_autoscaling(self, asg_factory) -> None:
        group = Group.from_autoscaling(
            asg_factory(name="asg-a", instance_ids=["i-1", "i-2"], tags={"k8s.io/cluster/prod": "owned"})
        )

        assert group.name == "asg-a"
        assert group.instance_ids == ("i-1", "i-2")
        assert group.has_tag("k8s.io/cluster/prod", "owned")
        assert not group.has_tag("k8s.io/cluster/prod", "shared")
        assert not group.has_tag("k8s.io/cluster/dev", "owned")

    def test_group_without_tags_or_instances(self) -> None:
        group = Group.from_autoscaling({"AutoScalingGroupName": "empty"})

        assert group.instance_ids == ()
        assert group.tags == {}


class TestInstanceAndCluster:
    """Test cases for Instance parsing and cluster ownership keys."""

    def test_instance_from_ec2(self, ec2_instance_factory) -> None:
        data = ec2_instance_factory(instance_id="i-abc", private_dns_name="ip-10-0-1-5.ec2.internal")

        instance = Instance.from_ec2(data, group_name="asg-x")

        assert instance.instance_id == "i-abc"
        assert instance.launch_time == data["LaunchTime"]
        assert instance.private_dns_name == "ip-10-0-1-5.ec2.internal"
        assert instance.group_name == "asg-x"

    def test_cluster_ownership_key(self) -> None:
        cluster = Cluster(name="prod", endpoint="https://ABC.gr7.us-east-1.eks.amazonaws.com")

        assert cluster.ownership_key() == "k8s.io/cluster/prod"
        assert cluster.ownership_key("kubernetes.io/cluster/") == "kubernetes.io/cluster/prod"
