#!/usr/bin/env python3
"""
Value types for the rotation tool.

Instances and groups come from AWS, nodes from the Kubernetes API. Each is an
immutable snapshot taken at query time; relationships between them
(InstanceGroup, node-for-instance) are computed on demand and never cached.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

NodeSet = FrozenSet[str]


@dataclass(frozen=True)
class Instance:
    """An EC2 instance as returned by DescribeInstances"""

    instance_id: str
    launch_time: datetime
    private_dns_name: str = ""
    group_name: Optional[str] = None

    @classmethod
    def from_ec2(cls, data: Dict[str, Any], group_name: Optional[str] = None) -> "Instance":
        """Build an Instance from a DescribeInstances instance description.

        Args:
            data: One entry of Reservations[].Instances[]
            group_name: Name of the owning Auto Scaling Group, if known

        Returns:
            Instance snapshot
        """
        return cls(
            instance_id=data["InstanceId"],
            launch_time=data["LaunchTime"],
            private_dns_name=data.get("PrivateDnsName", ""),
            group_name=group_name,
        )


@dataclass(frozen=True)
class Group:
    """An Auto Scaling Group as returned by DescribeAutoScalingGroups"""

    name: str
    tags: Dict[str, str] = field(default_factory=dict, hash=False)
    instance_ids: Tuple[str, ...] = ()

    @classmethod
    def from_autoscaling(cls, data: Dict[str, Any]) -> "Group":
        """Build a Group from a DescribeAutoScalingGroups group description."""
        return cls(
            name=data["AutoScalingGroupName"],
            tags={tag["Key"]: tag.get("Value", "") for tag in data.get("Tags", [])},
            instance_ids=tuple(member["InstanceId"] for member in data.get("Instances", [])),
        )

    def has_tag(self, key: str, value: str) -> bool:
        return self.tags.get(key) == value


@dataclass(frozen=True)
class InstanceGroup:
    """One instance paired with the Auto Scaling Group that manages it"""

    instance: Instance
    group: Group

    @property
    def instance_id(self) -> str:
        return self.instance.instance_id

    @property
    def group_id(self) -> str:
        return self.group.name

    @property
    def launch_time(self) -> datetime:
        return self.instance.launch_time


@dataclass(frozen=True)
class Node:
    """A Kubernetes node as returned by 'kubectl get nodes -o json'"""

    name: str
    uid: str
    provider_id: str = ""
    conditions: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def from_kubernetes(cls, item: Dict[str, Any]) -> "Node":
        """Build a Node from a Kubernetes Node object.

        Args:
            item: Node object (one entry of a NodeList's items)

        Returns:
            Node snapshot with its status conditions flattened to (type, status) pairs
        """
        metadata = item.get("metadata", {})
        conditions = item.get("status", {}).get("conditions", []) or []
        return cls(
            name=metadata["name"],
            uid=metadata["uid"],
            provider_id=item.get("spec", {}).get("providerID", ""),
            conditions=tuple((c.get("type", ""), c.get("status", "")) for c in conditions),
        )

    @property
    def is_ready(self) -> bool:
        return any(kind == "Ready" and status == "True" for kind, status in self.conditions)

    def matches_instance(self, instance_id: str) -> bool:
        """True if the provider ID ends with the given EC2 instance ID"""
        return bool(instance_id) and self.provider_id.endswith(instance_id)


@dataclass(frozen=True)
class Cluster:
    """The EKS cluster the current kubeconfig points at"""

    name: str
    endpoint: str

    def ownership_key(self, prefix: str = "k8s.io/cluster/") -> str:
        """Tag key that marks an Auto Scaling Group as belonging to this cluster"""
        return f"{prefix}{self.name}"


# =============================================================================
# Rotation targets - how the tool was invoked
# =============================================================================


@dataclass(frozen=True)
class NamedGroups:
    """Rotate the listed Auto Scaling Groups, one batch per group"""

    names: Tuple[str, ...]


@dataclass(frozen=True)
class ClusterOwnedGroups:
    """Rotate every Auto Scaling Group owned by the current cluster as a single batch"""


@dataclass(frozen=True)
class InstanceByInternalName:
    """Rotate (or permanently remove) one instance found by its internal DNS name"""

    internal_name: str
    remove_node: bool = False


RotationTarget = Union[NamedGroups, ClusterOwnedGroups, InstanceByInternalName]


@dataclass
class RotationPlan:
    """A resolved target: ordered batches of InstanceGroups ready for the rotation pipeline"""

    batches: List[List[InstanceGroup]]
    remove_node: bool = False
    sort_and_limit: bool = True
    labels: List[str] = field(default_factory=list)
