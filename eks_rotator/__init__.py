#!/usr/bin/env python3
"""
EKS Auto Scaling Group Rotation Tool.

Replaces the EC2 instances backing an EKS cluster one at a time: each node is
cordoned, detached from its Auto Scaling Group, replaced, drained and terminated.

Modules:
- print_manager: Handles all output formatting and printing
- errors: Error taxonomy for rotation failures
- models: Instance, Group, InstanceGroup, Node, Cluster and rotation targets
- utilities: kubectl execution with retry and runtime formatting
- cloud_inventory: Auto Scaling, EC2 and EKS queries and actions
- cluster_inventory: Node queries, cordon and drain
- cluster_discovery: Current cluster and owned Auto Scaling Groups
- node_join_observer: Polling for replacement nodes
- cancellation: Run-wide cancellation signal and deadline
- configuration_manager: Settings defaults and YAML config files
- arguments_parser: Command-line argument parsing
- orchestrator: Rotation state machine and batch policy
"""

from .arguments_parser import ArgumentsParser
from .cancellation import CancellationSignal, install_signal_handlers
from .cloud_inventory import CloudInventory
from .cluster_discovery import ClusterDiscovery
from .cluster_inventory import ClusterInventory
from .configuration_manager import RotationSettings, load_settings
from .errors import (
    AmbiguousResultError,
    CancellationError,
    CloudActionError,
    CloudQueryError,
    ClusterActionError,
    ClusterQueryError,
    ConfigurationError,
    DrainError,
    ExactlyOneError,
    NoOwnedGroupsError,
    NotFoundError,
    RotationError,
)
from .models import (
    Cluster,
    ClusterOwnedGroups,
    Group,
    Instance,
    InstanceByInternalName,
    InstanceGroup,
    NamedGroups,
    Node,
    RotationPlan,
)
from .node_join_observer import NodeJoinObserver
from .orchestrator import RotationOrchestrator, build_rotation_orchestrator
from .print_manager import PrintManager, printer, DEBUG_MODE
from .utilities import execute_kubectl_command, format_runtime

__all__ = [
    "ArgumentsParser",
    "CancellationSignal",
    "install_signal_handlers",
    "CloudInventory",
    "ClusterDiscovery",
    "ClusterInventory",
    "RotationSettings",
    "load_settings",
    "AmbiguousResultError",
    "CancellationError",
    "CloudActionError",
    "CloudQueryError",
    "ClusterActionError",
    "ClusterQueryError",
    "ConfigurationError",
    "DrainError",
    "ExactlyOneError",
    "NoOwnedGroupsError",
    "NotFoundError",
    "RotationError",
    "Cluster",
    "ClusterOwnedGroups",
    "Group",
    "Instance",
    "InstanceByInternalName",
    "InstanceGroup",
    "NamedGroups",
    "Node",
    "RotationPlan",
    "NodeJoinObserver",
    "RotationOrchestrator",
    "build_rotation_orchestrator",
    "PrintManager",
    "printer",
    "DEBUG_MODE",
    "execute_kubectl_command",
    "format_runtime",
]
