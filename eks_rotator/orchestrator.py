#!/usr/bin/env python3
"""Orchestrator module: the per-instance rotation state machine and batch policy."""

import time
from typing import Any, Callable, List, Optional

import boto3
from botocore.exceptions import BotoCoreError

from .cloud_inventory import CloudInventory
from .cluster_discovery import ClusterDiscovery
from .cluster_inventory import ClusterInventory
from .errors import ConfigurationError, RotationError
from .models import (
    ClusterOwnedGroups,
    InstanceByInternalName,
    InstanceGroup,
    NamedGroups,
    Node,
    RotationPlan,
    RotationTarget,
)
from .node_join_observer import NodeJoinObserver
from .utilities import format_runtime

# Per-instance states, in the only order they may be reached
RESOLVED = "RESOLVED"
CORDONED = "CORDONED"
SNAPSHOT_TAKEN = "SNAPSHOT_TAKEN"
DETACHED = "DETACHED"
REPLACEMENT_READY = "REPLACEMENT_READY"
DRAINED = "DRAINED"
TERMINATED = "TERMINATED"


class RotationOrchestrator:
    """
    Rotates Auto Scaling Group instances out of an EKS cluster.

    Each instance goes through:
    RESOLVED -> CORDONED -> SNAPSHOT_TAKEN -> DETACHED -> [REPLACEMENT_READY] -> DRAINED -> TERMINATED

    Batches run oldest instance first, strictly one instance at a time, and the first
    error stops the batch. Nothing already done is rolled back.
    """

    def __init__(
        self,
        cloud_inventory: Any,
        cluster_inventory: Any,
        cluster_discovery: Any,
        node_join_observer: Any,
        printer: Any,
        dry_run: bool = False,
        limit: int = 0,
        format_runtime: Callable = format_runtime,
    ) -> None:
        """
        Initialize the orchestrator with its collaborators.

        Args:
            cloud_inventory: CloudInventory for ASG/EC2/EKS queries and actions
            cluster_inventory: ClusterInventory for node queries, cordon and drain
            cluster_discovery: ClusterDiscovery for the cluster-owned mode
            node_join_observer: NodeJoinObserver used to await replacement nodes
            printer: PrintManager instance for output formatting
            dry_run: Resolve and log nodes without any mutating call
            limit: Rotate only the N oldest instances of each batch (0 = all)
            format_runtime: Function to format time durations
        """
        self.cloud_inventory = cloud_inventory
        self.cluster_inventory = cluster_inventory
        self.cluster_discovery = cluster_discovery
        self.node_join_observer = node_join_observer
        self.printer = printer
        self.dry_run = dry_run
        self.limit = limit or 0
        self.format_runtime = format_runtime

    # =========================================================================
    # Target resolution
    # =========================================================================

    def resolve_target(self, target: RotationTarget) -> RotationPlan:
        """
        Turn an invocation mode into batches of InstanceGroups.

        Every lookup happens here, before the first mutating call of the run.

        Args:
            target: NamedGroups, ClusterOwnedGroups or InstanceByInternalName

        Returns:
            RotationPlan: Batches to rotate, in order
        """
        if isinstance(target, NamedGroups):
            return self._resolve_named_groups(target.names)
        if isinstance(target, ClusterOwnedGroups):
            return self._resolve_cluster_owned_groups()
        if isinstance(target, InstanceByInternalName):
            return self._resolve_instance(target.internal_name, target.remove_node)
        raise TypeError(f"Unsupported rotation target: {target!r}")

    def _instance_groups_for(self, group) -> List[InstanceGroup]:
        return [InstanceGroup(instance, group) for instance in self.cloud_inventory.list_instances_for_group(group)]

    def _resolve_named_groups(self, names) -> RotationPlan:
        plan = RotationPlan(batches=[])
        for name in names:
            group = self.cloud_inventory.describe_group(name)
            plan.batches.append(self._instance_groups_for(group))
            plan.labels.append(f"ASG '{group.name}'")
        return plan

    def _resolve_cluster_owned_groups(self) -> RotationPlan:
        endpoint = self.cluster_inventory.current_api_endpoint()
        cluster = self.cluster_discovery.resolve_cluster(endpoint)
        instance_groups: List[InstanceGroup] = []
        for group in self.cluster_discovery.find_owned_groups(cluster):
            instance_groups.extend(self._instance_groups_for(group))
        return RotationPlan(batches=[instance_groups], labels=[f"cluster '{cluster.name}'"])

    def _resolve_instance(self, internal_name: str, remove_node: bool) -> RotationPlan:
        instance = self.cloud_inventory.find_instance_by_internal_name(internal_name)
        group = self.cloud_inventory.find_group_owning_instance(instance.instance_id)
        return RotationPlan(
            batches=[[InstanceGroup(instance, group)]],
            remove_node=remove_node,
            sort_and_limit=False,
            labels=[f"instance '{internal_name}'"],
        )

    # =========================================================================
    # Entry points
    # =========================================================================

    def rotate(self, target: RotationTarget, cancellation: Any) -> List[str]:
        """
        Resolve a target and rotate every batch it yields.

        Returns:
            list[str]: IDs of the instances rotated, in rotation order (empty in dry-run mode)
        """
        start_time = time.time()
        plan = self.resolve_target(target)

        processed: List[str] = []
        for label, batch in zip(plan.labels, plan.batches):
            self.printer.print_info(f"Rotating {label}...")
            if plan.sort_and_limit:
                processed += self.rotate_instance_groups(batch, cancellation, remove_node=plan.remove_node)
            else:
                for instance_group in batch:
                    cancellation.raise_if_cancelled()
                    self.rotate_instance(instance_group, plan.remove_node, cancellation)
                    if not self.dry_run:
                        processed.append(instance_group.instance_id)

        self.printer.print_info(f"Total runtime: {self.format_runtime(start_time, time.time())}")
        return processed

    def rotate_all(self, group_names, cancellation: Any) -> List[str]:
        """Rotate the named groups in order, or every cluster-owned group if none are named."""
        if group_names:
            return self.rotate(NamedGroups(tuple(group_names)), cancellation)
        return self.rotate_for_cluster(cancellation)

    def rotate_for_cluster(self, cancellation: Any) -> List[str]:
        return self.rotate(ClusterOwnedGroups(), cancellation)

    def rotate_by_internal_name(self, internal_name: str, remove_node: bool, cancellation: Any) -> List[str]:
        return self.rotate(InstanceByInternalName(internal_name, remove_node), cancellation)

    # =========================================================================
    # Batch policy
    # =========================================================================

    def select_batch(self, instance_groups: List[InstanceGroup]) -> List[InstanceGroup]:
        """Sort oldest launch time first and keep only the configured limit."""
        ordered = sorted(instance_groups, key=lambda ig: ig.launch_time)
        if self.limit > 0:
            ordered = ordered[: self.limit]
        return ordered

    def rotate_instance_groups(
        self, instance_groups: List[InstanceGroup], cancellation: Any, remove_node: bool = False
    ) -> List[str]:
        """
        Rotate a batch of instances, oldest first, one at a time.

        The first failure stops the batch; later instances are not attempted.

        Args:
            instance_groups: Unordered batch of InstanceGroups
            cancellation: CancellationSignal for the run
            remove_node: Permanently remove the instances instead of replacing them

        Returns:
            list[str]: Instance IDs rotated, in order; dry-run instances are only reported
        """
        selected = self.select_batch(instance_groups)
        self.printer.print_info(f"Rotating {len(selected)} nodes, oldest to newest.")

        rotated = []
        for instance_group in selected:
            cancellation.raise_if_cancelled()
            self.rotate_instance(instance_group, remove_node, cancellation)
            if not self.dry_run:
                rotated.append(instance_group.instance_id)
        return rotated

    # =========================================================================
    # Per-instance state machine
    # =========================================================================

    def rotate_instance(self, instance_group: InstanceGroup, remove_node: bool, cancellation: Any) -> Optional[Node]:
        """
        Rotate a single instance.

        The node set snapshot is taken after cordon and before detach, so a replacement
        that joins right after the detach is never part of the baseline.

        Args:
            instance_group: Instance and the group managing it
            remove_node: True to shrink the group instead of waiting for a replacement
            cancellation: CancellationSignal for the run

        Returns:
            Node or None: The Ready replacement node, or None in dry-run/removal mode
        """
        instance_id = instance_group.instance_id
        group_id = instance_group.group_id
        total_steps = 6 if remove_node else 7
        node = None
        replacement = None
        state = RESOLVED

        try:
            self.printer.print_step(1, total_steps, f"Resolving node for instance '{instance_id}'")
            node = self.cluster_inventory.find_node_by_instance_id(instance_id)
            self.printer.print_info(f"Rotating node '{node.name}' (instance '{instance_id}').")

            if self.dry_run:
                action = "remove" if remove_node else "rotate"
                self.printer.print_dry_run(
                    f"Would {action} node '{node.name}' (instance '{instance_id}', ASG '{group_id}')"
                )
                self.printer.print_dry_run("DRY RUN is enabled. Skipping rotate.")
                return None

            state = CORDONED
            self.printer.print_step(2, total_steps, f"Cordoning node '{node.name}'")
            self.cluster_inventory.cordon(node)

            state = SNAPSHOT_TAKEN
            self.printer.print_step(3, total_steps, "Capturing current cluster node set")
            known = self.cluster_inventory.current_node_identity_set()

            state = DETACHED
            self.printer.print_step(4, total_steps, f"Detaching instance '{instance_id}' from ASG '{group_id}'")
            self.cloud_inventory.detach(group_id, instance_id, remove_node)

            step = 5
            if not remove_node:
                state = REPLACEMENT_READY
                self.printer.print_step(step, total_steps, "Waiting for replacement node")
                replacement = self.node_join_observer.await_new_node_ready(known, cancellation)
                step += 1

            state = DRAINED
            self.printer.print_step(step, total_steps, f"Draining node '{node.name}'")
            self.cluster_inventory.drain(node)

            state = TERMINATED
            self.printer.print_step(step + 1, total_steps, f"Terminating instance '{instance_id}'")
            self.cloud_inventory.terminate(instance_id)

        except RotationError as e:
            node_name = node.name if node else "unresolved"
            self.printer.print_error(
                f"Rotation of instance '{instance_id}' (node '{node_name}', ASG '{group_id}') "
                f"failed at {state}: {e}"
            )
            raise

        self.printer.print_success(f"Instance '{instance_id}' rotated out of ASG '{group_id}'.")
        return replacement


def build_rotation_orchestrator(
    settings: Any,
    printer: Any,
    dry_run: bool = False,
    limit: int = 0,
    session: Optional[boto3.session.Session] = None,
) -> RotationOrchestrator:
    """
    Wire the orchestrator and its collaborators from RotationSettings.

    Args:
        settings: RotationSettings for the run
        printer: PrintManager instance for output formatting
        dry_run: Suppress every mutating call after node resolution
        limit: Rotate only the N oldest instances of each batch (0 = all)
        session: boto3 session to use (built from settings if None)

    Returns:
        RotationOrchestrator: Ready-to-run orchestrator
    """
    if session is None:
        try:
            session = boto3.session.Session(profile_name=settings.aws_profile, region_name=settings.aws_region)
        except BotoCoreError as e:
            raise ConfigurationError(f"Unable to create AWS session: {e}") from e

    cloud_inventory = CloudInventory.from_session(session, printer=printer)
    cluster_inventory = ClusterInventory.from_settings(settings, printer=printer)
    cluster_discovery = ClusterDiscovery(
        cloud_inventory,
        printer=printer,
        ownership_tag_prefix=settings.ownership_tag_prefix,
        ownership_tag_value=settings.ownership_tag_value,
    )
    node_join_observer = NodeJoinObserver(
        cluster_inventory,
        printer=printer,
        join_poll_interval=settings.join_poll_interval,
        ready_poll_interval=settings.ready_poll_interval,
    )
    return RotationOrchestrator(
        cloud_inventory=cloud_inventory,
        cluster_inventory=cluster_inventory,
        cluster_discovery=cluster_discovery,
        node_join_observer=node_join_observer,
        printer=printer,
        dry_run=dry_run,
        limit=limit,
    )
