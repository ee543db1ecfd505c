#!/usr/bin/env python3
"""Cluster Inventory module: node queries, cordon and drain through kubectl."""

from typing import Any, Callable, List, Optional

from .errors import ClusterActionError, ClusterQueryError, DrainError, NotFoundError
from .models import Node, NodeSet
from .utilities import execute_kubectl_command

# Extra time kubectl gets past its own --timeout before the drain process is killed
DRAIN_TIMEOUT_MARGIN = 60


class ClusterInventory:
    """
    Kubernetes node inventory backed by the kubectl CLI.

    Drain and cordon are delegated to 'kubectl drain' / 'kubectl cordon', which
    are treated as black-box primitives.
    """

    def __init__(
        self,
        printer: Optional[Any] = None,
        execute_kubectl_command: Callable = execute_kubectl_command,
        kubectl: str = "kubectl",
        kube_context: Optional[str] = None,
        kubeconfig: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 2,
        command_timeout: float = 60,
        drain_timeout: int = 600,
        drain_grace_period: int = 0,
        drain_delete_emptydir_data: bool = True,
    ) -> None:
        """
        Initialize ClusterInventory.

        Args:
            printer: PrintManager instance for formatted output
            execute_kubectl_command: Function that runs kubectl and returns output or None
            kubectl: kubectl binary
            kube_context: kubeconfig context to target (current context if None)
            kubeconfig: kubeconfig file (kubectl default if None)
            max_retries: Retries for read and cordon commands on connectivity errors
            retry_delay: Initial delay between retries in seconds
            command_timeout: Seconds before a single non-drain kubectl call is killed
            drain_timeout: Overall drain deadline in seconds
            drain_grace_period: Pod termination grace period used by drain (0 = immediate)
            drain_delete_emptydir_data: Evict pods that use emptyDir volumes
        """
        self.printer = printer
        self.execute_kubectl_command = execute_kubectl_command
        self.kubectl = kubectl
        self.kube_context = kube_context
        self.kubeconfig = kubeconfig
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.command_timeout = command_timeout
        self.drain_timeout = drain_timeout
        self.drain_grace_period = drain_grace_period
        self.drain_delete_emptydir_data = drain_delete_emptydir_data

    @classmethod
    def from_settings(cls, settings: Any, printer: Optional[Any] = None) -> "ClusterInventory":
        return cls(
            printer=printer,
            kubectl=settings.kubectl,
            kube_context=settings.kube_context,
            kubeconfig=settings.kubeconfig,
            max_retries=settings.kubectl_max_retries,
            retry_delay=settings.kubectl_retry_delay,
            command_timeout=settings.kubectl_command_timeout,
            drain_timeout=settings.drain_timeout,
            drain_grace_period=settings.drain_grace_period,
            drain_delete_emptydir_data=settings.drain_delete_emptydir_data,
        )

    def _run(
        self,
        command: List[str],
        json_output: bool = False,
        max_retries: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        """Run kubectl with the configured kubeconfig/context flags and a per-call time bound."""
        global_flags = []
        if self.kubeconfig:
            global_flags += ["--kubeconfig", self.kubeconfig]
        if self.kube_context:
            global_flags += ["--context", self.kube_context]
        return self.execute_kubectl_command(
            global_flags + command,
            json_output=json_output,
            printer=self.printer,
            max_retries=self.max_retries if max_retries is None else max_retries,
            retry_delay=self.retry_delay,
            binary=self.kubectl,
            timeout=self.command_timeout if timeout is None else timeout,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def current_api_endpoint(self) -> str:
        """
        API server URL of the cluster kubectl is currently configured against.

        Raises:
            ClusterQueryError: If the kubeconfig cannot be read or has no server
        """
        config = self._run(["config", "view", "--minify", "-o", "json"], json_output=True)
        clusters = (config or {}).get("clusters") or []
        server = clusters[0].get("cluster", {}).get("server") if clusters else None
        if not server:
            raise ClusterQueryError("Unable to determine the API server of the current kubeconfig context")
        return server

    def list_nodes(self) -> List[Node]:
        """
        List every node in the cluster, unfiltered.

        Raises:
            ClusterQueryError: If the node list cannot be fetched
        """
        nodes_data = self._run(["get", "nodes", "-o", "json"], json_output=True)
        if nodes_data is None:
            raise ClusterQueryError("Failed to list cluster nodes")
        return [Node.from_kubernetes(item) for item in nodes_data.get("items", [])]

    def get_node(self, name: str) -> Node:
        """
        Fetch the current state of one node.

        Raises:
            ClusterQueryError: If the node cannot be fetched
        """
        node_data = self._run(["get", "node", name, "-o", "json"], json_output=True)
        if node_data is None:
            raise ClusterQueryError(f"Failed to get node '{name}'")
        return Node.from_kubernetes(node_data)

    def current_node_identity_set(self) -> NodeSet:
        """Snapshot of the UIDs of every node currently in the cluster."""
        return frozenset(node.uid for node in self.list_nodes())

    def find_node_by_instance_id(self, instance_id: str) -> Node:
        """
        Find the node whose provider ID ends with the EC2 instance ID.

        Raises:
            NotFoundError: If no node matches
        """
        for node in self.list_nodes():
            if node.matches_instance(instance_id):
                return node
        raise NotFoundError(f"node '{instance_id}' is not part of the cluster")

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def cordon(self, node: Node) -> None:
        """
        Mark a node unschedulable. Existing pods keep running.

        Raises:
            ClusterActionError: If kubectl cordon fails
        """
        if self.printer:
            self.printer.print_info(f"Cordoning node '{node.name}'.")
        if self._run(["cordon", node.name]) is None:
            raise ClusterActionError(f"Failed to cordon node '{node.name}'")
        if self.printer:
            self.printer.print_success(f"Node '{node.name}' cordoned.")

    def drain(self, node: Node) -> None:
        """
        Evict every evictable pod from a node.

        DaemonSet pods are ignored, unmanaged pods are force-deleted and the whole drain
        is bounded by drain_timeout, with the process itself killed
        DRAIN_TIMEOUT_MARGIN seconds later. Not retried: kubectl's own deadline governs it.

        Raises:
            DrainError: On timeout or an eviction that cannot complete
        """
        if self.printer:
            self.printer.print_info(f"Draining node '{node.name}'.")
        command = [
            "drain",
            node.name,
            "--force",
            "--ignore-daemonsets",
            f"--grace-period={self.drain_grace_period}",
            f"--timeout={self.drain_timeout}s",
        ]
        if self.drain_delete_emptydir_data:
            command.append("--delete-emptydir-data")

        if self._run(command, max_retries=0, timeout=self.drain_timeout + DRAIN_TIMEOUT_MARGIN) is None:
            raise DrainError(f"Failed to drain node '{node.name}' within {self.drain_timeout}s")
        if self.printer:
            self.printer.print_success(f"Node '{node.name}' drained.")
