#!/usr/bin/env python3
"""Node Join Observer module for detecting replacement nodes."""

import queue
import threading
from typing import Any, Optional

from .errors import CancellationError
from .models import Node, NodeSet
from .utilities import format_duration

DEFAULT_JOIN_POLL_INTERVAL = 30
DEFAULT_READY_POLL_INTERVAL = 10


class NodeJoinObserver:
    """
    Polls the cluster for a replacement node in two phases.

    Phases:
    1. Await Join - Return the first node whose UID is absent from the baseline NodeSet
    2. Await Ready - Re-fetch that node until its Ready condition is True

    Neither phase has an iteration limit; only the cancellation signal ends a wait.
    """

    def __init__(
        self,
        cluster_inventory: Any,
        printer: Optional[Any] = None,
        join_poll_interval: float = DEFAULT_JOIN_POLL_INTERVAL,
        ready_poll_interval: float = DEFAULT_READY_POLL_INTERVAL,
        handoff_check_interval: float = 0.5,
    ) -> None:
        """
        Initialize NodeJoinObserver.

        Args:
            cluster_inventory: ClusterInventory used for node listing and fetches
            printer: PrintManager instance for formatted output
            join_poll_interval: Seconds to wait before each join poll (default: 30)
            ready_poll_interval: Seconds to wait before each readiness poll (default: 10)
            handoff_check_interval: How often the caller re-checks for cancellation while
                the background poll runs
        """
        self.cluster_inventory = cluster_inventory
        self.printer = printer
        self.join_poll_interval = join_poll_interval
        self.ready_poll_interval = ready_poll_interval
        self.handoff_check_interval = handoff_check_interval

    def await_new_node_ready(self, known: NodeSet, cancellation: Any) -> Node:
        """
        Wait for a new node to join and become Ready, abandoning the wait on cancellation.

        Both phases run on a background thread. Whichever comes first, the poll result
        or the cancellation signal, decides the outcome; the background thread is not
        joined when cancellation wins.

        Args:
            known: UIDs of the nodes present before the triggering detach
            cancellation: CancellationSignal for the run

        Returns:
            Node: The newly joined, Ready node

        Raises:
            CancellationError: If the run is cancelled before the node is Ready
            ClusterQueryError: If polling the cluster fails
        """
        handoff: "queue.Queue" = queue.Queue(maxsize=1)
        worker = threading.Thread(
            target=self._observe,
            args=(known, cancellation, handoff),
            name="node-join-observer",
            daemon=True,
        )
        worker.start()

        while True:
            if cancellation.cancelled:
                raise CancellationError(cancellation.reason or "rotation cancelled")
            try:
                succeeded, value = handoff.get(timeout=self.handoff_check_interval)
            except queue.Empty:
                continue
            if succeeded:
                return value
            raise value

    def _observe(self, known: NodeSet, cancellation: Any, handoff: "queue.Queue") -> None:
        try:
            node = self.await_join(known, cancellation)
            node = self.await_ready(node, cancellation)
        except Exception as e:  # handed to the waiting caller, re-raised there
            handoff.put((False, e))
        else:
            handoff.put((True, node))

    def _sleep(self, seconds: float, cancellation: Any) -> None:
        if cancellation.wait(seconds):
            raise CancellationError(cancellation.reason or "rotation cancelled")

    def await_join(self, known: NodeSet, cancellation: Any) -> Node:
        """
        Phase 1: poll the node list until a node whose UID is not in known appears.

        Nodes are compared by UID, never by name, since names can be reused.
        """
        while True:
            if self.printer:
                self.printer.print_info(
                    f"Waiting {format_duration(self.join_poll_interval)} for new node to join cluster..."
                )
            self._sleep(self.join_poll_interval, cancellation)

            for node in self.cluster_inventory.list_nodes():
                if node.uid in known:
                    continue
                if self.printer:
                    self.printer.print_success(f"Node '{node.name}' joined cluster.")
                return node

    def await_ready(self, node: Node, cancellation: Any) -> Node:
        """Phase 2: poll one node until it reports condition Ready=True."""
        while True:
            if self.printer:
                self.printer.print_info(
                    f"Waiting {format_duration(self.ready_poll_interval)} for new node to be ready..."
                )
            self._sleep(self.ready_poll_interval, cancellation)

            current = self.cluster_inventory.get_node(node.name)
            if current.is_ready:
                if self.printer:
                    self.printer.print_success(f"Node '{current.name}' is Ready.")
                return current
