#!/usr/bin/env python3
"""Cluster Discovery module: resolve the current EKS cluster and the ASGs it owns."""

from typing import Any, List, Optional

from .errors import NoOwnedGroupsError
from .models import Cluster, Group


class ClusterDiscovery:
    """Matches the configured API endpoint against EKS and selects owned Auto Scaling Groups"""

    def __init__(
        self,
        cloud_inventory: Any,
        printer: Optional[Any] = None,
        ownership_tag_prefix: str = "k8s.io/cluster/",
        ownership_tag_value: str = "owned",
    ) -> None:
        self.cloud_inventory = cloud_inventory
        self.printer = printer
        self.ownership_tag_prefix = ownership_tag_prefix
        self.ownership_tag_value = ownership_tag_value

    def resolve_cluster(self, endpoint: str) -> Cluster:
        """Find the EKS cluster serving the given API endpoint (NotFoundError if none)."""
        cluster = self.cloud_inventory.find_managed_cluster_by_endpoint(endpoint)
        if self.printer:
            self.printer.print_info(f"Current cluster is '{cluster.name}' ({endpoint})")
        return cluster

    def find_owned_groups(self, cluster: Cluster) -> List[Group]:
        """
        Select every Auto Scaling Group tagged as owned by the cluster.

        A group is owned when it carries the tag '<prefix><cluster name>' with value 'owned'.

        Args:
            cluster: Cluster whose groups should be found

        Returns:
            list[Group]: Owned groups in listing order

        Raises:
            NoOwnedGroupsError: If the cluster owns no groups
        """
        ownership_key = cluster.ownership_key(self.ownership_tag_prefix)
        owned = []
        for group in self.cloud_inventory.list_groups():
            if group.has_tag(ownership_key, self.ownership_tag_value):
                if self.printer:
                    self.printer.print_info(f"ASG '{group.name}' is owned by cluster '{cluster.name}'.")
                owned.append(group)

        if not owned:
            raise NoOwnedGroupsError(cluster.name)
        return owned
