#!/usr/bin/env python3
"""Cloud Inventory module: Auto Scaling, EC2 and EKS queries and actions."""

from typing import Any, Callable, Iterator, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import AmbiguousResultError, CloudActionError, CloudQueryError, NotFoundError
from .models import Cluster, Group, Instance

AUTOSCALING_PAGE_SIZE = 100
INSTANCE_LOOKUP_BATCH_SIZE = 100

AWS_ERRORS = (ClientError, BotoCoreError)


class CloudInventory:
    """
    Stateless wrapper around the autoscaling, ec2 and eks boto3 clients.

    Every query returns fresh snapshots; nothing is cached between calls.
    Provider failures surface as CloudQueryError (reads) or CloudActionError (writes).
    """

    def __init__(self, autoscaling_client: Any, ec2_client: Any, eks_client: Any, printer: Optional[Any] = None) -> None:
        """
        Initialize CloudInventory with boto3 clients.

        Args:
            autoscaling_client: boto3 "autoscaling" client
            ec2_client: boto3 "ec2" client
            eks_client: boto3 "eks" client
            printer: PrintManager instance for formatted output
        """
        self.autoscaling = autoscaling_client
        self.ec2 = ec2_client
        self.eks = eks_client
        self.printer = printer

    @classmethod
    def from_session(cls, session: Optional[boto3.session.Session] = None, printer: Optional[Any] = None) -> "CloudInventory":
        """Create the three clients from one boto3 session (default credentials chain if None)."""
        session = session or boto3.session.Session()
        return cls(
            autoscaling_client=session.client("autoscaling"),
            ec2_client=session.client("ec2"),
            eks_client=session.client("eks"),
            printer=printer,
        )

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _paginate(self, client: Any, operation: str, **kwargs: Any) -> Iterator[dict]:
        """Yield every page of a paginated operation, mapping AWS failures to CloudQueryError."""
        try:
            for page in client.get_paginator(operation).paginate(**kwargs):
                yield page
        except AWS_ERRORS as e:
            raise CloudQueryError(f"{operation} failed: {e}") from e

    def _query(self, call: Callable[..., dict], operation: str, **kwargs: Any) -> dict:
        try:
            return call(**kwargs)
        except AWS_ERRORS as e:
            raise CloudQueryError(f"{operation} failed: {e}") from e

    def _describe_instances(self, filters: List[dict], group_name: Optional[str] = None) -> List[Instance]:
        instances = []
        for page in self._paginate(self.ec2, "describe_instances", Filters=filters):
            for reservation in page.get("Reservations", []):
                for data in reservation.get("Instances", []):
                    instances.append(Instance.from_ec2(data, group_name=group_name))
        return instances

    # -------------------------------------------------------------------------
    # Auto Scaling Groups
    # -------------------------------------------------------------------------

    def list_groups(self) -> List[Group]:
        """
        List every Auto Scaling Group visible to the current credentials.

        Returns:
            list[Group]: All groups, across every page

        Raises:
            CloudQueryError: If any page fails
        """
        groups = []
        pages = self._paginate(
            self.autoscaling,
            "describe_auto_scaling_groups",
            PaginationConfig={"PageSize": AUTOSCALING_PAGE_SIZE},
        )
        for page in pages:
            groups.extend(Group.from_autoscaling(data) for data in page.get("AutoScalingGroups", []))
        return groups

    def describe_group(self, name: str) -> Group:
        """
        Describe exactly one Auto Scaling Group by name.

        Raises:
            NotFoundError: If no group has this name
            AmbiguousResultError: If more than one group is returned
            CloudQueryError: If the API call fails
        """
        response = self._query(
            self.autoscaling.describe_auto_scaling_groups,
            "describe_auto_scaling_groups",
            AutoScalingGroupNames=[name],
        )
        groups = response.get("AutoScalingGroups", [])
        message = f"expected exactly 1 ASG description for '{name}' got {len(groups)}"
        if not groups:
            raise NotFoundError(message)
        if len(groups) > 1:
            raise AmbiguousResultError(message)
        return Group.from_autoscaling(groups[0])

    def list_instances_for_group(self, group: Group) -> List[Instance]:
        """
        Describe every EC2 instance that is a member of the group.

        Instance IDs are looked up in batches; no particular order is preserved.

        Args:
            group: Group whose members should be described

        Returns:
            list[Instance]: Member instances (empty for a group with no members)
        """
        instances: List[Instance] = []
        ids = list(group.instance_ids)
        for start in range(0, len(ids), INSTANCE_LOOKUP_BATCH_SIZE):
            batch = ids[start : start + INSTANCE_LOOKUP_BATCH_SIZE]
            instances.extend(
                self._describe_instances([{"Name": "instance-id", "Values": batch}], group_name=group.name)
            )
        return instances

    def find_group_owning_instance(self, instance_id: str) -> Group:
        """
        Find the Auto Scaling Group currently managing an instance.

        Raises:
            NotFoundError: If no group manages the instance
        """
        group_name = None
        for page in self._paginate(self.autoscaling, "describe_auto_scaling_instances", InstanceIds=[instance_id]):
            for entry in page.get("AutoScalingInstances", []):
                group_name = entry.get("AutoScalingGroupName")
                break
            if group_name:
                break

        if not group_name:
            raise NotFoundError(f"{instance_id}: No matching ASG could be found")
        return self.describe_group(group_name)

    # -------------------------------------------------------------------------
    # EC2 instances
    # -------------------------------------------------------------------------

    def find_instance_by_internal_name(self, name: str) -> Instance:
        """
        Find the instance whose private DNS name matches.

        Raises:
            NotFoundError: If no instance matches
            AmbiguousResultError: If more than one instance matches
        """
        instances = self._describe_instances([{"Name": "network-interface.private-dns-name", "Values": [name]}])
        if not instances:
            raise NotFoundError(f"{name}: No matching instance could be found")
        if len(instances) > 1:
            ids = ", ".join(i.instance_id for i in instances)
            raise AmbiguousResultError(f"{name}: expected exactly 1 instance, got {len(instances)} ({ids})")

        instance = instances[0]
        if self.printer:
            self.printer.print_info(f"Internal DNS '{name}' is instance ID '{instance.instance_id}'")
        return instance

    def detach(self, group_id: str, instance_id: str, decrement_desired_capacity: bool) -> None:
        """
        Detach an instance from its Auto Scaling Group.

        Args:
            group_id: Name of the Auto Scaling Group
            instance_id: Instance to detach
            decrement_desired_capacity: True when the node is removed for good; False lets
                the group launch a replacement to refill its desired capacity

        Raises:
            CloudActionError: If the detach is rejected
        """
        if self.printer:
            self.printer.print_info(f"Detaching instance '{instance_id}' from ASG '{group_id}'...")
        try:
            self.autoscaling.detach_instances(
                InstanceIds=[instance_id],
                AutoScalingGroupName=group_id,
                ShouldDecrementDesiredCapacity=decrement_desired_capacity,
            )
        except AWS_ERRORS as e:
            raise CloudActionError(f"Failed to detach instance '{instance_id}' from ASG '{group_id}': {e}") from e
        if self.printer:
            self.printer.print_success(f"Instance '{instance_id}' detached.")

    def terminate(self, instance_id: str) -> None:
        """
        Request termination of an instance. Irreversible; the shutdown itself is not awaited.

        Raises:
            CloudActionError: If the request is rejected
        """
        if self.printer:
            self.printer.print_info(f"Terminating instance '{instance_id}'...")
        try:
            self.ec2.terminate_instances(InstanceIds=[instance_id])
        except AWS_ERRORS as e:
            raise CloudActionError(f"Failed to terminate instance '{instance_id}': {e}") from e
        if self.printer:
            self.printer.print_success(f"Instance '{instance_id}' successfully terminated.")

    # -------------------------------------------------------------------------
    # EKS clusters
    # -------------------------------------------------------------------------

    def describe_managed_cluster(self, name: str) -> Cluster:
        response = self._query(self.eks.describe_cluster, "describe_cluster", name=name)
        data = response["cluster"]
        return Cluster(name=data["name"], endpoint=data.get("endpoint", ""))

    def find_managed_cluster_by_endpoint(self, url: str) -> Cluster:
        """
        Find the EKS cluster whose API endpoint equals url.

        Raises:
            NotFoundError: If no visible cluster has this endpoint
        """
        for page in self._paginate(self.eks, "list_clusters"):
            for name in page.get("clusters", []):
                cluster = self.describe_managed_cluster(name)
                if cluster.endpoint == url:
                    return cluster
        raise NotFoundError(f"unable to find cluster with URL {url}")
