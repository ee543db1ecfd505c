#!/usr/bin/env python3
"""Error types raised while rotating Auto Scaling Group instances."""


class RotationError(Exception):
    """Base class for every failure that aborts a rotation run"""


class ConfigurationError(RotationError):
    """Invalid configuration file or option value"""


class ExactlyOneError(RotationError):
    """A lookup expected exactly one result and did not get it"""


class NotFoundError(ExactlyOneError):
    """A required group, instance, node or managed cluster does not exist"""


class AmbiguousResultError(ExactlyOneError):
    """A lookup expected exactly one result and got more than one"""


class NoOwnedGroupsError(NotFoundError):
    """The current cluster owns no Auto Scaling Groups"""

    def __init__(self, cluster_name):
        self.cluster_name = cluster_name
        super().__init__(f"no ASGs found for cluster '{cluster_name}'")


class CloudQueryError(RotationError):
    """An AWS describe/list call failed, including pagination failures"""


class CloudActionError(RotationError):
    """An AWS mutating call (detach, terminate) was rejected or failed"""


class ClusterQueryError(RotationError):
    """Reading node state from the Kubernetes API failed"""


class ClusterActionError(RotationError):
    """A mutating kubectl call (cordon, drain) failed"""


class DrainError(ClusterActionError):
    """Drain exceeded its deadline or could not evict some workload"""


class CancellationError(RotationError):
    """The run was cancelled while waiting on a replacement node"""

    def __init__(self, reason="rotation cancelled"):
        self.reason = reason
        super().__init__(reason)
