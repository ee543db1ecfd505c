#!/usr/bin/env python3
"""Arguments Parser module for the EKS Auto Scaling Group rotation tool."""

import argparse

from . import print_manager


def _non_negative_int(value):
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be zero or greater, got {value}")
    return number


def _positive_float(value):
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero, got {value}")
    return number


class ArgumentsParser:
    """Handles command-line argument parsing for both rotation entry points"""

    @staticmethod
    def _add_common_arguments(parser):
        """Options shared by rotate-eks-asg and rotate-eks-instance"""
        parser.add_argument(
            "--dryrun",
            action="store_true",
            help="Don't actually rotate nodes, just print what would be rotated",
        )
        parser.add_argument(
            "--config",
            type=str,
            default=None,
            help="Path to a YAML file with rotation settings (poll intervals, drain timeout, ...)",
        )
        parser.add_argument(
            "--timeout",
            type=_positive_float,
            default=None,
            help="Cancel the run after this many seconds (default: no deadline)",
        )
        parser.add_argument(
            "--context",
            type=str,
            default=None,
            help="kubeconfig context to use (default: current context)",
        )
        parser.add_argument(
            "--kubeconfig",
            type=str,
            default=None,
            help="Path to the kubeconfig file (default: kubectl's default)",
        )
        parser.add_argument(
            "--region",
            type=str,
            default=None,
            help="AWS region (default: from the AWS shared config)",
        )
        parser.add_argument(
            "--profile",
            type=str,
            default=None,
            help="AWS profile (default: from the AWS credential chain)",
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug output (shows kubectl command execution details)",
        )

    @staticmethod
    def _finish(args):
        # Set global debug mode
        print_manager.DEBUG_MODE = args.debug
        return args

    @staticmethod
    def parse_group_arguments(argv=None):
        """
        Parse arguments for rotating whole Auto Scaling Groups.

        Args:
            argv: Argument list (default: sys.argv[1:])

        Returns:
            argparse.Namespace: Parsed arguments
        """
        parser = argparse.ArgumentParser(
            prog="rotate-eks-asg",
            description="Rotate the instances of EKS Auto Scaling Groups, oldest first",
        )
        parser.add_argument(
            "groups",
            nargs="*",
            help="EKS Auto Scaling Groups to rotate. Omit to rotate all ASGs for the current cluster",
        )
        parser.add_argument(
            "--limit",
            type=_non_negative_int,
            default=0,
            help="Only rotate [limit] oldest node(s) (default: 0, no limit)",
        )
        ArgumentsParser._add_common_arguments(parser)
        return ArgumentsParser._finish(parser.parse_args(argv))

    @staticmethod
    def parse_instance_arguments(argv=None):
        """
        Parse arguments for rotating a single instance.

        Args:
            argv: Argument list (default: sys.argv[1:])

        Returns:
            argparse.Namespace: Parsed arguments
        """
        parser = argparse.ArgumentParser(
            prog="rotate-eks-instance",
            description="Rotate or remove a single EKS node by its internal DNS name",
        )
        parser.add_argument("name", help="Internal DNS of EKS instance to rotate")
        parser.add_argument(
            "--remove",
            action="store_true",
            help="Remove instance, don't provision a replacement",
        )
        ArgumentsParser._add_common_arguments(parser)
        return ArgumentsParser._finish(parser.parse_args(argv))

    @staticmethod
    def settings_overrides(args):
        """Map parsed options onto RotationSettings field names."""
        return {
            "kube_context": args.context,
            "kubeconfig": args.kubeconfig,
            "aws_region": args.region,
            "aws_profile": args.profile,
            "deadline": args.timeout,
        }
