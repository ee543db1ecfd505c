#!/usr/bin/env python3
"""
EKS Auto Scaling Group Rotation Tool - Group Rotation

Rotates the instances of the named Auto Scaling Groups, oldest first. With no
group names, rotates every ASG owned by the cluster of the current kubeconfig context.

Usage:
    rotate-eks-asg [GROUP ...] [--dryrun] [--limit N] [--config FILE] [--timeout SECONDS]
"""

import sys
import time

from eks_rotator import (
    ArgumentsParser,
    CancellationSignal,
    RotationError,
    build_rotation_orchestrator,
    format_runtime,
    install_signal_handlers,
    load_settings,
    printer,
)


def main(argv=None):
    """
    Main function to rotate Auto Scaling Groups.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        None (exits with status 1 on any rotation error)
    """
    args = ArgumentsParser.parse_group_arguments(argv)
    start_time = time.time()

    printer.print_header("EKS Auto Scaling Group Rotation")
    if args.dryrun:
        printer.print_warning("DRY RUN: no node will be cordoned, drained, detached or terminated")

    cancellation = CancellationSignal()
    install_signal_handlers(cancellation, printer=printer)

    try:
        settings = load_settings(args.config, ArgumentsParser.settings_overrides(args), printer=printer)
        if settings.deadline:
            cancellation.set_deadline(settings.deadline)

        orchestrator = build_rotation_orchestrator(settings, printer, dry_run=args.dryrun, limit=args.limit)
        orchestrator.rotate_all(args.groups, cancellation)
    except RotationError as e:
        printer.print_error(str(e))
        printer.print_info(f"Runtime before exit: {format_runtime(start_time, time.time())}")
        sys.exit(1)
    finally:
        cancellation.clear_deadline()

    printer.print_success("Rotation complete")


if __name__ == "__main__":
    main()
