#!/usr/bin/env python3
"""
EKS Auto Scaling Group Rotation Tool - Single Instance

Rotates one EKS node, found by its internal DNS name. With --remove the node is
taken out for good and its Auto Scaling Group shrinks by one instead of launching
a replacement.

Usage:
    rotate-eks-instance NAME [--remove] [--dryrun] [--config FILE] [--timeout SECONDS]
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
    Main function to rotate or remove a single instance.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        None (exits with status 1 on any rotation error)
    """
    args = ArgumentsParser.parse_instance_arguments(argv)
    start_time = time.time()

    if args.remove:
        printer.print_header("EKS Node Removal")
    else:
        printer.print_header("EKS Node Rotation")
    if args.dryrun:
        printer.print_warning("DRY RUN: no node will be cordoned, drained, detached or terminated")

    cancellation = CancellationSignal()
    install_signal_handlers(cancellation, printer=printer)

    try:
        settings = load_settings(args.config, ArgumentsParser.settings_overrides(args), printer=printer)
        if settings.deadline:
            cancellation.set_deadline(settings.deadline)

        orchestrator = build_rotation_orchestrator(settings, printer, dry_run=args.dryrun)
        orchestrator.rotate_by_internal_name(args.name, args.remove, cancellation)
    except RotationError as e:
        printer.print_error(str(e))
        printer.print_info(f"Runtime before exit: {format_runtime(start_time, time.time())}")
        sys.exit(1)
    finally:
        cancellation.clear_deadline()

    printer.print_success("Rotation complete")


if __name__ == "__main__":
    main()
