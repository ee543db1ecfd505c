#!/usr/bin/env python3
"""
Print Manager module for the EKS Auto Scaling Group rotation tool.

Everything an operator sees during a rotation run goes through the global
`printer`: per-instance step numbers, poll waits, AWS/kubectl actions and the
final runtime. Errors go to stderr so a failed run can be told apart in logs.
"""

import sys

# Global debug flag, set by --debug; echoes every kubectl invocation
DEBUG_MODE = False


class PrintManager:
    """Manages all output formatting and printing for a rotation run"""

    @staticmethod
    def print_header(message):
        """Print the banner that opens a run (group rotation, node rotation or removal)"""
        print(f"\n{'=' * 60}")
        print(f" {message.upper()}")
        print(f"{'=' * 60}")

    @staticmethod
    def print_info(message):
        """Print progress: batch sizes, ownership matches, poll waits"""
        print(f"    [INFO]  {message}")

    @staticmethod
    def print_success(message):
        """Print a completed action (cordoned, detached, node joined, terminated)"""
        print(f"    [✓]     {message}")

    @staticmethod
    def print_warning(message):
        """Print warning message, e.g. a retried kubectl call or a received signal"""
        print(f"    [⚠️]     {message}")

    @staticmethod
    def print_error(message):
        """Print error message to stderr"""
        print(f"    [✗]     {message}", file=sys.stderr)

    @staticmethod
    def print_step(step_num, total_steps, message):
        """Print one numbered step of an instance's rotation ([3/7] ...)"""
        print(f"[{step_num}/{total_steps}] {message}")

    @staticmethod
    def print_dry_run(message):
        """Print the cordon/detach/drain/terminate that --dryrun suppressed"""
        print(f"    [DRY RUN] {message}")

    @staticmethod
    def print_action(message):
        """Print the kubectl command being executed (only in debug mode)"""
        if DEBUG_MODE:
            print(f"    [ACTION] {message}")


# Create a global print manager instance for convenience
printer = PrintManager()
