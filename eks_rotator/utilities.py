#!/usr/bin/env python3
"""Utilities module for the EKS Auto Scaling Group rotation tool."""

import json
import subprocess
import time


def _is_retryable_error(stderr_text):
    """Check if the error is worth retrying."""
    if not stderr_text:
        return False

    # Common API server connectivity issues that warrant retry
    retryable_patterns = [
        "keepalive ping failed",
        "connection refused",
        "timeout",
        "connection reset",
        "temporary failure in name resolution",
        "service unavailable",
        "internal server error",
        "too many requests",
        "server is currently unable to handle the request",
        "i/o timeout",
        "tls handshake timeout",
        "context deadline exceeded",
    ]

    stderr_lower = stderr_text.lower()
    return any(pattern in stderr_lower for pattern in retryable_patterns)


def _log_retry_attempt(printer, attempt, max_retries, exec_command):
    """Log retry attempt information."""
    if not printer:
        return
    if attempt == 0:
        printer.print_action(f"Executing kubectl command: {' '.join(exec_command)}")
    else:
        printer.print_info(f"Retry attempt {attempt}/{max_retries}: {' '.join(exec_command)}")


def _handle_command_success(result, json_output, attempt, printer):
    """Handle successful command execution."""
    if attempt > 0 and printer:
        printer.print_success(f"Command succeeded on retry attempt {attempt}")
    if json_output:
        return json.loads(result.stdout)
    return result.stdout.strip()


def _handle_command_failure(result, attempt, max_retries, retry_delay, printer):
    """Handle command failure and determine if retry should occur."""
    stderr = result.stderr
    if attempt < max_retries and _is_retryable_error(stderr):
        if printer:
            printer.print_warning(f"Command failed with retryable error, waiting {retry_delay}s before retry...")
            printer.print_info(f"Error: {stderr.strip()}")
        time.sleep(retry_delay)
        return True, stderr  # Should retry
    else:
        if printer:
            printer.print_error(f"Command failed: {stderr.strip() if stderr else 'no error output'}")
        return False, stderr


def execute_kubectl_command(
    command, json_output=False, printer=None, max_retries=3, retry_delay=2, binary="kubectl", timeout=60
):
    """
    Execute a kubectl command with retry logic for API server connectivity failures.

    Args:
        command: List of command arguments to execute (excluding the kubectl binary)
        json_output: If True, parse stdout as JSON
        printer: Printer instance for output
        max_retries: Maximum number of retry attempts (default: 3)
        retry_delay: Seconds to wait between retries, grown 1.5x per retry (default: 2)
        binary: kubectl executable to run (default: "kubectl")
        timeout: Seconds before a single attempt is killed and counted as retryable (default: 60)

    Returns:
        str or dict: Command output as string, or parsed JSON dict if json_output=True.
                    Returns None on command failure after all retries.
    """
    exec_command = [binary] + list(command)
    last_error = None

    for attempt in range(max_retries + 1):  # +1 for the initial attempt
        try:
            _log_retry_attempt(printer, attempt, max_retries, exec_command)
            result = subprocess.run(exec_command, capture_output=True, text=True, timeout=timeout)

            if result.returncode == 0:
                return _handle_command_success(result, json_output, attempt, printer)

            should_retry, last_error = _handle_command_failure(result, attempt, max_retries, retry_delay, printer)
            if not should_retry:
                return None
            retry_delay *= 1.5

        except subprocess.TimeoutExpired:
            last_error = f"Command timed out after {timeout} seconds"
            if attempt < max_retries:
                if printer:
                    printer.print_warning(f"Command timed out, waiting {retry_delay}s before retry...")
                time.sleep(retry_delay)
                retry_delay *= 1.5
                continue
            if printer:
                printer.print_error(last_error)
            return None
        except json.JSONDecodeError as e:
            if printer:
                printer.print_error(f"Failed to parse JSON output: {e}")
            return None
        except OSError as e:
            # Missing or non-executable binary will not fix itself between attempts
            if printer:
                printer.print_error(f"Unable to run {binary}: {e}")
            return None

    if printer:
        printer.print_error(f"Command failed after {max_retries} retries. Last error: {last_error}")
    return None


def format_runtime(start_time, end_time):
    """
    Format runtime duration in a human-readable way.

    Args:
        start_time (float): Start timestamp from time.time()
        end_time (float): End timestamp from time.time()

    Returns:
        str: Formatted runtime string (e.g., "5m 23s", "1h 15m 30s")
    """
    total_seconds = int(end_time - start_time)

    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    elif minutes > 0:
        return f"{minutes}m {seconds}s"
    else:
        return f"{seconds}s"


def format_duration(seconds):
    """Format a poll interval for log messages ("30s", "1m30s", "0.5s")."""
    if not float(seconds).is_integer():
        return f"{seconds}s"
    seconds = int(seconds)
    if seconds >= 60:
        minutes, remainder = divmod(seconds, 60)
        return f"{minutes}m{remainder}s"
    return f"{seconds}s"
