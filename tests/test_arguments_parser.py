#!/usr/bin/env python3
"""
Pytest tests for the arguments_parser module.
"""

import os
import sys

import pytest

# Add parent directory to path for module imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from eks_rotator import print_manager  # noqa: E402
from eks_rotator.arguments_parser import ArgumentsParser  # noqa: E402


@pytest.fixture(autouse=True)
def reset_debug_mode():
    """Parsing sets the global debug flag; restore it after each test."""
    original = print_manager.DEBUG_MODE
    yield
    print_manager.DEBUG_MODE = original


class TestGroupArguments:
    """Test cases for rotate-eks-asg arguments."""

    def test_defaults(self) -> None:
        args = ArgumentsParser.parse_group_arguments([])

        assert args.groups == []
        assert args.limit == 0
        assert args.dryrun is False
        assert args.config is None
        assert args.timeout is None
        assert args.debug is False

    def test_groups_and_options(self) -> None:
        args = ArgumentsParser.parse_group_arguments(
            ["asg-a", "asg-b", "--limit", "2", "--dryrun", "--config", "rotation.yaml", "--timeout", "3600"]
        )

        assert args.groups == ["asg-a", "asg-b"]
        assert args.limit == 2
        assert args.dryrun is True
        assert args.config == "rotation.yaml"
        assert args.timeout == 3600.0

    @pytest.mark.parametrize("argv", [["--limit", "-1"], ["--limit", "many"], ["--timeout", "0"]])
    def test_rejects_invalid_values(self, argv) -> None:
        with pytest.raises(SystemExit):
            ArgumentsParser.parse_group_arguments(argv)

    def test_debug_sets_global_flag(self) -> None:
        ArgumentsParser.parse_group_arguments(["--debug"])

        assert print_manager.DEBUG_MODE is True


class TestInstanceArguments:
    """Test cases for rotate-eks-instance arguments."""

    def test_name_is_required(self) -> None:
        with pytest.raises(SystemExit):
            ArgumentsParser.parse_instance_arguments([])

    def test_remove(self) -> None:
        args = ArgumentsParser.parse_instance_arguments(["ip-10-0-1-5.ec2.internal", "--remove"])

        assert args.name == "ip-10-0-1-5.ec2.internal"
        assert args.remove is True

    def test_limit_is_not_accepted(self) -> None:
        with pytest.raises(SystemExit):
            ArgumentsParser.parse_instance_arguments(["ip-10-0-1-5.ec2.internal", "--limit", "1"])


class TestSettingsOverrides:
    """Test cases for mapping options onto settings fields."""

    def test_maps_common_options(self) -> None:
        args = ArgumentsParser.parse_group_arguments(
            ["--context", "prod", "--kubeconfig", "/tmp/kc", "--region", "us-west-2", "--profile", "ops", "--timeout", "60"]
        )

        assert ArgumentsParser.settings_overrides(args) == {
            "kube_context": "prod",
            "kubeconfig": "/tmp/kc",
            "aws_region": "us-west-2",
            "aws_profile": "ops",
            "deadline": 60.0,
        }

    def test_unset_options_are_none(self) -> None:
        overrides = ArgumentsParser.settings_overrides(ArgumentsParser.parse_group_arguments([]))

        assert set(overrides.values()) == {None}
