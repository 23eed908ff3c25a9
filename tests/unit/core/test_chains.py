"""Tests for chain identity helpers."""

import pytest

from chainflow.core.chains import (
    CUSTOM_CHAIN_STYLE,
    DEFAULT_TABLE_COLOR,
    OTHER_GROUP,
    chain_group,
    chain_style,
    is_builtin,
    is_jump_target,
    is_terminal_target,
    table_color,
)


class TestTargets:
    @pytest.mark.parametrize("target", ["ACCEPT", "drop", "Reject", "MASQUERADE", "LOG"])
    def test_terminal(self, target):
        assert is_terminal_target(target)
        assert not is_jump_target(target)

    @pytest.mark.parametrize("target", ["f2b-sshd", "KUBE-SERVICES", "OUTPUT"])
    def test_jump(self, target):
        assert is_jump_target(target)

    @pytest.mark.parametrize("target", ["", None])
    def test_empty_is_not_a_jump(self, target):
        assert not is_jump_target(target)


class TestChainGroup:
    @pytest.mark.parametrize(
        ("chain", "group"),
        [
            ("INPUT", "INPUT"),
            ("KUBE-SVC-ABC123", "KUBE"),
            ("DOCKER-USER", "DOCKER"),
            ("DOCKER", "DOCKER"),
            ("cali-fw-eth0", "CALICO"),
            ("f2b-sshd", "FAIL2BAN"),
            ("ufw6-before-input", "UFW"),
            ("ufw-user-input", "UFW"),
            ("ZONE_lan", "ZONE"),
            ("MY-CHAIN", "MY"),
            ("custom", OTHER_GROUP),
            ("LOGGING", OTHER_GROUP),
        ],
    )
    def test_groups(self, chain, group):
        assert chain_group(chain) == group


class TestStyles:
    def test_builtins_are_styled(self):
        assert is_builtin("FORWARD")
        assert chain_style("FORWARD").description.startswith("Traffic passing")

    def test_custom_chain_style(self):
        assert not is_builtin("forward")
        assert chain_style("f2b-sshd") == CUSTOM_CHAIN_STYLE

    def test_table_colors(self):
        assert table_color("nat") == "#10b981"
        assert table_color("unknown") == DEFAULT_TABLE_COLOR
