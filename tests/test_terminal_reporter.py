"""Tests for gotestshard.reporters.terminal."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from gotestshard.reporters.terminal import CLIReporter
from gotestshard.sharding.distributor import Shard


@pytest.fixture
def buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def reporter(buffer: io.StringIO) -> CLIReporter:
    return CLIReporter(Console(file=buffer, width=120, color_system=None))


class TestMessages:
    def test_error_is_escaped(self, reporter: CLIReporter, buffer: io.StringIO) -> None:
        reporter.print_error("bad tag [linux]")
        assert "bad tag [linux]" in buffer.getvalue()

    def test_success(self, reporter: CLIReporter, buffer: io.StringIO) -> None:
        reporter.print_success("Configuration is valid!")
        assert "✓ Configuration is valid!" in buffer.getvalue()

    def test_warning_and_info(self, reporter: CLIReporter, buffer: io.StringIO) -> None:
        reporter.print_warning("careful")
        reporter.print_info("fyi")
        output = buffer.getvalue()
        assert "careful" in output
        assert "fyi" in output


class TestShardPlan:
    def test_table_rows(self, reporter: CLIReporter, buffer: io.StringIO) -> None:
        shards = [
            Shard(index=1, keys=["CartSuite"], size=3),
            Shard(index=2, keys=["OrderSuite", "TestTax"], size=5),
            Shard(index=3),
        ]
        reporter.print_shard_plan(shards, ["SlowSuite"], target=4)
        output = buffer.getvalue()
        assert "target 4 tests per shard" in output
        assert "OrderSuite, TestTax" in output
        assert "empty" in output
        assert "SlowSuite" in output
        assert "pinned" in output

    def test_many_keys_truncated(self, reporter: CLIReporter, buffer: io.StringIO) -> None:
        keys = [f"Test{i}" for i in range(9)]
        reporter.print_shard_plan([Shard(index=1, keys=keys, size=9)], [], target=9)
        assert "(+3 more)" in buffer.getvalue()
