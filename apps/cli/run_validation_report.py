#!/usr/bin/env python3
"""
Run the analyticskit pytest suite and display a Rich summary table per suite.
"""
from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest
from rich import box
from rich.console import Console
from rich.table import Table

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class TestSuiteMeta:
    """Metadata needed to describe each logical test suite."""

    path: Path
    display_name: str
    suite_type: str  # "Unit" or "Integration"
    description: str


TEST_SUITES: List[TestSuiteMeta] = [
    TestSuiteMeta(
        path=Path("tests/core/gelf/test_serializer.py"),
        display_name="test_serializer.py",
        suite_type="Unit",
        description="Checks GELF documents byte-for-byte: GELF field order, additional field naming, nesting, truncation, rejected values.",
    ),
    TestSuiteMeta(
        path=Path("tests/core/gelf/test_config.py"),
        display_name="test_config.py",
        suite_type="Unit",
        description="Validates GelfConfig/GraylogSettings models and env-driven loading.",
    ),
    TestSuiteMeta(
        path=Path("tests/core/analytics/test_events.py"),
        display_name="test_events.py",
        suite_type="Unit",
        description="Exercises the event model, builder helpers, fingerprints and predefined event types.",
    ),
    TestSuiteMeta(
        path=Path("tests/core/analytics/test_timed_events.py"),
        display_name="test_timed_events.py",
        suite_type="Unit",
        description="Confirms timed-event start/finish bookkeeping, including racing end calls.",
    ),
    TestSuiteMeta(
        path=Path("tests/adapters/graylog/test_provider.py"),
        display_name="test_provider.py",
        suite_type="Integration",
        description="Drives the Graylog provider against a mocked GELF HTTP input, including timed events and transport failures.",
    ),
    TestSuiteMeta(
        path=Path("tests/apps/cli/test_validation_report.py"),
        display_name="test_validation_report.py",
        suite_type="Unit",
        description="Checks per-file outcome tallies and the rendered summary table of this report.",
    ),
]


@dataclass
class SuiteTally:
    passed: int = 0
    failed: int = 0
    errors: int = 0
    skipped: int = 0
    failed_tests: List[str] = field(default_factory=list)

    @property
    def executed(self) -> int:
        return self.passed + self.failed


class ResultCollector:
    """Pytest plugin that tallies outcomes per test file."""

    def __init__(self, root: Path):
        self.root = root
        self.tallies: Dict[str, SuiteTally] = {}

    def _key(self, raw_path: str) -> str:
        path_obj = Path(raw_path)
        if not path_obj.is_absolute():
            path_obj = (self.root / path_obj).resolve()
        try:
            return path_obj.relative_to(self.root).as_posix()
        except ValueError:
            return path_obj.as_posix()

    def pytest_runtest_logreport(self, report):  # type: ignore[override]
        """Hook invoked for each setup/call/teardown report."""
        tally = self.tallies.setdefault(self._key(report.location[0]), SuiteTally())
        if report.skipped:
            tally.skipped += 1
        elif report.when != "call":
            # Fixture failures surface outside the call phase.
            if report.failed:
                tally.errors += 1
                tally.failed_tests.append(report.location[2])
        elif report.passed:
            tally.passed += 1
        elif report.failed:
            tally.failed += 1
            tally.failed_tests.append(report.location[2])


def run_pytest(suites: List[TestSuiteMeta]) -> Tuple[int, Dict[str, SuiteTally]]:
    """Execute pytest once over the selected suites and return (exit_code, tallies)."""
    os.chdir(PROJECT_ROOT)
    collector = ResultCollector(PROJECT_ROOT)
    exit_code = pytest.main([suite.path.as_posix() for suite in suites] + ["-q"], plugins=[collector])
    return exit_code, collector.tallies


def _status(tally: Optional[SuiteTally]) -> str:
    if tally is None or tally.executed == 0:
        return "[yellow]Not run[/yellow]"
    if tally.failed or tally.errors:
        return "[red]Fail[/red]"
    return "[green]Pass[/green]"


def build_table(suites: List[TestSuiteMeta], tallies: Dict[str, SuiteTally]) -> Table:
    """Create a Rich table visualizing the collected results."""
    table = Table(title="analyticskit Validation Report", box=box.SIMPLE_HEAVY)
    table.add_column("Test Suite", style="bold", justify="left")
    table.add_column("Type", justify="center")
    table.add_column("Description", justify="left", overflow="fold")
    table.add_column("Status", justify="center")
    table.add_column("Count", justify="center")
    table.add_column("Failing", justify="left", overflow="fold")

    total_passed = total_executed = 0
    for suite in suites:
        tally = tallies.get(suite.path.as_posix())
        count_text = "-"
        failing = ""
        if tally is not None:
            total_passed += tally.passed
            total_executed += tally.executed
            count_text = f"{tally.passed}/{tally.executed} passed"
            if tally.skipped:
                count_text += f" (+{tally.skipped} skipped)"
            if tally.errors:
                count_text += f" ({tally.errors} errors)"
            failing = ", ".join(tally.failed_tests[:3])
        table.add_row(suite.display_name, suite.suite_type, suite.description, _status(tally), count_text, failing)

    table.caption = f"{total_passed}/{total_executed} tests passed"
    return table


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run the test suites and summarize them in a table.")
    parser.add_argument("--type", choices=["Unit", "Integration"], help="Only run suites of this type.")
    args = parser.parse_args(argv)

    suites = [suite for suite in TEST_SUITES if args.type is None or suite.suite_type == args.type]
    exit_code, tallies = run_pytest(suites)
    Console().print(build_table(suites, tallies))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
