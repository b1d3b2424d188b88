"""
Pytest Configuration and Fixtures

This module provides:
- Timestamped result file generation
- Shared context, store and tracker fixtures
- Test category organization
"""

import pytest
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any
from unittest.mock import Mock

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tests.test_config import (
    CONFIG, EXPECTED, TEST_DATA, MESSAGES, TEST_CATEGORIES,
    get_context, get_interest_vector_data,
)


# =============================================================================
# TEST RESULT FILE CONFIGURATION
# =============================================================================

RESULTS_DIR = PROJECT_ROOT / "test_results"


def get_result_filename() -> str:
    """Generate timestamped result filename."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"test_results_{timestamp}.txt"


# =============================================================================
# PYTEST HOOKS FOR CUSTOM OUTPUT
# =============================================================================

class TestResultCollector:
    """Collects test results for formatted output."""

    __test__ = False

    def __init__(self):
        self.results: List[Dict[str, Any]] = []
        self.start_time: datetime = None
        self.end_time: datetime = None

    def add_result(self, nodeid: str, outcome: str, duration: float, message: str = ""):
        filename = nodeid.split("::")[0].split("/")[-1]
        self.results.append({
            "nodeid": nodeid,
            "category": filename.replace("test_", "").replace(".py", ""),
            "name": nodeid.split("::")[-1].replace("test_", "").replace("_", " ").title(),
            "outcome": outcome,
            "duration": duration,
            "message": message,
        })

    def by_category(self) -> Dict[str, List[Dict[str, Any]]]:
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for result in self.results:
            grouped.setdefault(result["category"], []).append(result)
        return grouped

    def get_summary(self) -> Dict[str, int]:
        """Get test result summary."""
        outcomes = [r["outcome"] for r in self.results]
        return {
            "total": len(outcomes),
            "passed": outcomes.count("passed"),
            "failed": outcomes.count("failed"),
            "skipped": outcomes.count("skipped"),
        }


# Global collector instance
_collector = TestResultCollector()


def pytest_configure(config):
    """Register custom markers and start the collector."""
    for category in TEST_CATEGORIES:
        config.addinivalue_line("markers", f"{category}: {TEST_CATEGORIES[category]['name']} tests")

    _collector.start_time = datetime.now()
    RESULTS_DIR.mkdir(exist_ok=True)


def pytest_runtest_logreport(report):
    """Called after each test phase."""
    if report.when == "call":
        _collector.add_result(
            nodeid=report.nodeid,
            outcome=report.outcome,
            duration=report.duration,
            message=str(report.longrepr) if report.longrepr else "",
        )


def pytest_sessionfinish(session, exitstatus):
    """Called after all tests complete."""
    _collector.end_time = datetime.now()

    filepath = RESULTS_DIR / get_result_filename()
    filepath.write_text(generate_formatted_report(_collector), encoding="utf-8")

    summary = _collector.get_summary()
    print("\n" + "=" * 60)
    print("TEST RUN COMPLETE")
    print("=" * 60)
    print(f"Total: {summary['total']} | Passed: {summary['passed']} | Failed: {summary['failed']} | Skipped: {summary['skipped']}")
    print(f"📄 Test results saved to: {filepath}")
    print("=" * 60)


def generate_formatted_report(collector: TestResultCollector) -> str:
    """Generate a formatted test report."""
    summary = collector.get_summary()
    lines = [
        "=" * 80,
        "CARE DIGEST - TEST RESULTS REPORT",
        "=" * 80,
        "",
        f"Run Date:     {collector.start_time.strftime('%Y-%m-%d %H:%M:%S')}",
    ]

    if collector.end_time:
        duration = (collector.end_time - collector.start_time).total_seconds()
        lines.append(f"Duration:     {duration:.2f} seconds")

    lines.extend([
        "",
        f"Total Tests:  {summary['total']}",
        f"Passed:       {summary['passed']} ✓",
        f"Failed:       {summary['failed']} ✗",
        f"Skipped:      {summary['skipped']} ○",
        f"Pass Rate:    {(summary['passed'] / max(summary['total'], 1) * 100):.1f}%",
        "",
    ])

    for category, results in sorted(collector.by_category().items()):
        info = TEST_CATEGORIES.get(category, {
            "name": category.replace("_", " ").title(),
            "description": "Test category",
            "protects_against": [],
        })
        passed = sum(1 for r in results if r["outcome"] == "passed")

        lines.append(f"┌{'─' * 78}┐")
        lines.append(f"│ {info['name']:<76} │")
        lines.append(f"│ {info['description']:<76} │")
        lines.append(f"│ {f'Tests: {passed}/{len(results)} passed':<76} │")
        lines.append(f"└{'─' * 78}┘")

        for protection in info.get("protects_against", []):
            lines.append(f"    • {protection}")

        for result in results:
            status = {"passed": "✓", "failed": "✗"}.get(result["outcome"], "○")
            lines.append(f"    {status} {result['name']:<55} ({result['duration'] * 1000:.0f}ms)")
            if result["outcome"] == "failed":
                for msg_line in result["message"].split("\n")[:3]:
                    if msg_line.strip():
                        lines.append(f"      └─ {msg_line[:70]}")
        lines.append("")

    lines.extend(["=" * 80, "END OF REPORT", "=" * 80])
    return "\n".join(lines)


# =============================================================================
# SHARED FIXTURES
# =============================================================================

@pytest.fixture
def expected_values():
    """Provide access to expected values."""
    return EXPECTED


@pytest.fixture
def test_data():
    """Provide access to test data."""
    return TEST_DATA


@pytest.fixture
def quiet_context():
    """Snapshot of a day with no signals."""
    from caredigest.models import ContextSnapshot
    return ContextSnapshot.from_dict(get_context("quiet"))


@pytest.fixture
def incident_sickness_context():
    """Snapshot with a daily incident and sickness and nothing else."""
    from caredigest.models import ContextSnapshot
    return ContextSnapshot.from_dict(get_context("incident_sickness"))


@pytest.fixture
def busy_context():
    """Snapshot with every section populated."""
    from caredigest.models import ContextSnapshot
    return ContextSnapshot.from_dict(get_context("busy"))


@pytest.fixture
def interest_vector():
    """The stored interest vector for user-1 / child-1."""
    from caredigest.models import InterestVector
    return InterestVector.from_dict(get_interest_vector_data())


@pytest.fixture
def memory_store():
    """Provide an empty in-memory interest store."""
    from caredigest.storage import InMemoryInterestStore
    return InMemoryInterestStore()


@pytest.fixture
def tracker(memory_store):
    """Provide an interest tracker over the in-memory store."""
    from caredigest.interest import InterestTracker
    return InterestTracker(memory_store)


@pytest.fixture
def mock_store():
    """Provide a mock interest store with nothing stored."""
    from caredigest.storage.base import InterestStore

    store = Mock(spec=InterestStore)
    store.name = "mock_store"
    store.load.return_value = None
    return store


@pytest.fixture
def temp_output_dir(tmp_path):
    """Provide a temporary output directory."""
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def context_file(tmp_path):
    """Write a named context document to a JSON file and return its path."""
    import json

    def _write(name: str = "busy", **overrides) -> str:
        path = tmp_path / f"{name}.json"
        path.write_text(json.dumps(get_context(name, **overrides)), encoding="utf-8")
        return str(path)

    return _write
