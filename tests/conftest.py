"""Pytest configuration for tests.

Tests import from the installed jsonsrt package; no sys.path hacks.
"""

import pytest

from jsonsrt.kernel.parser import parse


def pytest_addoption(parser):
    """Add gated perf test option."""
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance sentinel benchmarks (gated)."
    )


def pytest_collection_modifyitems(config, items):
    """Skip perf-marked tests unless --run-perf is set."""
    if config.getoption("--run-perf"):
        return
    skip_perf = pytest.mark.skip(reason="perf tests gated; pass --run-perf")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)


@pytest.fixture
def write_json(tmp_path):
    """Write raw JSON text to a file under tmp_path and return its path."""
    def _write(name: str, text: str):
        path = tmp_path / name
        path.write_bytes(text.encode("utf-8"))
        return path
    return _write


@pytest.fixture
def sample_tree():
    """A small document with nested objects, arrays and verbatim numbers."""
    return parse('{"z": [3, 1, {"b": 1.50, "a": null}], "a": {"y": true, "x": "s"}, "m": 1e10}')
