"""Root conftest -- ``--run-slow`` flag (or ``DOCSBRIDGE_RUN_SLOW=1``)."""

from __future__ import annotations

import os

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Include tests marked @pytest.mark.slow, e.g. the full 20s DocsBot timeout.",
    )


def _run_slow(config) -> bool:
    return config.getoption("--run-slow") or os.getenv("DOCSBRIDGE_RUN_SLOW") == "1"


def pytest_collection_modifyitems(config, items):
    if _run_slow(config):
        return
    skip_slow = pytest.mark.skip(reason="slow test -- pass --run-slow to include")
    for item in items:
        if item.get_closest_marker("slow"):
            item.add_marker(skip_slow)
