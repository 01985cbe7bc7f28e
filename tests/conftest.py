"""
Pytest configuration shared by the unit and smoke tests.
"""

import os

import pytest


def smoke_tests_enabled() -> bool:
    """Smoke tests provision billable AWS resources and only run when asked to."""
    return os.getenv("RUN_SMOKE_TESTS", "").lower() in ("1", "true", "yes")


def pytest_collection_modifyitems(config, items):
    if smoke_tests_enabled():
        return

    skip_smoke = pytest.mark.skip(reason="set RUN_SMOKE_TESTS=1 to provision AWS infrastructure")
    for item in items:
        if "smoke" in item.keywords:
            item.add_marker(skip_smoke)
