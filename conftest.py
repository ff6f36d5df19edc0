"""
Global pytest configuration for jctl

Tests marked ``integration`` validate real journey files on disk and are
skipped unless ``--integration`` is given. ``--journeys-dir`` points them
at a directory other than the one named in the engine config.
"""

import pytest

def pytest_addoption(parser):
    """Add journey integration options to pytest"""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run only the tests that validate journey files on disk"
    )
    parser.addoption(
        "--journeys-dir",
        default=None,
        help="journeys directory for integration tests (default: engine config journeys_dir)"
    )

def pytest_configure(config):
    config.addinivalue_line("markers", "integration: validates journey files on disk")

def pytest_collection_modifyitems(config, items):
    """Run either the integration tests or the unit tests, never both"""
    if config.getoption("--integration"):
        skip_unit = pytest.mark.skip(reason="running journey integration tests only")
        for item in items:
            if "integration" not in item.keywords:
                item.add_marker(skip_unit)
    else:
        skip_integration = pytest.mark.skip(reason="use --integration to validate journey files on disk")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)

@pytest.fixture
def journeys_dir_option(request):
    """Value of --journeys-dir, or None"""
    return request.config.getoption("--journeys-dir")
