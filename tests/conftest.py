import os
from pathlib import Path

import pytest

# Test layers, keyed by the directory their modules live in
LAYER_MARKERS = {
    "domain": pytest.mark.domain,
    "application": pytest.mark.application,
    "bdd": pytest.mark.application,
    "integration": pytest.mark.integration,
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="domain.toml environment overlay to run tests against",
    )


def pytest_configure(config):
    """Select the domain.toml overlay before any domain module is imported."""
    os.environ["PROTEAN_ENV"] = config.option.env


def pytest_collection_modifyitems(config, items):
    """Mark each test with its layer so runs can be narrowed with ``-m``."""
    for item in items:
        layer = next((part for part in Path(item.fspath).parts if part in LAYER_MARKERS), None)
        if layer is None:
            continue

        item.add_marker(LAYER_MARKERS[layer])
        if layer == "integration" and item.get_closest_marker("fast") is None:
            item.add_marker(pytest.mark.slow)
