from pathlib import Path

import pytest

# Test layer per directory under tests/storefront/
LAYER_MARKERS = {
    "domain": pytest.mark.domain,
    "application": pytest.mark.application,
    "integration": pytest.mark.integration,
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="PROTEAN_ENV overlay the storefront domain is initialized with",
    )


def pytest_collection_modifyitems(config, items):
    """Mark each test with its layer, and HTTP tests as slow unless marked fast."""
    for item in items:
        layer = Path(item.fspath).parent.name
        marker = LAYER_MARKERS.get(layer)
        if marker is None:
            continue

        item.add_marker(marker)
        if layer == "integration" and not item.get_closest_marker("fast"):
            item.add_marker(pytest.mark.slow)
