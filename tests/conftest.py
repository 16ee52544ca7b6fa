"""
Pytest configuration for derivation chain tests.
"""
import pytest

from derivchain.core.domain.timeseries import LocationDescription
from tests.fakes import FakeMetadataSource, make_description, make_processor


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require a live AQUARIUS server"
    )


@pytest.fixture
def scenario_processors():
    """R is computed from A; both live at the same station."""
    return [make_processor("R", ["A"])]


@pytest.fixture
def scenario_metadata():
    return FakeMetadataSource(
        descriptions=[make_description("R"), make_description("A")],
        site_series={"STATION-1": ["R", "A"]},
        locations={"STATION-1": LocationDescription(identifier="STATION-1", name="Muddy Creek")},
    )
