"""Shared fixtures for the sky map tests."""

import json
from datetime import datetime, timezone

import pytest

from starmap.catalog import CatalogResource, NebulaRecord, StarRecord
from starmap.celestial import Observer


STAR_ENTRIES = [
    {"id": "11767", "ra": 37.9546, "dec": 89.2641, "mag": 1.97, "name": "Polaris", "bv": 0.64, "sp": "F7Ib"},
    {"id": "91262", "ra": 279.2347, "dec": 38.7837, "mag": 0.03, "name": "Vega", "bv": 0.00, "sp": "A0V"},
    {"id": "27989", "ra": 88.7929, "dec": 7.4070, "mag": 0.50, "name": "Betelgeuse", "bv": 1.85, "sp": "M1Ia"},
    {"id": "123", "ra": 10.0, "dec": -20.0, "mag": 4.5, "name": None, "bv": None, "sp": None},
    {"id": "456", "ra": None, "dec": None, "mag": 3.0, "name": "No Position"},
    {"id": "789", "ra": 200.0, "dec": 10.0, "mag": 7.2, "name": "Too Faint"},
]

NEBULA_ENTRIES = [
    {"id": "M42", "ra": 83.8221, "dec": -5.3911, "mag": 4.0, "name": "Orion Nebula", "bv": -0.1, "sp": "HII"},
    {"id": "M31", "ra": 10.6847, "dec": 41.2688, "mag": 3.4, "name": "Andromeda Galaxy", "bv": 0.9, "sp": "Sb"},
    {"id": "M8", "ra": 270.9042, "dec": -24.3867, "mag": 6.0, "name": "Lagoon Nebula", "bv": None, "sp": None},
]


@pytest.fixture
def observation_time():
    return datetime(2024, 3, 20, 6, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def observer(observation_time):
    """Los Angeles, just before dawn on the March equinox."""
    return Observer(latitude=34.05, longitude=-118.24, timestamp=observation_time)


@pytest.fixture
def star_catalog_path(tmp_path):
    path = tmp_path / "stars.json"
    path.write_text(json.dumps(STAR_ENTRIES), encoding="utf-8")
    return path


@pytest.fixture
def nebula_catalog_path(tmp_path):
    path = tmp_path / "nebulae.json"
    path.write_text(json.dumps(NEBULA_ENTRIES), encoding="utf-8")
    return path


@pytest.fixture
def star_records():
    return (
        StarRecord(identifier="11767", ra=37.9546, dec=89.2641, mag=1.97, name="Polaris", bv=0.64, sp="F7Ib"),
        StarRecord(identifier="91262", ra=279.2347, dec=38.7837, mag=0.03, name="Vega", bv=0.0, sp="A0V"),
        StarRecord(identifier="27989", ra=88.7929, dec=7.4070, mag=0.50, name="Betelgeuse", bv=1.85, sp="M1Ia"),
    )


@pytest.fixture
def nebula_records():
    return (
        NebulaRecord(identifier="M42", ra=83.8221, dec=-5.3911, mag=4.0, name="Orion Nebula", bv=-0.1, sp="HII"),
    )


@pytest.fixture
def star_resource(star_records):
    return CatalogResource(lambda: star_records, name="star catalog")


@pytest.fixture
def nebula_resource(nebula_records):
    return CatalogResource(lambda: nebula_records, name="nebula catalog", required=False)
