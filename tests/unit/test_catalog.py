"""Unit tests for catalog ingestion and visual attributes."""

import json
import logging
from unittest.mock import MagicMock

import numpy as np
import pytest

from starmap.catalog import (
    DEFAULT_NEBULA_CATALOG,
    DEFAULT_STAR_CATALOG,
    NEBULA_DEFAULT_COLOR,
    CatalogError,
    CatalogResource,
    MalformedResourceError,
    MissingResourceError,
    StarRecord,
    build_nebulae,
    build_star,
    build_stars,
    generate_random_stars,
    magnitude_to_brightness,
    nebula_color_from_bv,
    nebula_size,
    parse_nebula_records,
    parse_star_records,
    read_json_records,
    star_color_from_bv,
    star_size,
)
from starmap.objects import WHITE, ObjectKind

# ---------------------------------------------------------------------------
# Reading and parsing
# ---------------------------------------------------------------------------


def test_read_missing_file(tmp_path):
    with pytest.raises(MissingResourceError):
        read_json_records(tmp_path / "nope.json")


def test_read_malformed_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(MalformedResourceError):
        read_json_records(path)


def test_read_requires_array(tmp_path):
    path = tmp_path / "obj.json"
    path.write_text(json.dumps({"stars": []}), encoding="utf-8")
    with pytest.raises(MalformedResourceError):
        read_json_records(path)


def test_parse_stars_filters_faint_and_unpositioned(star_catalog_path):
    records = parse_star_records(read_json_records(star_catalog_path))
    names = [r.name for r in records]
    assert names == ["Polaris", "Vega", "Betelgeuse", None]
    assert records[0].identifier == "11767"
    assert records[3].bv is None


def test_parse_stars_magnitude_limit():
    data = [{"id": "1", "ra": 0, "dec": 0, "mag": 3.0}, {"id": "2", "ra": 0, "dec": 0, "mag": 3.5}]
    assert [r.identifier for r in parse_star_records(data, max_magnitude=3.0)] == ["1"]


@pytest.mark.parametrize("entry", [
    {"id": "1", "ra": 0, "dec": 0},                     # no magnitude
    {"ra": 0, "dec": 0, "mag": 1.0},                    # no id
    {"id": "1", "ra": "east", "dec": 0, "mag": 1.0},    # not a number
    {"id": "1", "ra": 0, "dec": 120, "mag": 1.0},       # declination out of range
])
def test_parse_stars_malformed(entry):
    with pytest.raises(MalformedResourceError):
        parse_star_records([entry])


def test_parse_nebulae(nebula_catalog_path):
    records = parse_nebula_records(read_json_records(nebula_catalog_path))
    assert [r.identifier for r in records] == ["M42", "M31", "M8"]
    assert records[2].bv is None


def test_parse_nebula_requires_name():
    with pytest.raises(MalformedResourceError):
        parse_nebula_records([{"id": "M1", "ra": 83.6, "dec": 22.0, "mag": 8.4}])


# ---------------------------------------------------------------------------
# CatalogResource
# ---------------------------------------------------------------------------


def test_resource_loads_once(star_records):
    loader = MagicMock(return_value=star_records)
    resource = CatalogResource(loader)
    assert not resource.is_loaded

    first = resource.records()
    second = resource.records()

    assert first is second
    assert resource.is_loaded
    loader.assert_called_once_with()


def test_required_resource_raises(tmp_path):
    resource = CatalogResource.stars(tmp_path / "missing.json")
    with pytest.raises(CatalogError):
        resource.records()


def test_optional_resource_degrades_to_empty(tmp_path, caplog):
    resource = CatalogResource.nebulae(tmp_path / "missing.json")
    with caplog.at_level(logging.WARNING, logger="starmap.catalog"):
        assert resource.records() == ()
    assert "unavailable" in caplog.text


def test_optional_resource_malformed(tmp_path):
    path = tmp_path / "nebulae.json"
    path.write_text("not json", encoding="utf-8")
    assert CatalogResource.nebulae(path).records() == ()


def test_bundled_catalogs():
    stars = CatalogResource.stars(DEFAULT_STAR_CATALOG).records()
    names = {r.name for r in stars}
    assert "Polaris" in names
    assert "Sirius" in names
    assert "Unpositioned" not in names
    assert all(r.mag <= 6.5 for r in stars)

    nebulae = CatalogResource.nebulae(DEFAULT_NEBULA_CATALOG).records()
    assert "M42" in {r.identifier for r in nebulae}


# ---------------------------------------------------------------------------
# Visual attributes
# ---------------------------------------------------------------------------


def test_brightness_and_size_values():
    assert magnitude_to_brightness(0.0) == 1.0
    assert magnitude_to_brightness(6.5) == 0.1
    assert magnitude_to_brightness(10.0) == 0.1
    assert star_size(0.0) == 8.0
    assert star_size(-1.0) == 8.0
    assert star_size(10.0) == 1.5
    assert nebula_size(1.0) == 14.0
    assert nebula_size(10.0) == 8.0


def test_brightness_and_size_monotone_in_magnitude():
    mags = np.linspace(-2.0, 12.0, 141)
    for fn in (magnitude_to_brightness, star_size, nebula_size):
        values = [fn(m) for m in mags]
        assert all(a >= b for a, b in zip(values, values[1:]))


def test_star_color_missing_bv_is_white():
    assert star_color_from_bv(None) == WHITE


def test_nebula_color_missing_bv_is_pale_blue():
    assert nebula_color_from_bv(None) == NEBULA_DEFAULT_COLOR


@pytest.mark.parametrize("boundary", [0.5, 1.0, 1.5])
def test_star_color_continuous_at_band_edges(boundary):
    below = star_color_from_bv(boundary - 1e-4)
    above = star_color_from_bv(boundary + 1e-4)
    assert below == pytest.approx(above, abs=1e-3)


@pytest.mark.parametrize("boundary", [0.5, 1.0])
def test_nebula_color_continuous_at_band_edges(boundary):
    below = nebula_color_from_bv(boundary - 1e-4)
    above = nebula_color_from_bv(boundary + 1e-4)
    assert below == pytest.approx(above, abs=1e-3)


def test_star_color_clamped():
    assert star_color_from_bv(5.0) == pytest.approx(star_color_from_bv(2.0))
    assert star_color_from_bv(2.0) == pytest.approx((1.0, 0.2, 0.0))
    assert star_color_from_bv(-1.0) == pytest.approx((0.6, 0.7, 1.0))


def test_star_color_components_in_range():
    for bv in np.linspace(-1.0, 3.0, 81):
        assert all(0.0 <= c <= 1.0 for c in star_color_from_bv(float(bv)))
        assert all(0.0 <= c <= 1.0 for c in nebula_color_from_bv(float(bv)))


# ---------------------------------------------------------------------------
# Positioning
# ---------------------------------------------------------------------------


def test_build_star_fallback_name_and_class(observer):
    star = build_star(StarRecord(identifier="123", ra=10.0, dec=-20.0, mag=4.5), observer)
    assert star.name == "Star 123"
    assert star.spectral_class == "Unknown"
    assert star.color == WHITE
    assert star.direction.norm == pytest.approx(1.0)


def test_build_stars(star_records, observer):
    stars = build_stars(star_records, observer)
    assert [s.name for s in stars] == ["Polaris", "Vega", "Betelgeuse"]
    assert stars[0].details["Spectral Class"] == "F7Ib"


def test_build_nebulae_empty_logs_warning(observer, caplog):
    with caplog.at_level(logging.WARNING, logger="starmap.catalog"):
        assert build_nebulae((), observer) == []
    assert "No nebula data loaded" in caplog.text


def test_build_nebulae(nebula_records, observer):
    nebulae = build_nebulae(nebula_records, observer)
    assert nebulae[0].kind is ObjectKind.NEBULA
    assert nebulae[0].size == nebula_size(4.0)


def test_generate_random_stars(observer):
    stars = generate_random_stars(50, observer, np.random.default_rng(7))
    assert len(stars) == 50
    assert stars[0].identifier == "random-0"
    for star in stars:
        assert star.direction.norm == pytest.approx(1.0)
        assert 0.0 <= star.magnitude <= 6.0
        assert star.spectral_class in {"O", "A", "F", "G", "M"}
        assert star.size == pytest.approx(2.0 + star.brightness * 8.0)


def test_generate_random_stars_reproducible(observer):
    a = generate_random_stars(5, observer, np.random.default_rng(1))
    b = generate_random_stars(5, observer, np.random.default_rng(1))
    assert [s.ra for s in a] == [s.ra for s in b]
