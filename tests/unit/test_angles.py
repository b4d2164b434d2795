"""Unit tests for angle and sidereal time helpers."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from starmap.angles import (
    J2000,
    as_utc,
    cardinal_direction_name,
    greenwich_mean_sidereal_time,
    julian_centuries,
    julian_day,
    local_sidereal_time,
    normalize_degrees,
    normalize_radians,
    to_degrees,
    to_radians,
)

# ---------------------------------------------------------------------------
# Conversions and normalization
# ---------------------------------------------------------------------------


def test_degree_radian_conversion():
    assert to_radians(180.0) == pytest.approx(math.pi)
    assert to_degrees(math.pi / 2) == pytest.approx(90.0)


@pytest.mark.parametrize(
    "angle, expected",
    [(0.0, 0.0), (360.0, 0.0), (-30.0, 330.0), (725.0, 5.0), (-720.0, 0.0)],
)
def test_normalize_degrees(angle, expected):
    assert normalize_degrees(angle) == pytest.approx(expected)


def test_normalize_degrees_tiny_negative_stays_in_range():
    result = normalize_degrees(-1e-15)
    assert 0.0 <= result < 360.0


def test_normalize_radians():
    assert normalize_radians(-math.pi / 2) == pytest.approx(3 * math.pi / 2)
    assert normalize_radians(2 * math.pi) == 0.0


def test_as_utc_treats_naive_as_utc():
    naive = datetime(2024, 1, 1, 12, 0, 0)
    assert as_utc(naive) == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_as_utc_converts_offsets():
    local = datetime(2024, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert as_utc(local) == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Julian Day
# ---------------------------------------------------------------------------


def test_julian_day_at_j2000():
    assert julian_day(datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)) == pytest.approx(J2000)


def test_julian_day_at_unix_epoch():
    assert julian_day(datetime(1970, 1, 1, tzinfo=timezone.utc)) == pytest.approx(2440587.5)


def test_julian_day_naive_matches_utc():
    aware = datetime(2024, 3, 20, 6, 0, 0, tzinfo=timezone.utc)
    assert julian_day(aware.replace(tzinfo=None)) == julian_day(aware)


def test_julian_centuries():
    assert julian_centuries(J2000) == 0.0
    assert julian_centuries(J2000 + 36525.0) == pytest.approx(1.0)


# ---------------------------------------------------------------------------
# Sidereal time
# ---------------------------------------------------------------------------


def test_gmst_at_j2000():
    assert greenwich_mean_sidereal_time(J2000) == pytest.approx(280.46061837)


def test_gmst_at_midnight_ut():
    # 1987 April 10, 0h UT: 13h10m46.3668s
    jd = julian_day(datetime(1987, 4, 10, tzinfo=timezone.utc))
    assert jd == pytest.approx(2446895.5)
    assert greenwich_mean_sidereal_time(jd) == pytest.approx(197.693195, abs=1e-4)


def test_gmst_at_arbitrary_instant():
    # 1987 April 10, 19:21:00 UT: 8h34m57.0896s
    jd = julian_day(datetime(1987, 4, 10, 19, 21, 0, tzinfo=timezone.utc))
    assert greenwich_mean_sidereal_time(jd) == pytest.approx(128.7378734, abs=1e-4)


def test_gmst_is_normalized():
    for offset in range(0, 4000, 137):
        gmst = greenwich_mean_sidereal_time(J2000 + offset + 0.37)
        assert 0.0 <= gmst < 360.0


def test_lst_adds_east_longitude():
    assert local_sidereal_time(J2000, 15.0) == pytest.approx(280.46061837 + 15.0)
    assert local_sidereal_time(J2000, -118.24) == pytest.approx(280.46061837 - 118.24)


def test_lst_is_not_normalized():
    assert local_sidereal_time(J2000, 100.0) > 360.0


# ---------------------------------------------------------------------------
# Compass names
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "heading, name",
    [(0, "N"), (22.4, "N"), (22.5, "NE"), (90, "E"), (180, "S"), (225, "SW"), (350, "N"), (-90, "W")],
)
def test_cardinal_direction_name(heading, name):
    assert cardinal_direction_name(heading) == name
