import pytest

from NJC.calibration import AAP2004_24H, BHUTANI_12H, EXCHANGE_TRANSFUSION_12H, PHOTOTHERAPY_12H
from NJC.curves import (
    BhutaniZone,
    bhutani_percentiles,
    classify_bhutani_zone,
    find_bracket,
    get_limit,
    interpolate,
    round_to_half,
)
from NJC.risk import RiskTag

TIERS = [RiskTag.LOW, RiskTag.MED, RiskTag.HIGH]


@pytest.mark.parametrize("x0, y0, x1, y1", [(12, 9.0, 24, 12.0), (96, 20.5, 120, 21.0), (0, -3, 7, 11)])
def test_interpolate_exact_at_endpoints(x0, y0, x1, y1):
    assert interpolate(x0, x0, y0, x1, y1) == y0
    assert interpolate(x1, x0, y0, x1, y1) == y1


def test_interpolate_midpoint():
    assert interpolate(30, 24, 12.0, 36, 13.5) == pytest.approx(12.75)


@pytest.mark.parametrize("value, expected", [(12.75, 13.0), (13.25, 13.5), (13.24, 13.0), (15.0, 15.0), (14.74, 14.5)])
def test_round_to_half(value, expected):
    assert round_to_half(value) == expected


def test_find_bracket_takes_first_match_on_shared_breakpoint():
    p0, p1 = find_bracket(PHOTOTHERAPY_12H, 48)
    assert (p0.hours, p1.hours) == (36, 48)


def test_find_bracket_handles_wide_final_interval():
    p0, p1 = find_bracket(PHOTOTHERAPY_12H, 100)
    assert (p0.hours, p1.hours) == (96, 120)


def test_breakpoint_value_returned_exactly():
    assert get_limit(PHOTOTHERAPY_12H, RiskTag.LOW, 48) == 15.0
    assert get_limit(EXCHANGE_TRANSFUSION_12H, RiskTag.LOW, 48) == 22.0


def test_between_breakpoints_is_interpolated_then_rounded():
    # 12.75 between 24 h (12.0) and 36 h (13.5)
    assert get_limit(PHOTOTHERAPY_12H, RiskTag.LOW, 30) == 13.0


@pytest.mark.parametrize("tag", TIERS)
def test_plateau_beyond_last_breakpoint(tag):
    last = PHOTOTHERAPY_12H[-1]
    assert get_limit(PHOTOTHERAPY_12H, tag, 200) == get_limit(PHOTOTHERAPY_12H, tag, 120)
    assert get_limit(PHOTOTHERAPY_12H, tag, 200) == last.value_for(tag)


@pytest.mark.parametrize("curve", [PHOTOTHERAPY_12H, EXCHANGE_TRANSFUSION_12H])
@pytest.mark.parametrize("tag", TIERS)
def test_every_threshold_is_a_multiple_of_half(curve, tag):
    hol = 12.0
    while hol < 200:
        value = get_limit(curve, tag, hol)
        assert (value * 2).is_integer(), (hol, value)
        hol = round(hol + 0.7, 1)


def test_no_threshold_before_first_breakpoint_or_without_tag():
    assert get_limit(PHOTOTHERAPY_12H, RiskTag.LOW, 11.9) is None
    assert get_limit(PHOTOTHERAPY_12H, RiskTag.LOW, None) is None
    assert get_limit(PHOTOTHERAPY_12H, RiskTag.NA, 48) is None


def test_thresholds_rise_with_risk_falling():
    for hol in (12, 30, 60, 100, 150):
        low, med, high = (get_limit(PHOTOTHERAPY_12H, tag, hol) for tag in TIERS)
        assert low >= med >= high


def test_bhutani_percentiles_at_breakpoint_and_between():
    at_48 = bhutani_percentiles(48, BHUTANI_12H)
    assert at_48 == (7.5, 10.5, 13.5)
    at_42 = bhutani_percentiles(42, BHUTANI_12H)
    assert at_42.p40 == pytest.approx(6.5)
    assert at_42.p75 == pytest.approx(9.5)
    assert at_42.p95 == pytest.approx(12.5)


def test_bhutani_percentiles_held_flat_past_chart():
    last = BHUTANI_12H[-1]
    assert bhutani_percentiles(200, BHUTANI_12H) == (last.p40, last.p75, last.p95)


def test_zone_too_early_and_pending():
    assert classify_bhutani_zone(None, 5.0) is BhutaniZone.TOO_EARLY
    assert classify_bhutani_zone(11.9, 5.0) is BhutaniZone.TOO_EARLY
    assert classify_bhutani_zone(48, None) is BhutaniZone.PENDING_INPUT
    assert BhutaniZone.TOO_EARLY.label == "N/A (Too Early)"


@pytest.mark.parametrize(
    "reading, expected",
    [
        (7.4, BhutaniZone.LOW),
        (7.5, BhutaniZone.LOW_INTERMEDIATE),
        (10.4, BhutaniZone.LOW_INTERMEDIATE),
        (10.5, BhutaniZone.HIGH_INTERMEDIATE),
        (13.4, BhutaniZone.HIGH_INTERMEDIATE),
        (13.5, BhutaniZone.HIGH),
    ],
)
def test_zone_bands_include_their_lower_percentile(reading, expected):
    assert classify_bhutani_zone(48, reading) is expected


def test_zone_order_is_monotonic_in_reading():
    order = [
        BhutaniZone.LOW,
        BhutaniZone.LOW_INTERMEDIATE,
        BhutaniZone.HIGH_INTERMEDIATE,
        BhutaniZone.HIGH,
    ]
    for hol in (12, 30, 55, 96, 150):
        ranks = [order.index(classify_bhutani_zone(hol, tenth / 10)) for tenth in range(0, 260)]
        assert ranks == sorted(ranks)
        assert ranks[0] == 0 and ranks[-1] == 3


def test_coarse_set_reports_zone_from_18_hours_on_first_segment():
    # 20 h sits before the first 24 h breakpoint: the 24-36 h segment is extended back
    percentiles = bhutani_percentiles(20, AAP2004_24H.bhutani)
    assert percentiles.p40 == pytest.approx(3.5)
    zone = classify_bhutani_zone(20, 3.6, AAP2004_24H.bhutani, AAP2004_24H.bhutani_early_cutoff)
    assert zone is BhutaniZone.LOW_INTERMEDIATE
    assert classify_bhutani_zone(17, 3.6, AAP2004_24H.bhutani, AAP2004_24H.bhutani_early_cutoff) is BhutaniZone.TOO_EARLY
    assert get_limit(AAP2004_24H.phototherapy, RiskTag.LOW, 20) is None


def test_get_limit_accepts_tag_label():
    assert get_limit(PHOTOTHERAPY_12H, "medium", 48) == get_limit(PHOTOTHERAPY_12H, RiskTag.MED, 48) == 13.0
    assert get_limit(PHOTOTHERAPY_12H, "n/a", 48) is None
    with pytest.raises(ValueError):
        get_limit(PHOTOTHERAPY_12H, "severe", 48)
