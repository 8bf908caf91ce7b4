import pytest

from sukuu.services.intervals import (
    BoundaryPolicy,
    Interval,
    IntervalUnit,
    InvalidFormat,
    InvalidRange,
    build_interval,
    describe,
    format_minutes,
    overlaps,
    parse_percentage,
    parse_time,
    percentage_interval,
    time_interval,
)


def test_parse_time_converts_to_minutes():
    assert parse_time("00:00") == 0
    assert parse_time("08:30") == 510
    assert parse_time("23:59") == 1439


@pytest.mark.parametrize("value", ["8:00", "25:00", "24:00", "08:60", "0800", "", " 08:00", "08:00\n", None, 480])
def test_parse_time_rejects_malformed_values(value):
    with pytest.raises(InvalidFormat) as excinfo:
        parse_time(value, field="start_time")
    assert excinfo.value.field_errors() == {"start_time": ["Time must be in HH:MM 24-hour format"]}


def test_format_minutes_pads_hours_and_minutes():
    assert format_minutes(0) == "00:00"
    assert format_minutes(545) == "09:05"


def test_parse_percentage_scales_to_tenths():
    assert parse_percentage(85.5) == 855
    assert parse_percentage("85.5") == 855
    assert parse_percentage(0) == 0
    assert parse_percentage(100) == 1000
    assert parse_percentage(" 70 ") == 700


def test_parse_percentage_rounds_half_up_to_nearest_tenth():
    assert parse_percentage("59.95") == 600
    assert parse_percentage("59.94") == 599


@pytest.mark.parametrize("value", ["abc", "", None, True, float("nan"), "inf", -0.1, 100.1])
def test_parse_percentage_rejects_non_numbers_and_out_of_range(value):
    with pytest.raises(InvalidFormat):
        parse_percentage(value, field="min_percentage")


def test_time_interval_requires_start_before_end():
    assert time_interval("08:00", "08:40") == Interval(480, 520, inclusive_start=True, inclusive_end=False)

    with pytest.raises(InvalidRange) as equal:
        time_interval("09:00", "09:00", start_field="start_time", end_field="end_time")
    assert equal.value.fields == ("end_time",)

    with pytest.raises(InvalidRange):
        time_interval("10:00", "09:00")


def test_percentage_interval_is_closed_and_allows_single_point_band():
    band = percentage_interval(80, "89.9")
    assert band == Interval(800, 899, inclusive_start=True, inclusive_end=True)
    assert percentage_interval(50, 50).start == percentage_interval(50, 50).end

    with pytest.raises(InvalidRange) as excinfo:
        percentage_interval(90, 80, start_field="min_percentage", end_field="max_percentage")
    assert excinfo.value.fields == ("min_percentage",)


def test_build_interval_dispatches_on_unit():
    assert build_interval(IntervalUnit.MINUTES, "07:00", "07:30") == Interval(420, 450)
    assert build_interval(IntervalUnit.TENTHS_OF_PERCENT, 0, 39).end == 390


def test_exclusive_touch_treats_shared_endpoint_as_free():
    first = time_interval("08:00", "09:00")
    second = time_interval("09:00", "10:00")
    assert not overlaps(first, second, BoundaryPolicy.EXCLUSIVE_TOUCH)
    assert not overlaps(second, first, BoundaryPolicy.EXCLUSIVE_TOUCH)


def test_inclusive_touch_treats_shared_endpoint_as_overlap():
    first = percentage_interval(70, 80)
    second = percentage_interval(80, 90)
    assert overlaps(first, second, BoundaryPolicy.INCLUSIVE_TOUCH)
    assert not overlaps(percentage_interval(70, 79.9), second, BoundaryPolicy.INCLUSIVE_TOUCH)


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (("08:00", "09:00"), ("08:30", "09:30"), True),
        (("08:00", "12:00"), ("09:00", "10:00"), True),
        (("09:00", "10:00"), ("08:00", "12:00"), True),
        (("08:00", "09:00"), ("08:00", "09:00"), True),
        (("08:00", "09:00"), ("10:00", "11:00"), False),
    ],
)
def test_overlap_is_symmetric(a, b, expected):
    first = time_interval(*a)
    second = time_interval(*b)
    for policy in BoundaryPolicy:
        assert overlaps(first, second, policy) == overlaps(second, first, policy)
    assert overlaps(first, second, BoundaryPolicy.EXCLUSIVE_TOUCH) is expected


def test_describe_renders_in_original_units():
    assert describe(time_interval("08:00", "08:40"), IntervalUnit.MINUTES) == "08:00-08:40"
    assert describe(percentage_interval(85.5, 100), IntervalUnit.TENTHS_OF_PERCENT) == "85.5%-100%"


def test_touching_minute_intervals_differ_by_policy():
    first = Interval(60, 120)
    second = Interval(120, 180)
    assert overlaps(first, second, BoundaryPolicy.EXCLUSIVE_TOUCH) is False
    assert overlaps(first, second, BoundaryPolicy.INCLUSIVE_TOUCH) is True


def test_half_past_eight_to_half_past_nine_parses():
    assert time_interval("08:00", "09:30") == Interval(480, 570)
