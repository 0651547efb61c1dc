from datetime import date, time

import pytest

from services.validation_service import (
    normalize_color,
    normalize_priority,
    parse_bool,
    parse_day_value,
    parse_days_of_week,
    parse_recurrence,
    parse_time_str,
)


@pytest.mark.parametrize('raw, expected', [
    ('09:30', time(9, 30)),
    ('9', time(9, 0)),
    ('2:15pm', time(14, 15)),
    ('12am', time(0, 0)),
    ('23:59', time(23, 59)),
    ('24:00', None),
    ('13pm', None),
    ('noon', None),
    ('', None),
])
def test_parse_time_str(raw, expected):
    assert parse_time_str(raw) == expected


def test_parse_days_of_week_drops_garbage():
    assert parse_days_of_week('5,1,x,1,7') == [1, 5]
    assert parse_days_of_week([3, '0', True, None]) == [0, 3]
    assert parse_days_of_week(None) == []


def test_parse_day_value():
    assert parse_day_value('2024-06-03') == date(2024, 6, 3)
    assert parse_day_value('2024-02-30') is None
    assert parse_day_value(None) is None


def test_parse_bool_and_priority_and_color():
    assert parse_bool('yes') is True
    assert parse_bool(None, default=True) is True
    assert normalize_priority('HIGH') == 'high'
    assert normalize_priority('urgent') == 'medium'
    assert normalize_color('#ABCDEF') == '#abcdef'
    assert normalize_color('blue') is None


def test_parse_recurrence_normalizes_weekly_rule():
    rule = parse_recurrence({'type': 'Weekly', 'endDate': '2024-12-31', 'daysOfWeek': [5, 1]})
    assert rule == {'type': 'weekly', 'endDate': date(2024, 12, 31), 'daysOfWeek': [1, 5]}


def test_parse_recurrence_ignores_days_for_non_weekly_rules():
    assert parse_recurrence({'type': 'daily', 'daysOfWeek': [1]})['daysOfWeek'] == []


def test_parse_recurrence_empty_means_no_rule():
    assert parse_recurrence(None) is None
    assert parse_recurrence({}) is None


@pytest.mark.parametrize('raw', [{'type': 'yearly'}, {'type': 'daily', 'endDate': 'soon'}, 'daily'])
def test_parse_recurrence_rejects_invalid_rules(raw):
    with pytest.raises(ValueError):
        parse_recurrence(raw)
