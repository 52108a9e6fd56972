"""Tests for the scene-name mini-language."""

import logging

import pytest

from hue_scheduler.domain.errors import ParseError
from hue_scheduler.domain.models import Clock, Solar, SolarEvent, TimeWindow
from hue_scheduler.domain.parser import NameParser, parse, parse_time_point, parse_window_list


SUNRISE = Solar(SolarEvent.SUNRISE)
SUNSET = Solar(SolarEvent.SUNSET)


@pytest.mark.parametrize(
    "token, expected",
    [
        ("12h", Clock(12, 0)),
        ("13:45h", Clock(13, 45)),
        ("0h", Clock(0, 0)),
        ("9:20h", Clock(9, 20)),
        ("23:59h", Clock(23, 59)),
        ("3AM", Clock(3, 0)),
        ("8PM", Clock(20, 0)),
        ("11PM", Clock(23, 0)),
        ("12AM", Clock(0, 0)),
        ("12PM", Clock(12, 0)),
        ("7pm", Clock(19, 0)),
        ("sunrise", SUNRISE),
        ("Sunset", SUNSET),
        (" 10h ", Clock(10, 0)),
    ],
)
def test_time_point_forms(token, expected):
    assert parse_time_point(token) == expected


@pytest.mark.parametrize(
    "token",
    ["24h", "10:60h", "0:1h", "13PM", "0AM", "noon", "10", "h", ""],
)
def test_time_point_rejects_out_of_range_and_garbage(token):
    with pytest.raises(ParseError):
        parse_time_point(token)


def test_night_light_solar_start_and_12h_end():
    parsed = parse("Night light (sunset-11PM)")
    assert parsed.display_name == "Night light"
    assert parsed.windows == (TimeWindow(start=SUNSET, end=Clock(23, 0)),)
    assert parsed.is_attached is False
    assert parsed.error is None


def test_multiple_windows():
    parsed = parse("Natural light (8AM-10:30h, 17h-sunset)")
    assert parsed.display_name == "Natural light"
    assert parsed.windows == (
        TimeWindow(start=Clock(8, 0), end=Clock(10, 30)),
        TimeWindow(start=Clock(17, 0), end=SUNSET),
    )


def test_original_24h_ranges_still_parse():
    assert parse("Test (10h-20h)").windows == (TimeWindow(Clock(10), Clock(20)),)
    assert parse("Test (12:23h-20:59h)").windows == (TimeWindow(Clock(12, 23), Clock(20, 59)),)
    assert parse("Test (0:00h-0:00h)").windows == (TimeWindow(Clock(0), Clock(0)),)


@pytest.mark.parametrize("raw", ["(att) Lamp", "Lamp (att)", "Lamp (ATT)", "(att)Lamp"])
def test_attached_marker_anywhere(raw):
    parsed = parse(raw)
    assert parsed.is_attached is True
    assert parsed.display_name == "Lamp"
    assert parsed.windows == ()


def test_attached_marker_with_windows():
    parsed = parse("Lamp (att) (sunset-23h)")
    assert parsed.is_attached is True
    assert parsed.display_name == "Lamp"
    assert parsed.windows == (TimeWindow(SUNSET, Clock(23)),)


def test_name_without_annotation():
    parsed = parse("Relax")
    assert parsed.display_name == "Relax"
    assert parsed.windows == ()


def test_plain_parenthesized_text_is_not_a_schedule():
    parsed = parse("Reading (kitchen)")
    assert parsed.display_name == "Reading (kitchen)"
    assert parsed.windows == ()
    assert parsed.error is None


def test_reparsing_display_name_is_idempotent():
    first = parse("Wake up (sunrise-8:30h)")
    second = parse(first.display_name)
    assert second.display_name == first.display_name
    assert second.windows == ()


@pytest.mark.parametrize(
    "raw",
    ["Test (10h-20:60h)", "Test (10h-25h)", "Test (0:1h-0:0h)", "Test (10h-12h-14h)", "Test (10h-, 12h-13h)"],
)
def test_malformed_window_list_is_non_fatal(raw, caplog):
    with caplog.at_level(logging.WARNING):
        parsed = parse(raw)
    assert parsed.windows == ()
    assert parsed.error
    assert raw in caplog.text


@pytest.mark.parametrize("raw", ["Test (10h-20h", "Test 10h-20h)"])
def test_unbalanced_parentheses_leave_scene_unannotated(raw):
    assert parse(raw).windows == ()


def test_parse_window_list_rejects_empty():
    with pytest.raises(ParseError):
        parse_window_list("  ")


class TestNameParserCache:
    def test_same_name_parsed_once(self, monkeypatch):
        calls = []
        import hue_scheduler.domain.parser as parser_module

        real = parser_module.parse

        def counting(raw):
            calls.append(raw)
            return real(raw)

        monkeypatch.setattr(parser_module, "parse", counting)
        cache = NameParser()
        cache.parse("Sleep (23h-8h)")
        cache.parse("Sleep (23h-8h)")
        assert calls == ["Sleep (23h-8h)"]

    def test_renamed_scene_is_reparsed_and_stale_entry_dropped(self):
        cache = NameParser()
        assert cache.parse("Sleep (23h-8h)").windows[0].start == Clock(23)
        assert cache.parse("Sleep (22h-8h)").windows[0].start == Clock(22)
        cache.retain({"Sleep (22h-8h)"})
        assert len(cache) == 1
