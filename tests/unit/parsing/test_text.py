from __future__ import annotations

import pytest

from baggage_manifest.core.config import Settings
from baggage_manifest.parsing.text import TextLineParser, parse_text


@pytest.fixture
def parser() -> TextLineParser:
    return TextLineParser()


# ---------------------------------------------------------------------------
# SITA BagManager lines
# ---------------------------------------------------------------------------


def test_sita_line_yields_single_complete_record(parser: TextLineParser) -> None:
    items = parser.parse("0DT357756 Prio NBJ FIH MARQUES CAR0044DT 22 Loaded Y")

    assert len(items) == 1
    record = items[0]
    assert record.bag_id == "0DT357756"
    assert record.passenger_name == "MARQUES"
    assert record.flight_class == "Prio"
    assert record.route == "NBJ-FIH"
    assert record.loaded is True
    assert record.received is True


def test_sita_report_skips_banners_and_reads_status(
    parser: TextLineParser, sita_report: str
) -> None:
    items = parser.parse(sita_report)

    assert [i.bag_id for i in items] == ["0DT357756", "0DT357757", "0DT357758"]
    expected, not_loaded = items[1], items[2]
    assert expected.passenger_name == "MBUYI"
    assert expected.pnr == "K7XQ2P"
    assert expected.loaded is False
    assert not_loaded.passenger_name == "KABILA"
    assert not_loaded.loaded is False
    assert not_loaded.received is False


def test_sita_tag_is_upper_cased(parser: TextLineParser) -> None:
    items = parser.parse("0dt357761 Prio NBJ FIH LUMBU Loaded")

    assert items[0].bag_id == "0DT357761"


def test_duplicate_sita_tag_keeps_first(parser: TextLineParser) -> None:
    text = "\n".join(
        [
            "0DT357756 Prio NBJ FIH MARQUES CAR0044DT 22 Loaded Y",
            "0DT357756 Econ NBJ FIH OTHERNAME 22 Expected",
        ]
    )

    items = parser.parse(text)

    assert len(items) == 1
    assert items[0].passenger_name == "MARQUES"


def test_unresolved_sita_tag_can_be_resolved_later(parser: TextLineParser) -> None:
    text = "\n".join(
        [
            "0DT357760 Prio NBJ FIH 22 Loaded",
            "0DT357760 Prio NBJ FIH TSHIBANDA 22 Loaded",
        ]
    )

    items = parser.parse(text)

    assert len(items) == 1
    assert items[0].passenger_name == "TSHIBANDA"


def test_287_tag_lines_yield_287_records(parser: TextLineParser) -> None:
    text = "\n".join(
        f"0DT{3500000 + i} Prio NBJ FIH MARQUES CAR0044DT 22 Loaded Y"
        for i in range(287)
    )

    items = parser.parse(text)

    assert len(items) == 287
    assert len({i.bag_id for i in items}) == 287


# ---------------------------------------------------------------------------
# Column and concatenated lines
# ---------------------------------------------------------------------------


def test_concatenated_line(parser: TextLineParser) -> None:
    items = parser.parse("235345230EZANDOMPANGI0 LOADED Received")

    assert len(items) == 1
    record = items[0]
    assert record.bag_id == "235345230"
    assert record.passenger_name == "EZANDOMPANGI"
    assert record.weight == 0
    assert record.loaded is True
    assert record.received is True


def test_tab_line_matches_concatenated_line(parser: TextLineParser) -> None:
    tabbed = parser.parse("235345230\tEZANDOMPANGI\t0 LOADED Received")
    glued = parser.parse("235345230EZANDOMPANGI0 LOADED Received")

    assert [r.dict() for r in tabbed] == [r.dict() for r in glued]


def test_wide_space_columns(parser: TextLineParser) -> None:
    items = parser.parse("235345231   MUKENDI   JEAN   23 LOADED")

    # Wide spaces split columns, so only the first name column is kept.
    assert items[0].passenger_name == "MUKENDI"
    assert items[0].weight is None


def test_columns_collapse_whitespace_inside_name(parser: TextLineParser) -> None:
    items = parser.parse("235345231\tMUKENDI JEAN\t23 LOADED")

    assert items[0].passenger_name == "MUKENDI JEAN"
    assert items[0].weight == 23.0
    assert items[0].loaded is True
    assert items[0].received is False


def test_concatenated_received_only(parser: TextLineParser) -> None:
    items = parser.parse("235345233KALALA15 RECEIVED")

    assert items[0].weight == 15.0
    assert items[0].loaded is False
    assert items[0].received is True


@pytest.mark.parametrize("placeholder", ["ZZZZZZ", "unknown"])
def test_placeholder_names_are_rejected(parser: TextLineParser, placeholder: str) -> None:
    assert parser.parse(f"235345232\t{placeholder}\t12 LOADED") == []


def test_duplicate_tag_across_grammars(parser: TextLineParser) -> None:
    text = "\n".join(
        [
            "235345230\tEZANDOMPANGI\t0 LOADED Received",
            "235345230OTHERNAME5 LOADED",
        ]
    )

    items = parser.parse(text)

    assert len(items) == 1
    assert items[0].passenger_name == "EZANDOMPANGI"


# ---------------------------------------------------------------------------
# Multi-line bare tags
# ---------------------------------------------------------------------------


@pytest.fixture
def multiline_parser() -> TextLineParser:
    # Bare tags are 9-13 characters, so the header length floor must sit below.
    return TextLineParser(header_min_length=9)


def test_bare_tag_reads_following_lines(multiline_parser: TextLineParser) -> None:
    text = "\n".join(
        ["1234567890", "KABONGO/PIERRE", "FIH", "23", "LOADED", "Received"]
    )

    items = multiline_parser.parse(text)

    assert len(items) == 1
    record = items[0]
    assert record.bag_id == "1234567890"
    assert record.passenger_name == "KABONGO/PIERRE"
    assert record.weight == 23.0
    assert record.loaded is True
    assert record.received is True


def test_bare_tag_received_is_case_sensitive(multiline_parser: TextLineParser) -> None:
    items = multiline_parser.parse("\n".join(["1234567890", "KABONGO", "RECEIVED"]))

    assert items[0].received is False


def test_bare_tag_window_stops_at_next_tag(multiline_parser: TextLineParser) -> None:
    items = multiline_parser.parse("\n".join(["1234567890", "1234567891", "MUTOMBO"]))

    assert [(r.bag_id, r.passenger_name) for r in items] == [("1234567891", "MUTOMBO")]


def test_bare_tag_lookahead_is_bounded() -> None:
    lines = ["1234567890"] + ["n/a"] * 10 + ["MUTOMBO"]
    text = "\n".join(lines)

    short = TextLineParser(lookahead_lines=10, header_min_length=9)
    long = TextLineParser(lookahead_lines=11, header_min_length=9)

    assert short.parse(text) == []
    assert long.parse(text)[0].passenger_name == "MUTOMBO"


def test_bare_tag_is_a_header_under_default_length(parser: TextLineParser) -> None:
    assert parser.parse("\n".join(["1234567890", "KABONGO", "LOADED"])) == []


def test_numeric_line_does_not_swallow_following_sita_rows(parser: TextLineParser) -> None:
    names = ["MARQUES", "MBUYI", "KABILA", "LUMBU", "TSHIBANDA"]
    text = "\n".join(
        ["123456789"]
        + [f"0DT35775{i} Prio NBJ FIH {name} 22 Loaded" for i, name in enumerate(names)]
    )

    items = parser.parse(text)

    assert [i.passenger_name for i in items] == names
    assert [i.bag_id for i in items] == [f"0DT35775{i}" for i in range(5)]


def test_header_min_length_from_settings() -> None:
    text = "\n".join(["1234567890", "KABONGO", "LOADED"])

    assert parse_text(text) == []
    assert parse_text(text, settings=Settings(header_min_length=10))[0].bag_id == "1234567890"


# ---------------------------------------------------------------------------
# Skip rules and configuration
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "line",
    ["", "   ", "0DT1", "Page 3 of 10", "BAG ID PASSENGER NAME", "Escale FIH 0DT357756 Y NBJ FIH MARQUES"],
)
def test_skipped_lines_never_produce_records(parser: TextLineParser, line: str) -> None:
    assert parser.parse(line) == []


def test_parse_is_pure(parser: TextLineParser, sita_report: str) -> None:
    first = [r.dict() for r in parser.parse(sita_report)]
    second = [r.dict() for r in parser.parse(sita_report)]

    assert first == second


def test_parse_text_uses_settings() -> None:
    settings = Settings(min_line_length=60)

    assert parse_text("0DT357756 Prio NBJ FIH MARQUES Loaded", settings=settings) == []


def test_from_settings_copies_tuning() -> None:
    parser = TextLineParser.from_settings(
        Settings(lookahead_lines=3, min_line_length=7, header_min_length=9)
    )

    assert parser.lookahead_lines == 3
    assert parser.min_line_length == 7
    assert parser.header_min_length == 9
