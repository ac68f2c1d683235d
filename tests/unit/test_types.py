from __future__ import annotations

from baggage_manifest.types import BaggageRecord, ParseResult


def test_record_dict_uses_wire_keys_and_omits_absent_fields() -> None:
    record = BaggageRecord(
        bag_id="0DT357756",
        passenger_name="MARQUES",
        seat_number="12A",
        flight_class="Prio",
        weight=0.0,
        loaded=False,
    )

    assert record.dict() == {
        "bagId": "0DT357756",
        "passengerName": "MARQUES",
        "seatNumber": "12A",
        "class": "Prio",
        "weight": 0.0,
        "loaded": False,
    }


def test_parse_result_dict() -> None:
    result = ParseResult(
        items=[BaggageRecord(bag_id="1", passenger_name="KABILA")], total_count=1
    )

    assert result.dict() == {
        "items": [{"bagId": "1", "passengerName": "KABILA"}],
        "totalCount": 1,
    }
    assert ParseResult.empty().total_count == 0
