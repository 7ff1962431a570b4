"""Tests for date helpers."""

from datetime import date

import pytest

from eventflow_sync.dates import (
    convert_br_to_iso,
    format_date_br,
    time_to_minutes,
    today_br,
    today_iso,
)


class TestDateFormatting:
    """Tests for ISO <-> DD/MM/YYYY conversion."""

    def test_format_iso_as_br(self) -> None:
        assert format_date_br("2024-03-05") == "05/03/2024"

    def test_format_passes_br_through(self) -> None:
        assert format_date_br("05/03/2024") == "05/03/2024"

    def test_convert_br_to_iso(self) -> None:
        assert convert_br_to_iso("05/03/2024") == "2024-03-05"

    def test_convert_passes_iso_through(self) -> None:
        assert convert_br_to_iso("2024-03-05") == "2024-03-05"

    @pytest.mark.parametrize("func", [format_date_br, convert_br_to_iso])
    def test_empty_input(self, func) -> None:
        assert func("") == ""

    def test_today(self) -> None:
        day = date(2024, 12, 1)

        assert today_iso(day) == "2024-12-01"
        assert today_br(day) == "01/12/2024"


class TestTimeToMinutes:
    """Tests for time_to_minutes."""

    @pytest.mark.parametrize(
        ("time", "minutes"),
        [("00:00", 0), ("08:30", 510), ("23:59", 1439)],
    )
    def test_time_to_minutes(self, time: str, minutes: int) -> None:
        assert time_to_minutes(time) == minutes
