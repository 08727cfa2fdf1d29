"""
Errors raised at the chart-assembly boundary.

Once a BaziChart exists, every computation on it is total; only turning raw
birth input into a chart can fail.
"""


class XuanshuError(Exception):
    """Base class for all engine errors."""


class InvalidBirthData(XuanshuError, ValueError):
    """Birth date/time/location is malformed or out of range."""


class UnsupportedCalendarRange(InvalidBirthData):
    """Birth year falls outside the supported sexagenary/solar-term range."""

    def __init__(self, year: int, min_year: int, max_year: int):
        self.year = year
        self.min_year = min_year
        self.max_year = max_year
        super().__init__(
            f"Birth year {year} is outside the supported range {min_year}-{max_year}"
        )
