import re

import pandas as pd

from revenue_simulator.types import ConfigurationError

_MONTH_RE = re.compile(r"(\d{4})-(\d{2})")


def parse_start_month(start_month: str) -> pd.Period:
    match = _MONTH_RE.fullmatch(str(start_month))
    if match is None or not 1 <= int(match.group(2)) <= 12:
        raise ConfigurationError(f"start_month must look like 'YYYY-MM', got {start_month!r}")
    return pd.Period(start_month, freq="M")


def month_keys(start_month: str, months: int) -> list[str]:
    """Zero-padded ``YYYY-MM`` keys for ``months`` consecutive months."""
    start = parse_start_month(start_month)
    return pd.period_range(start=start, periods=months, freq="M").strftime("%Y-%m").tolist()


def month_key(start_month: str, offset: int) -> str:
    return (parse_start_month(start_month) + offset).strftime("%Y-%m")


def quarter_and_year(month_index: int, base_year: int) -> tuple[int, int]:
    # Quarters count from the simulation start: months 0-2 are Q1, 3-5 Q2, ...
    # and wrap every 12 months into the next year.
    quarter = (month_index % 12) // 3 + 1
    year = base_year + month_index // 12
    return quarter, year
