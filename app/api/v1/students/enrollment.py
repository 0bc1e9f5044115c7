"""
Enrollment number and default credential for new students.

Enrollment number format: last 2 digits of the enrollment year + gender code + 3-digit sequence.
    male,   2026, 3rd of the year -> 2601003
    female, 2026, 1st of the year -> 2602001
The sequence is per (year, gender) and only grows: next = highest existing + 1.
"""

from datetime import date
from typing import Iterable

from app.core.enums import Gender

GENDER_CODES = {
    Gender.MALE: "01",
    Gender.FEMALE: "02",
}


def enrollment_prefix(year: int, gender: Gender) -> str:
    return f"{year % 100:02d}{GENDER_CODES[Gender(gender)]}"


def next_enrollment_number(prefix: str, existing: Iterable[str]) -> str:
    sequences = [
        int(number[len(prefix):])
        for number in existing
        if number.startswith(prefix) and number[len(prefix):].isdigit()
    ]
    return f"{prefix}{max(sequences, default=0) + 1:03d}"


def default_password(birth_date: date) -> str:
    """Birth date as DDMMYY."""
    return birth_date.strftime("%d%m%y")
