# utils/formatting.py
import math
import re
from datetime import date, datetime
from typing import Any, Optional

NOT_AVAILABLE = "N/A"


def parse_decimal(value: Any) -> Optional[float]:
    """
    Read a grade as sent by the API.

    Grades may come as numbers or as French-formatted strings ("12,5").
    Returns None when the value is missing or not a number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip().replace(",", "."))
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def format_grade(value: Any) -> str:
    number = parse_decimal(value)
    if number is None:
        return NOT_AVAILABLE
    return f"{number:.2f}"


def format_general_average(value: Any) -> str:
    number = parse_decimal(value)
    if number is None:
        return f"Moyenne générale: {NOT_AVAILABLE}"
    return f"Moyenne générale: {number:.2f}/20"


def format_credits(value: Any) -> str:
    """5.0 -> "5", 2.5 -> "2.5", missing -> "0"."""
    number = parse_decimal(value)
    if number is None:
        return "0"
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"


def clean_observation(text: Optional[str]) -> str:
    """Make free-text observations safe for the standard PDF fonts."""
    if not text:
        return ""
    text = text.replace("\r", " ")
    return re.sub(r"[^\x20-\x7E\xA0-\xFF]", " ", text)


def format_birth_date(value: Any) -> str:
    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    text = str(value).strip()
    # API dates look like "2001-04-17 00:00:00" or "2001-04-17T00:00:00"
    try:
        return datetime.fromisoformat(text.replace(" ", "T", 1)).strftime("%d/%m/%Y")
    except ValueError:
        return text


def safe_filename_part(text: Any) -> str:
    text = re.sub(r"\s+", "_", str(text or ""))
    return re.sub(r"[^a-zA-Z0-9_-]", "", text)
