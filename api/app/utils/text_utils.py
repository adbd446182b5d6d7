"""
Text utility functions for spreadsheet cells and list-valued fields.
"""
import math
from typing import Any, Iterable, List, Optional

LIST_SEPARATOR = "; "


def is_blank(value: Any) -> bool:
    """
    Check whether a cell value counts as empty.

    0 and False are real values, only None, NaN and whitespace-only strings are blank.

    Args:
        value: Raw cell value

    Returns:
        True if the value is missing
    """
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def cell_text(value: Any) -> str:
    """
    Convert a cell value to a stripped string; blank cells become "".

    Whole floats lose their decimal part (openpyxl hands back 600.0 for 600).
    """
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_optional_int(value: Any) -> Optional[int]:
    """Parse an integer cell; blank, non-numeric and non-finite cells give None."""
    if is_blank(value) or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def parse_yes_no(value: Any) -> bool:
    """'Yes', 'true', 'y', '1' and True are truthy, anything else is False."""
    if isinstance(value, bool):
        return value
    return cell_text(value).lower() in ("yes", "y", "true", "1")


def split_list(value: Any) -> List[str]:
    """
    Split a '; '-joined cell into its items.

    Args:
        value: Cell value, or an already split list

    Returns:
        Stripped, non-empty items
    """
    if isinstance(value, (list, tuple)):
        return [cell_text(item) for item in value if not is_blank(item)]
    return [part.strip() for part in cell_text(value).split(";") if part.strip()]


def join_list(items: Optional[Iterable[Any]]) -> str:
    """Join list items for a single cell."""
    if not items:
        return ""
    return LIST_SEPARATOR.join(str(item) for item in items)
