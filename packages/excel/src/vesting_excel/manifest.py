"""Distribution manifest reader.

Reads the issuer's allocation spreadsheet into ManifestEntry rows. The first
row of the sheet is the header; columns may appear in any order and extra
columns are ignored.

Expected header names (camelCase or snake_case):
    pool, wallet, tokens, lockupPerc, lockupMonths, vestingMonths
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from openpyxl import load_workbook
from pydantic import ValidationError

from vesting_domain.schemas import ManifestEntry

logger = logging.getLogger(__name__)


COLUMN_ALIASES = {
    "pool": "pool",
    "wallet": "wallet",
    "tokens": "tokens",
    "lockupperc": "lockup_perc",
    "lockup_perc": "lockup_perc",
    "lockupmonths": "lockup_months",
    "lockup_months": "lockup_months",
    "vestingmonths": "vesting_months",
    "vesting_months": "vesting_months",
}

REQUIRED_FIELDS = ("pool", "wallet", "tokens")


def _map_headers(header_row) -> Dict[int, str]:
    mapping = {}
    for idx, header in enumerate(header_row):
        if header is None:
            continue
        field = COLUMN_ALIASES.get(str(header).strip().lower())
        if field:
            mapping[idx] = field
    return mapping


def _cell_value(field: str, value):
    if value is None:
        return None
    if field == "tokens":
        # str() keeps the decimal digits Excel stored, not a binary float expansion
        return str(value).strip()
    if field in ("lockup_perc", "lockup_months", "vesting_months") and isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{field} must be a whole number, got {value}")
        return int(value)
    if isinstance(value, str):
        return value.strip()
    return value


def load_manifest(
    path: Union[str, Path],
    sheet_name: Optional[str] = None,
) -> List[ManifestEntry]:
    """Read manifest rows from an xlsx file.

    Args:
        path: Workbook path
        sheet_name: Sheet to read (default: first sheet)

    Returns:
        ManifestEntry per non-empty data row, in sheet order

    Raises:
        KeyError: If sheet_name does not exist
        ValueError: If required columns are missing or a row is invalid (row number included)
    """
    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb[sheet_name] if sheet_name else wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)

        header_row = next(rows, None)
        if header_row is None:
            raise ValueError(f"Manifest {path} is empty")

        columns = _map_headers(header_row)
        missing = [field for field in REQUIRED_FIELDS if field not in columns.values()]
        if missing:
            raise ValueError(f"Manifest {path} is missing required columns: {missing}")

        entries: List[ManifestEntry] = []
        for row_number, row in enumerate(rows, start=2):
            if row is None or all(value is None for value in row):
                continue
            data = {}
            for idx, field in columns.items():
                value = _cell_value(field, row[idx] if idx < len(row) else None)
                if value is not None:
                    data[field] = value
            try:
                entries.append(ManifestEntry.model_validate(data))
            except ValidationError as exc:
                raise ValueError(f"Invalid manifest row {row_number}: {exc}") from exc
    finally:
        wb.close()

    logger.info("Loaded %d manifest entries from %s", len(entries), path)
    return entries
