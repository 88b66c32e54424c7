"""Country code lookup backing the location search pickers.

Reads a JSON object mapping ISO 3166-1 alpha-2 codes to display names
(``{"FI": "Finland", ...}``).  Like the collection store, a missing or
unparsable file degrades to an empty mapping.
"""

from __future__ import annotations

import json
from pathlib import Path

from encore.utils.logging import get_logger

_logger = get_logger(__name__)


def load_countries(path: str | Path) -> dict[str, str]:
    """Return the code -> name mapping stored at *path*, sorted by name."""
    file_path = Path(path)
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        _logger.warning("countries_file_missing", path=str(file_path))
        return {}
    except (OSError, json.JSONDecodeError) as exc:
        _logger.warning("countries_file_unreadable", path=str(file_path), error=str(exc))
        return {}

    if not isinstance(raw, dict):
        _logger.warning("countries_file_unreadable", path=str(file_path), error="not an object")
        return {}

    countries = {str(code).upper(): str(name) for code, name in raw.items()}
    return dict(sorted(countries.items(), key=lambda item: item[1]))
