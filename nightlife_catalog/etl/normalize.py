"""Name normalization, proximity checks and tolerant scalar coercion."""

import math
import unicodedata
from typing import Any, Optional

from nightlife_catalog.models import Coordinates

# ~60 m at Kraków's latitude
DEFAULT_COORD_EPSILON = 0.0006


def normalize_name(value: Any) -> str:
    """Lower-case, strip diacritics and trim; ``None`` becomes an empty string."""
    if value is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value).lower())
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return stripped.strip()


def near(a: Coordinates, b: Coordinates, epsilon: float = DEFAULT_COORD_EPSILON) -> bool:
    """Planar distance check in degrees. Good enough at city scale, not geodesic."""
    return math.hypot(a.latitude - b.latitude, a.longitude - b.longitude) < epsilon


def strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def safe_float(value: Any) -> Optional[float]:
    try:
        if value is None or isinstance(value, bool):
            return None
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None
        return int(value)

    if isinstance(value, str):
        digits = "".join(ch for ch in value if ch.isdigit())
        if digits:
            return int(digits)
    return None
