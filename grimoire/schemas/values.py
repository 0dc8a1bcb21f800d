# -*- coding: utf-8 -*-
"""On-demand decoding of characteristic/cost text.

Upstream data stores every value as text and sometimes puts placeholders
("-", "*", "D6", "Variable") into numeric fields, so decoding never raises.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional

_INT_RE = re.compile(r"^[+-]?\d+$")
_NUM_RE = re.compile(r"^[+-]?\d+(\.\d+)?$")


def parse_int(text: Any, default: int = 0) -> int:
    if text is None:
        return default
    s = str(text).strip()
    if not s or not _INT_RE.match(s):
        return default
    try:
        return int(s)
    except ValueError:
        return default


def parse_number(text: Any) -> Optional[float]:
    """Return int/float for plain numeric text ("20", "12.0"), else None."""
    if text is None:
        return None
    s = str(text).strip()
    if not s or not _NUM_RE.match(s):
        return None
    val = float(s)
    return int(val) if val.is_integer() else val


def parse_bool(text: Any) -> bool:
    return str(text or "").strip().lower() == "true"


def parse_keywords(text: Any) -> List[str]:
    s = str(text or "").strip()
    if not s or s == "-":
        return []
    return [part.strip() for part in s.split(",") if part.strip()]
