# backend/helitrack/constants.py

"""
Global constants shared across modules: a single User-Agent string for
every outbound request and the unit-conversion factors used by the
provider normalizers.
"""

from __future__ import annotations

from typing import Final

USER_AGENT: Final = "helitrack/1.0 (+https://github.com/helitrack/helitrack)"

EARTH_RADIUS_KM: Final[float] = 6371.0
KM_TO_NM: Final[float] = 0.539957
M_TO_FT: Final[float] = 3.28084
MPS_TO_KT: Final[float] = 1.94384
