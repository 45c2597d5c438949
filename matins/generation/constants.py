"""Shared constants for the AI-assisted generation path.

Constants
---------
MAX_GENERATION_ATTEMPTS : int
    Generate-then-validate cycles tried before the deterministic fallback.
MIN_TEMPERATURE : float
    Minimum sampling temperature accepted by OpenAI-compatible APIs (0.0).
MAX_TEMPERATURE : float
    Maximum sampling temperature accepted by OpenAI-compatible APIs (2.0).

"""

from __future__ import annotations

MAX_GENERATION_ATTEMPTS: int = 3

# Validation bounds for temperature (OpenAI API range)
MIN_TEMPERATURE: float = 0.0
MAX_TEMPERATURE: float = 2.0
