import os
from typing import Optional

from .base import AnalysisProvider
from .mock import RandomAnalysisProvider


def get_analysis_provider(provider: Optional[str] = None) -> AnalysisProvider:
    """Return an analysis provider based on env or explicit override.

    Env: ANALYSIS_PROVIDER, defaults to 'random'. Unknown names fall back to
    the random provider; there is no real signal-processing backend yet.
    """
    prov = (provider or os.getenv("ANALYSIS_PROVIDER", "").strip() or "random").lower()

    if prov in ("random", "mock", "test"):
        return RandomAnalysisProvider()

    # Unknown -> random
    return RandomAnalysisProvider()
