from __future__ import annotations

import abc

from coach_api.schemas import AnalysisResult


class AnalysisProvider(abc.ABC):
    """Turns a submitted audio clip into an AnalysisResult.

    Implementations must always succeed for any buffer; callers treat an
    exception here as an internal error.
    """

    provider_name: str = "unknown"

    @abc.abstractmethod
    def analyze(self, audio: bytes, duration: float) -> AnalysisResult:
        ...
