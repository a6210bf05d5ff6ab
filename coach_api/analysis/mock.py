import random
from typing import Dict, List, Optional

from coach_api.schemas import AnalysisResult
from coach_api.store import utc_now_iso

from .base import AnalysisProvider


TONES = ["confident", "nervous", "calm", "enthusiastic"]
SPEEDS = ["slow", "normal", "fast"]
CLARITIES = ["excellent", "good", "needs-improvement"]
VOLUMES = ["too-quiet", "good", "too-loud"]
SHORT_PAUSES = ["too-few", "adequate"]
LONG_PAUSES = ["adequate", "good", "excellent"]
MODULATIONS = ["monotone", "needs-improvement", "good", "excellent"]

# Clips longer than this many seconds draw from LONG_PAUSES
PAUSE_DURATION_THRESHOLD = 30

METRICS = ("tone", "speed", "clarity", "volume", "pauses", "modulation")

RATING_TABLE: Dict[str, Dict[str, int]] = {
    "tone": {"confident": 85, "enthusiastic": 80, "calm": 75, "nervous": 60},
    "speed": {"normal": 85, "slow": 70, "fast": 65},
    "clarity": {"excellent": 90, "good": 75, "needs-improvement": 55},
    "volume": {"good": 85, "too-loud": 70, "too-quiet": 60},
    "pauses": {"excellent": 90, "good": 85, "adequate": 75, "too-few": 55},
    "modulation": {"excellent": 90, "good": 80, "needs-improvement": 60, "monotone": 45},
}

CONFIDENCE_WEIGHTS: Dict[str, float] = {
    "tone": 0.20,
    "speed": 0.15,
    "clarity": 0.20,
    "volume": 0.15,
    "pauses": 0.15,
    "modulation": 0.15,
}


def pause_choices(duration: float) -> List[str]:
    return LONG_PAUSES if duration > PAUSE_DURATION_THRESHOLD else SHORT_PAUSES


def rate_labels(labels: Dict[str, str]) -> Dict[str, int]:
    return {metric: RATING_TABLE[metric][labels[metric]] for metric in METRICS}


def confidence_score(ratings: Dict[str, int]) -> int:
    total = sum(ratings[metric] * weight for metric, weight in CONFIDENCE_WEIGHTS.items())
    # half-up rounding
    score = int(total + 0.5)
    return max(0, min(100, score))


def build_suggestions(labels: Dict[str, str]) -> List[str]:
    suggestions: List[str] = []
    if labels["speed"] == "fast":
        suggestions.append("Try slowing down slightly to improve clarity and impact.")
    if labels["tone"] == "nervous":
        suggestions.append("Practice deep breathing before speaking to project more confidence.")
    if labels["clarity"] == "needs-improvement":
        suggestions.append("Focus on enunciating each word clearly.")
    if labels["volume"] == "too-quiet":
        suggestions.append("Speak up to ensure your message is heard clearly.")
    if labels["volume"] == "too-loud":
        suggestions.append("Moderate your volume for better listener comfort.")
    if labels["pauses"] == "too-few":
        suggestions.append("Add more strategic pauses to emphasize key points and improve comprehension.")
    if labels["modulation"] in ("monotone", "needs-improvement"):
        suggestions.append("Vary your pitch and intonation to make your speech more engaging and dynamic.")
    return suggestions


class RandomAnalysisProvider(AnalysisProvider):
    """Mock analysis: picks one label per metric uniformly at random.

    The audio content is ignored; duration only decides which pause labels
    are eligible.
    """

    provider_name: str = "random"

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def analyze(self, audio: bytes, duration: float) -> AnalysisResult:
        labels = {
            "tone": self._rng.choice(TONES),
            "speed": self._rng.choice(SPEEDS),
            "clarity": self._rng.choice(CLARITIES),
            "volume": self._rng.choice(VOLUMES),
            "pauses": self._rng.choice(pause_choices(duration)),
            "modulation": self._rng.choice(MODULATIONS),
        }
        ratings = rate_labels(labels)
        return AnalysisResult(
            **labels,
            ratings=ratings,
            suggestions=build_suggestions(labels),
            confidence_score=confidence_score(ratings),
            duration=duration,
            timestamp=utc_now_iso(),
        )
