import math
import random

import pytest

from coach_api.analysis.factory import get_analysis_provider
from coach_api.analysis.mock import (
    CLARITIES,
    METRICS,
    MODULATIONS,
    RATING_TABLE,
    SPEEDS,
    TONES,
    VOLUMES,
    RandomAnalysisProvider,
    build_suggestions,
    confidence_score,
)


def _expected_confidence(r: dict) -> int:
    total = (
        0.20 * r["tone"] + 0.15 * r["speed"] + 0.20 * r["clarity"]
        + 0.15 * r["volume"] + 0.15 * r["pauses"] + 0.15 * r["modulation"]
    )
    return max(0, min(100, math.floor(total + 0.5)))


@pytest.mark.parametrize("duration", [0.0, 5.5, 30.0, 30.01, 120.0])
def test_ratings_and_confidence_score(duration):
    provider = RandomAnalysisProvider(rng=random.Random(1234))
    for _ in range(50):
        result = provider.analyze(b"not really audio", duration)
        assert set(result.ratings.keys()) == set(METRICS)
        for metric in METRICS:
            value = result.ratings[metric]
            assert isinstance(value, int)
            assert 0 <= value <= 100
            assert value == RATING_TABLE[metric][getattr(result, metric)]
        assert result.confidence_score == _expected_confidence(result.ratings)
        assert result.duration == duration
        assert result.timestamp.endswith("Z")


def test_short_recordings_only_get_short_pause_labels():
    provider = RandomAnalysisProvider(rng=random.Random(7))
    seen = {provider.analyze(b"", 30).pauses for _ in range(200)}
    assert seen == {"too-few", "adequate"}


def test_long_recordings_only_get_long_pause_labels():
    provider = RandomAnalysisProvider(rng=random.Random(7))
    seen = {provider.analyze(b"", 31).pauses for _ in range(200)}
    assert seen == {"adequate", "good", "excellent"}


def test_labels_come_from_fixed_enumerations():
    provider = RandomAnalysisProvider(rng=random.Random(99))
    for _ in range(100):
        r = provider.analyze(b"", 10)
        assert r.tone in TONES
        assert r.speed in SPEEDS
        assert r.clarity in CLARITIES
        assert r.volume in VOLUMES
        assert r.modulation in MODULATIONS


def test_same_seed_same_labels():
    a = RandomAnalysisProvider(rng=random.Random(42)).analyze(b"", 45)
    b = RandomAnalysisProvider(rng=random.Random(42)).analyze(b"", 45)
    assert a.model_dump(exclude={"timestamp"}) == b.model_dump(exclude={"timestamp"})


def test_confidence_score_known_values():
    worst = {m: min(RATING_TABLE[m].values()) for m in METRICS}
    assert confidence_score(worst) == 57
    typical = {"tone": 75, "speed": 85, "clarity": 75, "volume": 85, "pauses": 75, "modulation": 80}
    assert confidence_score(typical) == 79


def test_multiple_suggestion_rules_fire():
    labels = {
        "tone": "nervous",
        "speed": "fast",
        "clarity": "needs-improvement",
        "volume": "too-loud",
        "pauses": "too-few",
        "modulation": "monotone",
    }
    suggestions = build_suggestions(labels)
    assert suggestions == [
        "Try slowing down slightly to improve clarity and impact.",
        "Practice deep breathing before speaking to project more confidence.",
        "Focus on enunciating each word clearly.",
        "Moderate your volume for better listener comfort.",
        "Add more strategic pauses to emphasize key points and improve comprehension.",
        "Vary your pitch and intonation to make your speech more engaging and dynamic.",
    ]


def test_no_suggestions_for_strong_recording():
    labels = {
        "tone": "confident",
        "speed": "normal",
        "clarity": "excellent",
        "volume": "good",
        "pauses": "excellent",
        "modulation": "excellent",
    }
    assert build_suggestions(labels) == []


@pytest.mark.parametrize("name", [None, "random", "mock", "unknown"])
def test_factory_returns_random_provider(name, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("ANALYSIS_PROVIDER", raising=False)
    assert isinstance(get_analysis_provider(name), RandomAnalysisProvider)
