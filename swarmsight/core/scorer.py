"""Scorer Module - Derives a risk score from a severity tally."""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple

from .checker import Severity


# (minimum score, rating) checked from the top down.
RATING_THRESHOLDS: List[Tuple[int, str]] = [
    (90, "Excellent"),
    (75, "Good"),
    (50, "Fair"),
    (25, "Poor"),
]
LOWEST_RATING = "Critical"


@dataclass(frozen=True)
class RiskScore:
    """Risk score for a scan."""
    score: int  # 0-100
    rating: str
    deduction: float = 0.0

    @property
    def color(self) -> str:
        """Get console color for the score."""
        if self.score >= 90:
            return "green"
        elif self.score >= 75:
            return "green"
        elif self.score >= 50:
            return "yellow"
        elif self.score >= 25:
            return "orange1"
        else:
            return "red"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "score": self.score,
            "rating": self.rating,
            "deduction": self.deduction,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RiskScore":
        """Create score from dictionary."""
        return cls(
            score=int(data["score"]),
            rating=data["rating"],
            deduction=float(data.get("deduction", 0.0)),
        )


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class Scorer:
    """Calculates the risk score from the five severity counts.

    The score is a pure function of the counts::

        deduction = critical*20 + high*10 + medium*5 + low*1 + info*0.5
        raw = clamp(100 - deduction, 0, 100)
        score = round(clamp(raw * 1.2, 0, 100))

    The rating is read from the unscaled ``raw`` value, so a single critical
    finding scores 96 but rates "Good". Zero findings always score 100
    ("Excellent").
    """

    SCALE = 1.2

    def calculate(self, counts: Mapping[Severity, int]) -> RiskScore:
        """Calculate the score from severity counts.

        Args:
            counts: Count per severity; missing severities count as zero and
                UNKNOWN does not affect the score

        Returns:
            RiskScore with score and rating
        """
        scored = {s: int(counts.get(s, 0)) for s in Severity.known()}
        if sum(scored.values()) == 0:
            return RiskScore(score=100, rating=self.rating_for(100), deduction=0.0)

        deduction = sum(severity.weight * count for severity, count in scored.items())
        raw = _clamp(100.0 - deduction)
        score = _round_half_up(_clamp(raw * self.SCALE))

        return RiskScore(score=score, rating=self.rating_for(_round_half_up(raw)), deduction=deduction)

    @staticmethod
    def rating_for(score: int) -> str:
        """Get rating label for a score."""
        for minimum, rating in RATING_THRESHOLDS:
            if score >= minimum:
                return rating
        return LOWEST_RATING
