"""Confidence-weighted combination of module scores into one verdict."""
import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .config import AggregatorConfig
from .imaging import clamp_score
from .types import MODULE_NAMES, Verdict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Aggregate:
    """Combined score plus the intermediate values that produced it."""
    overall_score: float
    confidence: float
    verdict: Verdict
    weights: Dict[str, float]
    module_confidence: Dict[str, float]
    agreement: float


class Aggregator:
    """Combine the seven module scores.

    Each module's base weight is boosted by up to ``confidence_boost``
    in proportion to how far its score sits from 0.5, then all weights
    are renormalized to sum to 1. The overall score is the weighted sum.
    Confidence blends how many modules agree with the overall score and
    how decisive the modules are on average.
    """

    def __init__(self, config: Optional[AggregatorConfig] = None):
        self.config = config or AggregatorConfig()

    def combine(self, scores: Mapping[str, float]) -> Aggregate:
        missing = [name for name in MODULE_NAMES if name not in scores]
        if missing:
            raise ValueError(f"Missing module scores: {', '.join(missing)}")
        for name in MODULE_NAMES:
            if not 0.0 <= scores[name] <= 1.0:
                raise ValueError(f"{name} score {scores[name]} outside [0, 1]")

        cfg = self.config
        base = cfg.weights.as_dict()
        confidence = {name: abs(scores[name] - 0.5) * 2 for name in MODULE_NAMES}

        weights = self.adjust_weights(base, confidence)
        overall = clamp_score(sum(scores[name] * weights[name] for name in MODULE_NAMES))

        agreeing = sum(1 for name in MODULE_NAMES if abs(scores[name] - overall) <= cfg.agreement_band)
        agreement = agreeing / len(MODULE_NAMES)
        avg_confidence = sum(confidence.values()) / len(MODULE_NAMES)
        overall_confidence = agreement * cfg.agreement_weight + avg_confidence * cfg.confidence_weight

        verdict = self.verdict_for(overall, overall_confidence)
        logger.debug(
            "Aggregate score=%.3f confidence=%.3f agreement=%.2f verdict=%s",
            overall, overall_confidence, agreement, verdict.value,
        )

        return Aggregate(
            overall_score=overall,
            confidence=overall_confidence,
            verdict=verdict,
            weights=weights,
            module_confidence=confidence,
            agreement=agreement,
        )

    def adjust_weights(self, base: Mapping[str, float], confidence: Mapping[str, float]) -> Dict[str, float]:
        """Boost each weight by its module's confidence and renormalize.

        When no module has any confidence (every score exactly 0.5) the
        base weights are returned unchanged.
        """
        if sum(confidence.values()) == 0:
            return dict(base)

        boosted = {
            name: base[name] * (1 + confidence[name] * self.config.confidence_boost)
            for name in base
        }
        total = sum(boosted.values())
        return {name: w / total for name, w in boosted.items()}

    def verdict_for(self, overall_score: float, confidence: float) -> Verdict:
        cfg = self.config
        if overall_score > cfg.likely_ai_threshold:
            verdict = Verdict.LIKELY_AI
        elif overall_score > cfg.suspicious_threshold:
            verdict = Verdict.SUSPICIOUS
        else:
            verdict = Verdict.LIKELY_REAL

        # Don't call it AI on weak evidence
        if verdict is Verdict.LIKELY_AI and confidence < cfg.min_confidence:
            verdict = Verdict.SUSPICIOUS
        return verdict
