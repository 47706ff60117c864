"""
TWA Synthetic Wellness - Guideline Flags & Composite Scores
===========================================================
Pure functions deriving the per-record compliance flags, the healthy-aging
profile and the Blue Zone similarity score. Same inputs always give the
same outputs.

Healthy-aging profile weights:
    behavioural 40%  (motion 15, diet 15, meditation 10)
    biological  40%  (biological age 20, mortality 20)
    psychosocial 20% (life satisfaction 10, purpose 10)
"""

from typing import Dict

from .config import CompositeScoring
from .models import BehaviorVector, OutcomeVector, SmokingStatus
from .sampling import clamp

DEFAULT_SCORING = CompositeScoring()


def compliance_flags(b: BehaviorVector, scoring: CompositeScoring = DEFAULT_SCORING) -> Dict[str, bool]:
    """Guideline flags keyed by their MonthlyRecord field names"""
    g = scoring.guidelines
    return {
        'meets_exercise_guidelines': b.motion_days_week >= g["exercise_days"],
        'meets_sleep_guidelines': (b.sleep_hours >= g["sleep_hours"]
                                   and b.sleep_quality_score >= g["sleep_quality"]),
        'high_diet_quality': b.diet_mediterranean_score >= g["diet_score"],
        'regular_meditation': b.meditation_minutes_week >= g["meditation_minutes"],
        'strong_social_support': b.social_connections_count >= g["social_connections"],
        'high_purpose': b.purpose_meaning_score >= g["purpose_score"],
    }


def healthy_aging_profile(b: BehaviorVector, o: OutcomeVector,
                          scoring: CompositeScoring = DEFAULT_SCORING) -> float:
    reference_age = scoring.healthy_aging_reference_age

    behavioral = (
        b.motion_days_week / 7 * 0.15
        + b.diet_mediterranean_score / 10 * 0.15
        + min(b.meditation_minutes_week, 300) / 300 * 0.10
    )
    biological = (
        max(0.0, (reference_age - o.biological_age_years) / reference_age) * 0.20
        + (1 - min(o.mortality_risk_score, 1.0)) * 0.20
    )
    psychosocial = (
        o.life_satisfaction_score / 10 * 0.10
        + b.purpose_meaning_score / 10 * 0.10
    )
    return clamp((behavioral + biological + psychosocial) * 100, 0.0, 100.0)


def blue_zone_similarity(b: BehaviorVector, scoring: CompositeScoring = DEFAULT_SCORING) -> float:
    """Mean of seven Blue Zone lifestyle factors, each in [0, 1], scaled to 0-100"""
    t = scoring.blue_zone_targets
    factors = [
        min(b.diet_mediterranean_score / t["diet_score"], 1.0),
        min(b.motion_days_week / t["motion_days"], 1.0),
        min(b.meditation_minutes_week / t["meditation_minutes"], 1.0),
        min(b.social_connections_count / t["social_connections"], 1.0),
        min(b.purpose_meaning_score / t["purpose_score"], 1.0),
        1.0 if b.alcohol_drinks_week <= t["max_alcohol_drinks"] else 0.0,
        1.0 if b.smoking_status == SmokingStatus.NEVER else 0.0,
    ]
    return sum(factors) / len(factors) * 100
