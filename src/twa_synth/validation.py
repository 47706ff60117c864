"""
TWA Synthetic Wellness - Validation Module
==========================================
Chain-of-Verification for synthetic data quality.

``ValidationEngine`` summarises a dataset into a ValidationReport of twelve
scalar statistics in four groups: demographic accuracy, behaviour
correlations, outcome validity and longitudinal coherence. It only measures;
``ReportAssessor`` applies pass/fail thresholds on top of a report.

All statistics are computed from first principles on numpy arrays:
Pearson correlation from centred sums of products, a KS-style maximum
absolute difference between category proportions, OLS slopes and
population variances.
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .config import ValidationBenchmarks
from .errors import InsufficientData
from .models import MonthlyRecord, Season, SmokingStatus

logger = logging.getLogger(__name__)


# ============================================================
# STATISTICS
# ============================================================

def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson r in [-1, 1]; 0.0 for empty, mismatched or constant input"""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if len(x) == 0 or len(x) != len(y):
        return 0.0
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return 0.0

    dx = x - x.mean()
    dy = y - y.mean()
    denominator = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
    if denominator == 0:
        return 0.0
    return float(np.clip(np.sum(dx * dy) / denominator, -1.0, 1.0))


def distribution_distance(observed: Mapping[str, float], expected: Mapping[str, float]) -> float:
    """
    Maximum absolute difference between category proportions.

    Both mappings hold counts (or weights); each is normalised by its own
    total and missing categories count as zero.
    """
    total_observed = sum(observed.values())
    total_expected = sum(expected.values())
    max_difference = 0.0
    for key in set(observed) | set(expected):
        observed_prop = observed.get(key, 0) / total_observed if total_observed else 0.0
        expected_prop = expected.get(key, 0) / total_expected if total_expected else 0.0
        max_difference = max(max_difference, abs(observed_prop - expected_prop))
    return max_difference


def linear_slope(x: Sequence[float], y: Sequence[float]) -> Optional[float]:
    """Ordinary least squares slope of y on x; None when x has no spread"""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if len(x) < 2 or len(x) != len(y) or np.ptp(x) == 0:
        return None
    dx = x - x.mean()
    return float(np.sum(dx * (y - y.mean())) / np.sum(dx * dx))


def population_variance(values: Sequence[float]) -> float:
    values = np.asarray(values, dtype=float)
    if len(values) == 0:
        return 0.0
    return float(np.mean((values - values.mean()) ** 2))


def mean_difference(group1: Sequence[float], group2: Sequence[float]) -> float:
    """mean(group1) - mean(group2), or 0.0 when either group is empty"""
    if len(group1) == 0 or len(group2) == 0:
        return 0.0
    return float(np.mean(group1) - np.mean(group2))


# ============================================================
# REPORT
# ============================================================

@dataclass(frozen=True)
class DemographicAccuracy:
    age_distribution_ks_test: float
    income_education_correlation: float
    fitness_age_relationship: float


@dataclass(frozen=True)
class BehaviorCorrelations:
    exercise_sleep_correlation: float
    diet_meditation_correlation: float
    social_purpose_correlation: float


@dataclass(frozen=True)
class OutcomeValidity:
    biological_age_effects: float
    mortality_risk_factors: float
    purpose_longevity_relationship: float


@dataclass(frozen=True)
class LongitudinalCoherence:
    seasonal_variations: float
    aging_trajectories: float
    behavior_stability: float


@dataclass(frozen=True)
class ValidationReport:
    demographic_accuracy: DemographicAccuracy
    behavior_correlations: BehaviorCorrelations
    outcome_validity: OutcomeValidity
    longitudinal_coherence: LongitudinalCoherence

    def __post_init__(self):
        """Chain-of-Verification: Validate constraints"""
        for name, value in self.to_flat_dict().items():
            assert np.isfinite(value), f"{name} is not finite: {value}"
        assert self.demographic_accuracy.age_distribution_ks_test >= 0
        assert self.longitudinal_coherence.seasonal_variations >= 0
        for name in ('income_education_correlation', 'fitness_age_relationship'):
            assert -1 <= getattr(self.demographic_accuracy, name) <= 1, f"{name} out of range"
        for name, value in asdict(self.behavior_correlations).items():
            assert -1 <= value <= 1, f"{name} out of range"

    def to_dict(self) -> dict:
        return asdict(self)

    def to_flat_dict(self) -> Dict[str, float]:
        flat: Dict[str, float] = {}
        for group in self.to_dict().values():
            flat.update(group)
        return flat


# ============================================================
# ENGINE
# ============================================================

class ValidationEngine:
    """Computes the ValidationReport for a generated dataset"""

    def __init__(self, benchmarks: ValidationBenchmarks = None):
        self.benchmarks = benchmarks or ValidationBenchmarks()

    def validate(self, records: Iterable[MonthlyRecord]) -> ValidationReport:
        """
        Raises:
            InsufficientData: if ``records`` is empty.
        """
        df = self._to_frame(records)
        if df.empty:
            raise InsufficientData("Cannot validate an empty dataset")

        logger.debug("Validating %d records for %d subjects", len(df), df['subject_id'].nunique())
        subjects = [group.sort_values('month') for _, group in df.groupby('subject_id', sort=False)]

        return ValidationReport(
            demographic_accuracy=self._demographic_accuracy(df),
            behavior_correlations=self._behavior_correlations(df),
            outcome_validity=self._outcome_validity(df),
            longitudinal_coherence=self._longitudinal_coherence(df, subjects),
        )

    @staticmethod
    def _to_frame(records: Iterable[MonthlyRecord]) -> pd.DataFrame:
        rows = [{
            'subject_id': r.subject_id,
            'month': r.month,
            'season': r.season.value,
            'age_group': r.profile.age_group.value,
            'age_numeric': r.profile.age_numeric,
            'education': r.profile.education.value,
            'income_numeric': r.profile.income_numeric,
            'fitness_level': r.profile.fitness_level.value,
            'motion': r.behaviors.motion_days_week,
            'sleep_quality': r.behaviors.sleep_quality_score,
            'diet': r.behaviors.diet_mediterranean_score,
            'meditation': r.behaviors.meditation_minutes_week,
            'social': r.behaviors.social_connections_count,
            'purpose': r.behaviors.purpose_meaning_score,
            'smoking': r.behaviors.smoking_status.value,
            'bio_age': r.outcomes.biological_age_years,
            'mortality': r.outcomes.mortality_risk_score,
            'lifespan': r.outcomes.estimated_lifespan_years,
        } for r in records]
        return pd.DataFrame(rows)

    def _demographic_accuracy(self, df: pd.DataFrame) -> DemographicAccuracy:
        # First record per subject supplies the profile
        profiles = df.drop_duplicates('subject_id', keep='first')
        bm = self.benchmarks

        observed = profiles['age_group'].value_counts().to_dict()
        return DemographicAccuracy(
            age_distribution_ks_test=distribution_distance(observed, bm.expected_age_distribution),
            income_education_correlation=pearson_correlation(
                profiles['income_numeric'], profiles['education'].map(dict(bm.education_ordinal))),
            fitness_age_relationship=pearson_correlation(
                profiles['age_numeric'], profiles['fitness_level'].map(dict(bm.fitness_ordinal))),
        )

    @staticmethod
    def _behavior_correlations(df: pd.DataFrame) -> BehaviorCorrelations:
        return BehaviorCorrelations(
            exercise_sleep_correlation=pearson_correlation(df['motion'], df['sleep_quality']),
            diet_meditation_correlation=pearson_correlation(df['diet'], df['meditation']),
            social_purpose_correlation=pearson_correlation(df['social'], df['purpose']),
        )

    def _outcome_validity(self, df: pd.DataFrame) -> OutcomeValidity:
        bm = self.benchmarks
        high_motion = df.loc[df['motion'] >= bm.high_motion_days, 'bio_age']
        low_motion = df.loc[df['motion'] < bm.low_motion_days, 'bio_age']
        smokers = df.loc[df['smoking'] == SmokingStatus.CURRENT.value, 'mortality']
        never_smoked = df.loc[df['smoking'] == SmokingStatus.NEVER.value, 'mortality']
        high_purpose = df.loc[df['purpose'] >= bm.high_purpose_score, 'lifespan']
        low_purpose = df.loc[df['purpose'] <= bm.low_purpose_score, 'lifespan']

        return OutcomeValidity(
            biological_age_effects=mean_difference(high_motion, low_motion),
            mortality_risk_factors=mean_difference(smokers, never_smoked),
            purpose_longevity_relationship=mean_difference(high_purpose, low_purpose),
        )

    @staticmethod
    def _longitudinal_coherence(df: pd.DataFrame, subjects: List[pd.DataFrame]) -> LongitudinalCoherence:
        # Spread of mean exercise days across the seasons present in the data
        season_order = [s.value for s in Season]
        season_means = df.groupby('season')['motion'].mean()
        season_means = season_means.reindex([s for s in season_order if s in season_means.index])
        seasonal = float(np.sqrt(population_variance(season_means.to_numpy())))

        slopes = []
        stabilities = []
        for group in subjects:
            if len(group) < 2:
                continue
            slope = linear_slope(group['month'], group['bio_age'])
            if slope is not None:
                slopes.append(slope)

            motion = group['motion'].to_numpy(dtype=float)
            mean = motion.mean()
            stabilities.append(1 - population_variance(motion) / mean ** 2 if mean > 0 else 0.0)

        return LongitudinalCoherence(
            seasonal_variations=seasonal,
            aging_trajectories=float(np.mean(slopes)) if slopes else 0.0,
            behavior_stability=float(np.mean(stabilities)) if stabilities else 0.0,
        )


# ============================================================
# PASS / FAIL ASSESSMENT
# ============================================================

class ValidationSeverity(Enum):
    PASS = "✅ PASS"
    FAIL = "❌ FAIL"


@dataclass
class ValidationResult:
    name: str
    severity: ValidationSeverity
    message: str
    expected: Optional[str] = None
    actual: Optional[str] = None


# Metrics judged on their raw value rather than magnitude
_BELOW_THRESHOLD = {'age_distribution_ks_test'}
_RAW_ABOVE_THRESHOLD = {'seasonal_variations', 'behavior_stability'}


class ReportAssessor:
    """Applies dashboard pass thresholds to a ValidationReport"""

    def __init__(self, thresholds: Mapping[str, float] = None):
        self.thresholds = thresholds if thresholds is not None else ValidationBenchmarks().pass_thresholds
        self.results: List[ValidationResult] = []

    def assess(self, report: ValidationReport) -> List[ValidationResult]:
        self.results = []
        for name, value in report.to_flat_dict().items():
            threshold = self.thresholds[name]
            if name in _BELOW_THRESHOLD:
                passed, rule = value < threshold, f"< {threshold}"
            elif name in _RAW_ABOVE_THRESHOLD:
                passed, rule = value > threshold, f"> {threshold}"
            else:
                passed, rule = abs(value) > threshold, f"|x| > {threshold}"

            self.results.append(ValidationResult(
                name=name,
                severity=ValidationSeverity.PASS if passed else ValidationSeverity.FAIL,
                message=f"{value:.4f} ({rule})",
                expected=rule,
                actual=f"{value:.4f}",
            ))
        return self.results

    def get_summary(self) -> Dict:
        total = len(self.results)
        passed = sum(1 for r in self.results if r.severity == ValidationSeverity.PASS)
        return {
            'total': total,
            'passed': passed,
            'failed': total - passed,
            'score': passed / total * 100 if total else 0.0,
        }
