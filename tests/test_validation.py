"""
TWA Synthetic Wellness - Validation Tests
=========================================
Statistics on hand-built data and report behaviour at dataset scale.
"""

from dataclasses import replace
from datetime import date

import numpy as np
import pytest

from twa_synth.errors import InsufficientData
from twa_synth.generator import GenerationConfig, generate
from twa_synth.models import AgeGroup, MonthlyRecord, Season, SmokingStatus
from twa_synth.outcomes import OutcomeModel
from twa_synth.validation import (
    ReportAssessor, ValidationEngine, ValidationReport, ValidationSeverity,
    distribution_distance, linear_slope, mean_difference, pearson_correlation,
    population_variance,
)


@pytest.fixture(scope="module")
def dataset():
    return generate(GenerationConfig(subject_count=500, months=12), seed=7)


@pytest.fixture(scope="module")
def report(dataset):
    return ValidationEngine().validate(dataset)


def _record(profile, behaviors, month, season, bio_age, mortality=1.0):
    outcomes = OutcomeModel().generate_month(profile, behaviors, profile.age_numeric, 0,
                                             np.random.default_rng(0))
    outcomes = replace(outcomes, biological_age_years=bio_age, mortality_risk_score=mortality)
    return MonthlyRecord(
        subject_id=profile.subject_id,
        month=month,
        season=season,
        observation_date=date(2024, month + 1, 15),
        profile=profile,
        behaviors=behaviors,
        outcomes=outcomes,
        meets_exercise_guidelines=False,
        meets_sleep_guidelines=False,
        high_diet_quality=False,
        regular_meditation=False,
        strong_social_support=False,
        high_purpose=False,
        healthy_aging_profile=50.0,
        blue_zone_similarity_score=50.0,
    )


class TestStatistics:
    """First-principles statistics helpers"""

    def test_pearson(self):
        assert pearson_correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
        assert pearson_correlation([1, 2, 3], [6, 4, 2]) == pytest.approx(-1.0)
        assert pearson_correlation([1, 2, 3, 4], [1, 3, 2, 4]) == pytest.approx(0.8)

    def test_pearson_degenerate(self):
        """Empty, mismatched or constant input gives zero"""
        assert pearson_correlation([], []) == 0.0
        assert pearson_correlation([1, 2], [1, 2, 3]) == 0.0
        assert pearson_correlation([5, 5, 5], [1, 2, 3]) == 0.0

    def test_distribution_distance(self):
        assert distribution_distance({'a': 1, 'b': 1}, {'a': 3, 'b': 1}) == pytest.approx(0.25)
        assert distribution_distance({'a': 2}, {'b': 5}) == pytest.approx(1.0)
        assert distribution_distance({'a': 2, 'b': 6}, {'a': 1, 'b': 3}) == pytest.approx(0.0)

    def test_linear_slope(self):
        assert linear_slope([0, 1, 2], [1, 3, 5]) == pytest.approx(2.0)
        assert linear_slope([1, 1, 1], [1, 2, 3]) is None
        assert linear_slope([0], [1]) is None

    def test_variance_and_means(self):
        assert population_variance([1, 2, 3, 4]) == pytest.approx(1.25)
        assert mean_difference([3, 5], [1, 1]) == pytest.approx(3.0)
        assert mean_difference([], [1.0]) == 0.0


class TestValidationEngine:
    """Report on hand-built and generated data"""

    def test_empty_dataset(self):
        with pytest.raises(InsufficientData):
            ValidationEngine().validate([])

    def test_hand_built_longitudinal(self, make_profile, make_behaviors):
        """Known slopes, stability and seasonal spread"""
        a = make_profile(subject_id="SYNTH_000000")
        b = make_profile(subject_id="SYNTH_000001", age_group=AgeGroup.AGE_25_34, age_numeric=29.5)
        low = make_behaviors(motion_days_week=2, smoking_status=SmokingStatus.CURRENT)
        high = make_behaviors(motion_days_week=4)
        never_low = make_behaviors(motion_days_week=2)

        records = [
            _record(a, low, 0, Season.WINTER, 40.0, mortality=3.0),
            _record(a, high, 1, Season.SUMMER, 41.0, mortality=3.0),
            _record(b, never_low, 0, Season.WINTER, 30.0, mortality=1.0),
            _record(b, high, 1, Season.SUMMER, 30.5, mortality=1.0),
        ]
        report = ValidationEngine().validate(records)
        coherence = report.longitudinal_coherence

        # Winter mean motion 2, summer mean 4
        assert coherence.seasonal_variations == pytest.approx(1.0)
        assert coherence.aging_trajectories == pytest.approx((1.0 + 0.5) / 2)
        # motion [2, 4]: mean 3, variance 1
        assert coherence.behavior_stability == pytest.approx(1 - 1 / 9)
        # Current smoker mortality 3.0 vs never smokers (3.0, 1.0, 1.0)
        assert report.outcome_validity.mortality_risk_factors == pytest.approx(3.0 - 5.0 / 3)
        # No record below two exercise days
        assert report.outcome_validity.biological_age_effects == 0.0

    def test_single_month_has_no_trajectories(self):
        records = generate(GenerationConfig(subject_count=40, months=1), seed=3)
        coherence = ValidationEngine().validate(records).longitudinal_coherence
        assert coherence.aging_trajectories == 0.0
        assert coherence.behavior_stability == 0.0
        assert coherence.seasonal_variations == 0.0

    def test_accepts_iterators(self, dataset):
        """Any iterable of records is materialised once"""
        assert ValidationEngine().validate(iter(dataset[:120])) == ValidationEngine().validate(dataset[:120])

    def test_report_bounds(self, report):
        assert isinstance(report, ValidationReport)
        assert report.demographic_accuracy.age_distribution_ks_test >= 0
        for value in report.to_flat_dict().values():
            assert np.isfinite(value)
        assert report.longitudinal_coherence.behavior_stability <= 1

    def test_generated_structure(self, report):
        """Built-in dependencies show up in the statistics"""
        demo = report.demographic_accuracy
        behav = report.behavior_correlations
        assert demo.age_distribution_ks_test < 0.1
        assert demo.income_education_correlation > 0
        assert demo.fitness_age_relationship < 0
        assert behav.exercise_sleep_correlation > 0
        assert behav.diet_meditation_correlation > 0
        assert behav.social_purpose_correlation > 0
        assert report.outcome_validity.mortality_risk_factors > 0
        # Active subjects (4+ days) are biologically younger than inactive ones (<2)
        assert report.outcome_validity.biological_age_effects < 0
        assert report.longitudinal_coherence.seasonal_variations > 0.1

    def test_age_fit_improves_with_scale(self):
        """Larger samples track the expected age distribution more closely"""
        engine = ValidationEngine()
        small = engine.validate(generate(GenerationConfig(subject_count=20, months=1), seed=1))
        large = engine.validate(generate(GenerationConfig(subject_count=5000, months=1), seed=1))
        assert (large.demographic_accuracy.age_distribution_ks_test
                < small.demographic_accuracy.age_distribution_ks_test)


class TestReportAssessor:
    """Pass/fail thresholds on top of a report"""

    def test_twelve_checks(self, report):
        assessor = ReportAssessor()
        results = assessor.assess(report)
        assert len(results) == 12
        summary = assessor.get_summary()
        assert summary['total'] == 12
        assert summary['passed'] + summary['failed'] == 12
        assert summary['score'] == pytest.approx(summary['passed'] / 12 * 100)

    def test_rules(self, report):
        """KS passes below threshold; seasonal and stability on raw value; others on magnitude"""
        flat = report.to_flat_dict()
        results = {r.name: r.severity for r in ReportAssessor().assess(report)}

        ks_pass = flat['age_distribution_ks_test'] < 0.1
        assert (results['age_distribution_ks_test'] == ValidationSeverity.PASS) == ks_pass
        seasonal_pass = flat['seasonal_variations'] > 0.1
        assert (results['seasonal_variations'] == ValidationSeverity.PASS) == seasonal_pass
        fitness_pass = abs(flat['fitness_age_relationship']) > 0.2
        assert (results['fitness_age_relationship'] == ValidationSeverity.PASS) == fitness_pass

    def test_custom_thresholds(self, report):
        """Impossible thresholds fail every magnitude check"""
        thresholds = {name: 1e9 for name in report.to_flat_dict()}
        thresholds['age_distribution_ks_test'] = -1.0
        assessor = ReportAssessor(thresholds)
        assessor.assess(report)
        assert assessor.get_summary()['passed'] == 0
