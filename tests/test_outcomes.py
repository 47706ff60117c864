"""
TWA Synthetic Wellness - Outcome Model Tests
============================================
Hand-computed checks of the aging, mortality, biomarker, functional,
cognitive and psychosocial formulas.
"""

from dataclasses import replace

import numpy as np
import pytest

from twa_synth.config import OutcomeEffects
from twa_synth.models import AgeGroup, Education, Gender, SmokingStatus
from twa_synth.outcomes import OutcomeModel


@pytest.fixture
def model():
    return OutcomeModel()


class TestBiologicalAge:
    """Threshold-triggered aging budget"""

    def test_neutral_behaviours_age_with_time(self, model, make_behaviors):
        """No thresholds crossed: one year of aging per twelve months"""
        assert model.annual_age_budget(make_behaviors()) == 0.0
        assert model.biological_age(make_behaviors(), 39.5, 12) == pytest.approx(40.5)

    def test_healthy_lifestyle_slows_aging(self, model, healthy_behaviors):
        """Protective effects sum, sleep effect scales with hours"""
        budget = -1.2 - 2.3 - 1.8 - 0.5 * 8.0 - 3.1 - 1.5
        assert model.annual_age_budget(healthy_behaviors) == pytest.approx(budget)
        assert model.biological_age(healthy_behaviors, 39.5, 12) == pytest.approx(39.5 + 1 + budget)

    def test_smoking_accelerates_aging(self, model, make_behaviors):
        """Current smokers gain 5.3 years per year"""
        smoker = make_behaviors(smoking_status=SmokingStatus.CURRENT)
        assert model.biological_age(smoker, 39.5, 12) == pytest.approx(45.8)

    def test_excess_risks(self, model, make_behaviors):
        """Alcohol above 14 and processed food above 10 add years"""
        b = make_behaviors(alcohol_drinks_week=15, processed_food_servings_week=11)
        assert model.annual_age_budget(b) == pytest.approx(2.1 + 1.7)
        at_limit = make_behaviors(alcohol_drinks_week=14, processed_food_servings_week=10)
        assert model.annual_age_budget(at_limit) == 0.0

    def test_floor_at_18(self, model, healthy_behaviors):
        """Biological age never drops below 18"""
        assert model.biological_age(healthy_behaviors, 21.0, 12) == 18.0

    def test_month_zero_is_baseline(self, model, healthy_behaviors, make_profile):
        """Acceleration is zero at the first observation"""
        o = model.generate_month(make_profile(), healthy_behaviors, 39.5, 0, np.random.default_rng(0))
        assert o.biological_age_years == pytest.approx(39.5)
        assert o.biological_age_acceleration == pytest.approx(0.0)


class TestMortality:
    """Hazard-ratio-like mortality score"""

    def test_regular_exercise_only(self, model, make_behaviors):
        expected = 0.72 * 1.1 ** ((40.5 - 30) / 10)
        assert model.mortality_risk(make_behaviors(), 40.5) == pytest.approx(expected)

    def test_smoking_and_isolation(self, model, make_behaviors):
        b = make_behaviors(motion_days_week=2, smoking_status=SmokingStatus.CURRENT,
                           social_connections_count=1)
        assert model.mortality_risk(b, 30.0) == pytest.approx(2.24 * 1.91)

    def test_upper_clamp(self, model, make_behaviors):
        b = make_behaviors(motion_days_week=0, smoking_status=SmokingStatus.CURRENT,
                           social_connections_count=0)
        assert model.mortality_risk(b, 200.0) == 10.0

    def test_lifespan_range(self, model, make_profile, make_behaviors):
        rng = np.random.default_rng(1)
        for _ in range(200):
            years = model.estimated_lifespan(make_profile(), 0.8, rng)
            assert 50 <= years <= 100


class TestBiomarkers:
    """Behaviour multipliers on age/gender baselines"""

    def test_exercise_lowers_crp_and_raises_igf1(self, model, make_profile, make_behaviors):
        base = model.biomarkers(make_profile(), make_behaviors(), np.random.default_rng(3))
        active = model.biomarkers(make_profile(), make_behaviors(motion_days_week=4),
                                  np.random.default_rng(3))
        assert active["crp"] / base["crp"] == pytest.approx(0.75)
        assert active["igf1"] / base["igf1"] == pytest.approx(1.15)
        assert active["il6"] == pytest.approx(base["il6"])

    def test_meditation_and_nature_lower_cortisol(self, model, make_profile, make_behaviors):
        base = model.biomarkers(make_profile(), make_behaviors(), np.random.default_rng(3))
        calm = model.biomarkers(make_profile(), make_behaviors(meditation_minutes_week=150,
                                                               nature_minutes_week=120),
                                np.random.default_rng(3))
        # Stress term: 10 - 60/30 - 60/60 = 7 versus 10 - 5 - 2 = 3
        expected = 0.70 * 0.70 * (1 + 0.3) / (1 + 0.7)
        assert calm["cortisol"] / base["cortisol"] == pytest.approx(expected)
        assert calm["il6"] / base["il6"] == pytest.approx(0.70)

    def test_female_baselines(self, model, make_profile, make_behaviors):
        """Female CRP baseline exceeds male at the same age and draw"""
        female = model.biomarkers(make_profile(gender=Gender.FEMALE), make_behaviors(),
                                  np.random.default_rng(0))
        male = model.biomarkers(make_profile(gender=Gender.MALE), make_behaviors(),
                                np.random.default_rng(0))
        # 2.5 + 9.5 * 0.05 versus 2.0 + 9.5 * 0.05
        assert female["crp"] / male["crp"] == pytest.approx(2.975 / 2.475)
        # IGF-1: 200 for men, 180 otherwise
        assert male["igf1"] / female["igf1"] == pytest.approx(181 / 161)


class TestFunctionalAndCognitive:
    """Functional measures, cognition and psychosocial scores"""

    def test_functional_baseline(self, model, make_profile, make_behaviors):
        m = model.functional_measures(make_profile(gender=Gender.MALE), make_behaviors())
        assert m["grip"] == pytest.approx(45 - 9.5 * 0.3)
        assert m["gait"] == pytest.approx(1.4 - 9.5 * 0.005)
        assert m["balance"] == pytest.approx(8 - 9.5 * 0.02)
        assert m["frailty"] == pytest.approx(0.095)

    def test_functional_multipliers(self, model, make_profile, healthy_behaviors):
        m = model.functional_measures(make_profile(gender=Gender.MALE), healthy_behaviors)
        assert m["grip"] == pytest.approx((45 - 2.85) * 1.15 * 1.05 * 1.05)
        assert m["frailty"] == pytest.approx(0.095 * 0.8 * 0.9 * 0.95 * 0.9)

    def test_young_frailty_floor(self, model, make_profile, make_behaviors):
        young = make_profile(age_group=AgeGroup.AGE_18_24, age_numeric=21.0)
        assert model.functional_measures(young, make_behaviors())["frailty"] == 0.0

    def test_cognitive_score(self, model, make_profile, make_behaviors):
        score = model.cognitive_score(make_profile(education=Education.BACHELOR_PLUS),
                                      make_behaviors(), 40.5)
        assert score == pytest.approx((100 - 10.5 * 0.5) * 1.1 + 6 + 6)

    def test_processing_speed(self, model, make_behaviors):
        assert model.processing_speed(make_behaviors(), 40.5) == pytest.approx(100 - 15.5 * 0.3)
        fast = make_behaviors(motion_days_week=4, hydration_cups_day=8, sleep_quality_score=7.0)
        assert model.processing_speed(fast, 40.5) == pytest.approx(((100 - 4.65) * 1.05 + 2) * 1.05)

    def test_psychosocial(self, model, make_behaviors):
        p = model.psychosocial(make_behaviors())
        assert p["satisfaction"] == pytest.approx(5.12)
        assert p["stress"] == pytest.approx(10 - 5.12 - 1.2)
        assert p["depression"] == pytest.approx((10 - 5.12 - 1.2) * 0.8 - 1.5)
        assert p["support"] == pytest.approx(6.0)

    def test_psychosocial_clamped(self, model, healthy_behaviors):
        p = model.psychosocial(healthy_behaviors)
        assert all(1 <= v <= 10 for v in p.values())


class TestEffectOverrides:
    """Effect sizes are read from configuration"""

    def test_custom_smoking_effect(self, make_behaviors):
        effects = OutcomeEffects()
        sizes = dict(effects.biological_age_effects, smoking_current=10.0)
        model = OutcomeModel(replace(effects, biological_age_effects=sizes))
        smoker = make_behaviors(smoking_status=SmokingStatus.CURRENT)
        assert model.biological_age(smoker, 40.0, 12) == pytest.approx(51.0)

    def test_outcomes_in_domain(self, make_profile, make_behaviors, healthy_behaviors):
        """Generated vectors always satisfy their own domains"""
        model = OutcomeModel()
        rng = np.random.default_rng(12)
        for b in (make_behaviors(), healthy_behaviors,
                  make_behaviors(smoking_status=SmokingStatus.CURRENT, social_connections_count=0)):
            for months in (0, 6, 24):
                o = model.generate_month(make_profile(), b, 39.5, months, rng)
                assert 0.1 <= o.mortality_risk_score <= 10
                assert 50 <= o.estimated_lifespan_years <= 100
