"""
TWA Synthetic Wellness - Outcome Model
======================================
Derives aging, biomarker, functional, cognitive and psychosocial outcomes
from a subject's profile, the current month's behaviours and elapsed time.

Biological age model:
    bio_age = max(18, baseline + months/12 + (annual_budget / 12) * months)

where ``annual_budget`` is the sum of threshold-triggered effect sizes
(negative slows aging). Mortality risk multiplies hazard-ratio-like factors
onto 1.0 together with an exponential age term 1.1^((bio_age - 30) / 10).

Biomarker and functional baselines follow the profile's age midpoint;
cognitive measures follow biological age.
"""

from typing import Dict

import numpy as np

from .config import OutcomeEffects
from .models import BehaviorVector, Gender, OutcomeVector, SmokingStatus, SubjectProfile
from .sampling import clamp, uniform_noise


class OutcomeModel:
    """
    Maps (profile, behaviours, baseline age, months elapsed) to an OutcomeVector.

    Two uniform draws are consumed per call: one shared biomarker variation
    factor and one lifespan variation factor.
    """

    def __init__(self, effects: OutcomeEffects = None):
        self.effects = effects or OutcomeEffects()

    def generate_month(
        self,
        profile: SubjectProfile,
        behaviors: BehaviorVector,
        baseline_age: float,
        months_elapsed: int,
        rng: np.random.Generator,
    ) -> OutcomeVector:
        bio_age = self.biological_age(behaviors, baseline_age, months_elapsed)
        mortality = self.mortality_risk(behaviors, bio_age)
        biomarkers = self.biomarkers(profile, behaviors, rng)
        functional = self.functional_measures(profile, behaviors)
        psychosocial = self.psychosocial(behaviors)
        lifespan = self.estimated_lifespan(profile, mortality, rng)

        return OutcomeVector(
            biological_age_years=bio_age,
            biological_age_acceleration=bio_age - baseline_age,
            mortality_risk_score=mortality,
            estimated_lifespan_years=lifespan,
            crp_mg_l=biomarkers["crp"],
            il6_pg_ml=biomarkers["il6"],
            igf1_ng_ml=biomarkers["igf1"],
            gdf15_pg_ml=biomarkers["gdf15"],
            cortisol_ug_dl=biomarkers["cortisol"],
            grip_strength_kg=functional["grip"],
            gait_speed_ms=functional["gait"],
            balance_score=functional["balance"],
            frailty_index=functional["frailty"],
            cognitive_composite_score=self.cognitive_score(profile, behaviors, bio_age),
            processing_speed_score=self.processing_speed(behaviors, bio_age),
            life_satisfaction_score=psychosocial["satisfaction"],
            stress_level_score=psychosocial["stress"],
            depression_risk_score=psychosocial["depression"],
            social_support_score=psychosocial["support"],
        )

    # ============================================================
    # AGING & MORTALITY
    # ============================================================

    def annual_age_budget(self, b: BehaviorVector) -> float:
        """Years of biological aging added (positive) or removed per year"""
        fx = self.effects.biological_age_effects
        th = self.effects.thresholds
        budget = 0.0

        if b.motion_days_week >= th["motion_high"]:
            budget += fx["motion_high"]
        if b.diet_mediterranean_score >= th["diet_high"]:
            budget += fx["diet_mediterranean"]
        if b.meditation_minutes_week >= th["meditation_regular"]:
            budget += fx["meditation_regular"]
        if b.sleep_quality_score >= th["sleep_quality_good"]:
            budget += fx["sleep_quality_per_hour"] * b.sleep_hours
        if b.purpose_meaning_score >= th["purpose_high"]:
            budget += fx["purpose_high"]
        if b.social_connections_count >= th["social_connected"]:
            budget += fx["social_connected"]

        if b.smoking_status == SmokingStatus.CURRENT:
            budget += fx["smoking_current"]
        if b.alcohol_drinks_week > th["alcohol_excess"]:
            budget += fx["alcohol_excess"]
        if b.processed_food_servings_week > th["processed_excess"]:
            budget += fx["processed_foods"]

        return budget

    def biological_age(self, b: BehaviorVector, baseline_age: float, months_elapsed: int) -> float:
        budget = self.annual_age_budget(b)
        bio_age = baseline_age + months_elapsed / 12 + budget / 12 * months_elapsed
        return max(self.effects.minimum_biological_age, bio_age)

    def mortality_risk(self, b: BehaviorVector, bio_age: float) -> float:
        fx = self.effects.mortality_risk_effects
        th = self.effects.thresholds
        risk = 1.0

        if b.purpose_meaning_score >= th["purpose_high"]:
            risk *= fx["purpose_high"]
        if b.motion_days_week >= th["motion_regular"]:
            risk *= fx["exercise_regular"]
        if b.diet_mediterranean_score >= th["diet_high"]:
            risk *= fx["diet_quality_high"]
        if b.meditation_minutes_week >= th["meditation_regular"]:
            risk *= fx["meditation_practice"]
        if b.smoking_status == SmokingStatus.CURRENT:
            risk *= fx["smoking_current"]
        if b.social_connections_count < th["social_isolated"]:
            risk *= fx["social_isolated"]

        risk *= self.effects.mortality_age_base ** ((bio_age - 30) / 10)
        low, high = self.effects.mortality_bounds
        return clamp(risk, low, high)

    def estimated_lifespan(self, profile: SubjectProfile, mortality: float,
                           rng: np.random.Generator) -> float:
        lifespans = self.effects.baseline_lifespan
        base = lifespans.get(profile.gender.value, lifespans["default"])
        variation = uniform_noise(rng, *self.effects.lifespan_noise)
        return clamp(base / mortality * variation, 50, 100)

    # ============================================================
    # BIOMARKERS
    # ============================================================

    def biomarkers(self, profile: SubjectProfile, b: BehaviorVector,
                   rng: np.random.Generator) -> Dict[str, float]:
        fx = self.effects.biomarker_effects
        th = self.effects.thresholds
        age_over_30 = profile.age_numeric - 30
        female = profile.gender == Gender.FEMALE
        male = profile.gender == Gender.MALE

        crp = (2.5 if female else 2.0) + age_over_30 * 0.05
        il6 = (1.8 if female else 1.5) + age_over_30 * 0.03
        igf1 = max(100.0, (200 if male else 180) - age_over_30 * 2)
        gdf15 = (800 if female else 700) + age_over_30 * 15
        cortisol = (12 if female else 10) + age_over_30 * 0.1

        if b.motion_days_week >= th["motion_high"]:
            crp *= fx["crp_exercise"]
            igf1 *= fx["igf1_exercise"]
        if b.meditation_minutes_week >= th["meditation_regular"]:
            il6 *= fx["il6_meditation"]
            cortisol *= fx["cortisol_meditation"]
        if b.nature_minutes_week >= th["nature_regular"]:
            cortisol *= fx["cortisol_nature"]
        if b.diet_mediterranean_score >= th["diet_high"]:
            crp *= fx["crp_diet"]
            il6 *= fx["il6_diet"]

        stress = max(0.0, 10 - b.meditation_minutes_week / 30 - b.nature_minutes_week / 60)
        cortisol *= 1 + stress * fx["cortisol_per_stress_point"]

        variation = uniform_noise(rng, *self.effects.biomarker_noise)
        return {
            "crp": max(0.1, crp * variation),
            "il6": max(0.1, il6 * variation),
            "igf1": max(50.0, igf1 * variation),
            "gdf15": max(100.0, gdf15 * variation),
            "cortisol": max(5.0, cortisol * variation),
        }

    # ============================================================
    # FUNCTIONAL & COGNITIVE
    # ============================================================

    def functional_measures(self, profile: SubjectProfile, b: BehaviorVector) -> Dict[str, float]:
        fx = self.effects.functional_effects
        th = self.effects.thresholds
        age_over_30 = profile.age_numeric - 30

        measures = {
            "grip": max(10.0, (45 if profile.gender == Gender.MALE else 28) - age_over_30 * 0.3),
            "gait": max(0.5, 1.4 - age_over_30 * 0.005),
            "balance": max(1.0, 8 - age_over_30 * 0.02),
            "frailty": clamp(age_over_30 * 0.01, 0.0, 1.0),
        }

        active = []
        if b.motion_days_week >= th["motion_high"]:
            active.append("exercise")
        if b.diet_mediterranean_score >= th["diet_high"]:
            active.append("diet")
        if b.sleep_quality_score >= th["sleep_quality_good"]:
            active.append("sleep")
        if b.social_connections_count >= th["social_connected"]:
            active.append("social")

        for name in active:
            for measure, multiplier in fx[name].items():
                measures[measure] *= multiplier

        measures["grip"] = max(10.0, measures["grip"])
        measures["gait"] = max(0.5, measures["gait"])
        measures["balance"] = clamp(measures["balance"], 1.0, 10.0)
        measures["frailty"] = clamp(measures["frailty"], 0.0, 1.0)
        return measures

    def cognitive_score(self, profile: SubjectProfile, b: BehaviorVector, bio_age: float) -> float:
        score = 100 - (bio_age - 30) * 0.5
        score *= self.effects.education_cognitive[profile.education.value]
        if b.motion_days_week >= self.effects.thresholds["motion_high"]:
            score *= 1.1
        score += b.meditation_minutes_week * 0.1
        score += b.social_connections_count * 2
        return clamp(score, 50.0, 150.0)

    def processing_speed(self, b: BehaviorVector, bio_age: float) -> float:
        th = self.effects.thresholds
        speed = 100 - (bio_age - 25) * 0.3
        if b.motion_days_week >= th["motion_high"]:
            speed *= 1.05
        speed += b.hydration_cups_day - 6
        if b.sleep_quality_score >= th["sleep_quality_good"]:
            speed *= 1.05
        return clamp(speed, 50.0, 150.0)

    # ============================================================
    # PSYCHOSOCIAL
    # ============================================================

    def psychosocial(self, b: BehaviorVector) -> Dict[str, float]:
        satisfaction = (
            5
            + (b.purpose_meaning_score - 5) * 0.3
            + (b.social_connections_count - 3) * 0.2
            + (b.motion_days_week - 3) * 0.1
            + b.meditation_minutes_week / 100 * 0.2
        )
        stress = max(1.0, 10 - satisfaction - b.meditation_minutes_week / 50)
        depression = max(1.0, stress * 0.8 - b.social_connections_count * 0.5)
        support = min(10.0, b.social_connections_count * 1.5 + b.purpose_meaning_score * 0.3)

        return {
            "satisfaction": clamp(satisfaction, 1.0, 10.0),
            "stress": clamp(stress, 1.0, 10.0),
            "depression": clamp(depression, 1.0, 10.0),
            "support": clamp(support, 1.0, 10.0),
        }
