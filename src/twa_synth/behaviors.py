"""
TWA Synthetic Wellness - Behaviour Sampler
==========================================
Produces one month of lifestyle behaviours for a subject.

Each continuous field is built the same way:

    clamp(base * demographic factors * season * prior field * noise, lo, hi)

and then rounded (integers half-up, one-decimal fields half-up to 0.1).
Fields are generated in dependency order so later behaviours can read
earlier ones: motion feeds sleep and diet, sleep quality feeds hydration,
diet feeds meditation and the do-less fields, social ties and meditation
feed purpose.
"""

from typing import Dict

import numpy as np

from .config import BehaviorEffects
from .models import BehaviorVector, Season, SmokingStatus, SubjectProfile
from .sampling import clamp, round_half_up, uniform_noise, weighted_choice


class BehaviorSampler:
    """Monthly behaviour generator conditioned on profile and season"""

    def __init__(self, effects: BehaviorEffects = None):
        self.effects = effects or BehaviorEffects()

    def _noise(self, name: str, rng: np.random.Generator) -> float:
        low, high = self.effects.noise_ranges[name]
        return uniform_noise(rng, low, high)

    def _edu(self, name: str, profile: SubjectProfile) -> float:
        return self.effects.education_effects[name][profile.education.value]

    def generate_month(
        self,
        profile: SubjectProfile,
        month_index: int,
        season: Season,
        rng: np.random.Generator,
    ) -> BehaviorVector:
        """
        Sample behaviours for one subject-month.

        ``month_index`` is part of the call signature for callers that track
        time; behaviour does not drift with it.
        """
        seasonal = self.effects.seasonal_factors[season.value]

        motion = self._motion(profile, seasonal, rng)
        sleep_hours, sleep_quality = self._sleep(profile, motion, rng)
        hydration = self._hydration(profile, sleep_quality, rng)
        diet = self._diet(profile, motion, rng)
        meditation = self._meditation(profile, diet, rng)

        smoking = self._smoking(profile, rng)
        alcohol = self._alcohol(profile, smoking, rng)
        sugar = self._sugar(profile, diet, rng)
        sodium = self._sodium(profile, diet, rng)
        processed = self._processed_food(profile, diet, rng)

        social = self._social(profile, rng)
        nature = self._nature(profile, seasonal, rng)
        cultural = self._cultural(profile, rng)
        purpose = self._purpose(profile, social, meditation, rng)

        return BehaviorVector(
            motion_days_week=motion,
            sleep_hours=sleep_hours,
            sleep_quality_score=sleep_quality,
            hydration_cups_day=hydration,
            diet_mediterranean_score=diet,
            meditation_minutes_week=meditation,
            smoking_status=smoking,
            alcohol_drinks_week=alcohol,
            added_sugar_grams_day=sugar,
            sodium_grams_day=sodium,
            processed_food_servings_week=processed,
            social_connections_count=social,
            nature_minutes_week=nature,
            cultural_hours_week=cultural,
            purpose_meaning_score=purpose,
        )

    # ============================================================
    # DO-MORE
    # ============================================================

    def _motion(self, profile: SubjectProfile, seasonal: Dict[str, float],
                rng: np.random.Generator) -> int:
        age, income = profile.age_numeric, profile.income_numeric
        fitness = self.effects.fitness_motion[profile.fitness_level.value]
        age_effect = max(0.3, 1 - (age - 25) / 100)
        income_effect = min(1.5, 0.5 + income / 100000)

        days = self.effects.base_values["motion"] + (
            fitness * age_effect * income_effect * self._edu("motion", profile) * 3
        )
        days *= seasonal["exercise"] * self._noise("motion", rng)
        return int(clamp(round_half_up(days), 0, 7))

    def _sleep(self, profile: SubjectProfile, motion: int, rng: np.random.Generator):
        age, income = profile.age_numeric, profile.income_numeric
        hours = self.effects.base_values["sleep_hours"]
        quality = self.effects.base_values["sleep_quality"]
        if age > 65:
            hours, quality = 7.0, 6.5
        elif age < 30:
            hours, quality = 8.0, 7.5

        sleep_type = self.effects.sleep_type_effects[profile.sleep_type.value]
        exercise_effect = 1 + (motion - 3) * 0.1
        income_effect = 0.9 + income / 200000

        hours = hours * sleep_type["hours"] * exercise_effect * income_effect
        quality = quality * sleep_type["quality"] * exercise_effect * income_effect

        hours = clamp(hours * self._noise("sleep_hours", rng), 4, 10)
        quality = clamp(quality * self._noise("sleep_quality", rng), 1, 10)
        return hours, quality

    def _hydration(self, profile: SubjectProfile, sleep_quality: float,
                   rng: np.random.Generator) -> int:
        quality_effect = 0.8 + sleep_quality / 10 * 0.4
        age_effect = max(0.7, 1 - (profile.age_numeric - 30) / 200)

        cups = (self.effects.base_values["hydration"] * quality_effect * age_effect
                * self._edu("hydration", profile) * self._noise("hydration", rng))
        return int(clamp(round_half_up(cups), 2, 12))

    def _diet(self, profile: SubjectProfile, motion: int, rng: np.random.Generator) -> float:
        motion_effect = 0.8 + motion / 7 * 0.4
        income_effect = 0.7 + profile.income_numeric / 150000
        age_effect = min(1.3, 0.8 + profile.age_numeric / 200)

        score = (self.effects.base_values["diet"] * motion_effect * self._edu("diet", profile)
                 * income_effect * age_effect * self._noise("diet", rng))
        return clamp(round_half_up(score, 1), 1, 10)

    def _meditation(self, profile: SubjectProfile, diet: float,
                    rng: np.random.Generator) -> int:
        diet_effect = 0.5 + diet / 10 * 0.5
        age_effect = min(2.0, 0.5 + profile.age_numeric / 100)
        income_effect = 0.6 + profile.income_numeric / 200000

        minutes = (self.effects.base_values["meditation"] * diet_effect * age_effect
                   * self._edu("meditation", profile) * income_effect
                   * self._noise("meditation", rng))
        return int(clamp(round_half_up(minutes), 0, 300))

    # ============================================================
    # DO-LESS
    # ============================================================

    def _smoking(self, profile: SubjectProfile, rng: np.random.Generator) -> SmokingStatus:
        e = self.effects
        weights = e.smoking_weights["base"]
        if profile.income_numeric > e.high_income_cutoff:
            weights = e.smoking_weights["high_income"]
        elif profile.income_numeric < e.low_income_cutoff:
            weights = e.smoking_weights["low_income"]
        # Age rule is applied last and wins over income
        if profile.age_numeric > 50:
            weights = e.smoking_weights["older"]
        return weighted_choice(rng, list(SmokingStatus), weights)

    def _alcohol(self, profile: SubjectProfile, smoking: SmokingStatus,
                 rng: np.random.Generator) -> int:
        age = profile.age_numeric
        if age < 30:
            age_effect = 1.5
        elif age > 50:
            age_effect = 0.7
        else:
            age_effect = 1.0
        income_effect = 0.5 + profile.income_numeric / 100000

        drinks = (self.effects.base_values["alcohol"]
                  * self.effects.smoking_alcohol_effects[smoking.value]
                  * age_effect * income_effect * self._edu("alcohol", profile)
                  * self._noise("alcohol", rng))
        return int(clamp(round_half_up(drinks), 0, 35))

    def _sugar(self, profile: SubjectProfile, diet: float, rng: np.random.Generator) -> int:
        age_effect = max(0.6, 1.5 - profile.age_numeric / 100)
        grams = (self.effects.base_values["sugar"] * (2 - diet / 10)
                 * self._edu("sugar", profile) * age_effect * self._noise("sugar", rng))
        return int(clamp(round_half_up(grams), 10, 150))

    def _sodium(self, profile: SubjectProfile, diet: float, rng: np.random.Generator) -> float:
        age_effect = min(1.5, 0.8 + profile.age_numeric / 200)
        income_effect = 1.5 - profile.income_numeric / 200000
        grams = (self.effects.base_values["sodium"] * (2 - diet / 10)
                 * age_effect * income_effect * self._noise("sodium", rng))
        return clamp(round_half_up(grams, 1), 1, 8)

    def _processed_food(self, profile: SubjectProfile, diet: float,
                        rng: np.random.Generator) -> int:
        income_effect = 1.5 - profile.income_numeric / 150000
        servings = (self.effects.base_values["processed_food"] * (2 - diet / 10)
                    * income_effect * self._edu("processed_food", profile)
                    * self._noise("processed_food", rng))
        return int(clamp(round_half_up(servings), 0, 20))

    # ============================================================
    # CONNECTION
    # ============================================================

    def _social(self, profile: SubjectProfile, rng: np.random.Generator) -> int:
        urban = self.effects.urban_social_effects[profile.urban_rural.value]
        income_effect = 0.7 + profile.income_numeric / 200000
        # Peaks in mid-life
        age_effect = max(0.6, 1.2 - abs(profile.age_numeric - 40) / 50)

        ties = (self.effects.base_values["social"] * urban * income_effect * age_effect
                * self._edu("social", profile) * self._noise("social", rng))
        return int(clamp(round_half_up(ties), 0, 10))

    def _nature(self, profile: SubjectProfile, seasonal: Dict[str, float],
                rng: np.random.Generator) -> int:
        urban = self.effects.urban_nature_effects[profile.urban_rural.value]
        income_effect = 0.6 + profile.income_numeric / 200000
        age_effect = min(1.5, 0.7 + profile.age_numeric / 150)

        minutes = (self.effects.base_values["nature"] * seasonal["outdoor"] * urban
                   * income_effect * age_effect * self._noise("nature", rng))
        return int(clamp(round_half_up(minutes), 0, 300))

    def _cultural(self, profile: SubjectProfile, rng: np.random.Generator) -> int:
        income_effect = 0.5 + profile.income_numeric / 150000
        age_effect = max(0.6, 1.2 - abs(profile.age_numeric - 45) / 60)

        hours = (self.effects.base_values["cultural"] * self._edu("cultural", profile)
                 * income_effect * age_effect * self._noise("cultural", rng))
        return int(clamp(round_half_up(hours), 0, 20))

    def _purpose(self, profile: SubjectProfile, social: int, meditation: int,
                 rng: np.random.Generator) -> float:
        social_effect = 0.5 + social / 10 * 0.5
        meditation_effect = 0.6 + meditation / 300 * 0.4
        age_effect = min(1.5, 0.7 + profile.age_numeric / 100)

        score = (self.effects.base_values["purpose"] * social_effect * meditation_effect
                 * age_effect * self._edu("purpose", profile) * self._noise("purpose", rng))
        return clamp(round_half_up(score, 1), 1, 10)
