"""
TWA Synthetic Wellness - Demographic Sampler
============================================
Draws static subject profiles from a conditional chain:

    age group -> education -> income -> fitness -> sleep type
    region -> urban/rural
    gender, ethnicity (independent)
    education + age group -> occupation

Weights are read from ``DemographicTables`` so marginals can be recalibrated
without touching the chain.
"""

import logging
from typing import List, Sequence

import numpy as np

from .config import DemographicTables
from .errors import InvalidConfiguration
from .models import (
    AGE_MIDPOINTS, INCOME_MIDPOINTS,
    AgeGroup, Education, Ethnicity, FitnessLevel, Gender, IncomeBracket,
    Region, SleepType, SubjectProfile, UrbanRural,
)
from .sampling import shift_toward_higher, shift_toward_lower, weighted_choice

logger = logging.getLogger(__name__)


def _ordered_weights(table, options: Sequence) -> List[float]:
    return [table[o.value] for o in options]


class DemographicSampler:
    """
    Generates realistic synthetic subject profiles.

    Usage:
        sampler = DemographicSampler()
        profiles = sampler.generate(1000, np.random.default_rng(42))
    """

    def __init__(self, tables: DemographicTables = None):
        self.tables = tables or DemographicTables()

    def generate(self, n: int, rng: np.random.Generator) -> List[SubjectProfile]:
        """Draw ``n`` independent profiles with ids SYNTH_000000 .. SYNTH_{n-1}"""
        if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 1:
            raise InvalidConfiguration(f"Subject count must be a positive integer, got {n!r}")

        profiles = [self.sample_profile(i, rng) for i in range(n)]
        logger.debug("Sampled %d demographic profiles", n)
        return profiles

    def sample_profile(self, index: int, rng: np.random.Generator) -> SubjectProfile:
        t = self.tables

        age_group = weighted_choice(rng, list(AgeGroup), _ordered_weights(t.age_group_weights, AgeGroup))
        age_numeric = AGE_MIDPOINTS[age_group]
        gender = weighted_choice(rng, list(Gender), _ordered_weights(t.gender_weights, Gender))
        ethnicity = weighted_choice(rng, list(Ethnicity), _ordered_weights(t.ethnicity_weights, Ethnicity))

        education = weighted_choice(rng, list(Education), t.education_by_age[age_group.value])
        income_bracket = self._sample_income(education, age_numeric, rng)
        income_numeric = INCOME_MIDPOINTS[income_bracket]

        fitness_level = self._sample_fitness(age_numeric, income_numeric, education, rng)
        sleep_type = self._sample_sleep_type(age_numeric, income_numeric, rng)

        region = weighted_choice(rng, list(Region), _ordered_weights(t.region_weights, Region))
        urban_rural = weighted_choice(rng, list(UrbanRural), t.urban_rural_by_region[region.value])

        occupation = self._sample_occupation(education, age_group, rng)

        return SubjectProfile(
            subject_id=f"SYNTH_{index:06d}",
            age_group=age_group,
            age_numeric=age_numeric,
            gender=gender,
            ethnicity=ethnicity,
            education=education,
            income_bracket=income_bracket,
            income_numeric=income_numeric,
            fitness_level=fitness_level,
            sleep_type=sleep_type,
            region=region,
            urban_rural=urban_rural,
            occupation=occupation,
        )

    # ============================================================
    # CONDITIONAL DRAWS
    # ============================================================

    def _sample_income(self, education: Education, age_numeric: float,
                       rng: np.random.Generator) -> IncomeBracket:
        weights = list(self.tables.income_by_education[education.value])

        # Older subjects skew toward higher brackets
        age_factor = age_numeric / self.tables.income_age_reference
        if age_factor > 1:
            weights = shift_toward_higher(weights, age_factor)

        return weighted_choice(rng, list(IncomeBracket), weights)

    def _sample_fitness(self, age_numeric: float, income_numeric: float,
                        education: Education, rng: np.random.Generator) -> FitnessLevel:
        t = self.tables
        if age_numeric > t.older_age_cutoff:
            weights = t.fitness_weights["older"]
        elif age_numeric < t.younger_age_cutoff:
            weights = t.fitness_weights["younger"]
        else:
            weights = t.fitness_weights["base"]

        if income_numeric > t.high_income_cutoff:
            weights = shift_toward_higher(weights, t.fitness_income_shift)
        elif income_numeric < t.low_income_cutoff:
            weights = shift_toward_lower(weights, t.fitness_income_shift)

        if education == Education.BACHELOR_PLUS:
            weights = shift_toward_higher(weights, t.fitness_education_shift)

        return weighted_choice(rng, list(FitnessLevel), weights)

    def _sample_sleep_type(self, age_numeric: float, income_numeric: float,
                           rng: np.random.Generator) -> SleepType:
        t = self.tables
        weights = t.sleep_type_weights["base"]
        if age_numeric > t.older_age_cutoff:
            weights = t.sleep_type_weights["older"]
        elif age_numeric < t.younger_age_cutoff:
            weights = t.sleep_type_weights["younger"]

        # Income overrides age
        if income_numeric > t.high_income_cutoff:
            weights = t.sleep_type_weights["high_income"]
        elif income_numeric < t.low_income_cutoff:
            weights = t.sleep_type_weights["low_income"]

        return weighted_choice(rng, list(SleepType), weights)

    def _sample_occupation(self, education: Education, age_group: AgeGroup,
                           rng: np.random.Generator) -> str:
        t = self.tables
        by_education = list(t.occupations_by_education[education.value])

        candidates = list(by_education)
        for occupation in t.occupations_by_age[age_group.value]:
            if occupation not in candidates:
                candidates.append(occupation)

        weights = [1.0 if o in by_education else t.age_only_occupation_weight for o in candidates]
        return weighted_choice(rng, candidates, weights)
