"""
TWA Synthetic Wellness - Demographic Sampler Tests
==================================================
"""

from collections import Counter

import numpy as np
import pytest

from twa_synth.config import DemographicTables
from twa_synth.demographics import DemographicSampler
from twa_synth.errors import InvalidConfiguration
from twa_synth.models import AgeGroup, Education, FitnessLevel, Region, UrbanRural


@pytest.fixture(scope="module")
def population():
    return DemographicSampler().generate(20000, np.random.default_rng(42))


class TestDemographicSampler:
    """Test the conditional demographic chain"""

    def test_count_and_ids(self):
        """n profiles with zero-padded sequential ids"""
        profiles = DemographicSampler().generate(12, np.random.default_rng(0))
        assert len(profiles) == 12
        assert profiles[0].subject_id == "SYNTH_000000"
        assert profiles[11].subject_id == "SYNTH_000011"

    @pytest.mark.parametrize("n", [0, -5, 2.5])
    def test_invalid_count(self, n):
        """Non-positive or non-integer counts are rejected"""
        with pytest.raises(InvalidConfiguration):
            DemographicSampler().generate(n, np.random.default_rng(0))

    def test_reproducible(self):
        """Same seed, same profiles"""
        a = DemographicSampler().generate(50, np.random.default_rng(7))
        b = DemographicSampler().generate(50, np.random.default_rng(7))
        assert a == b

    def test_age_marginal(self, population):
        """Age groups follow the census-like weights"""
        counts = Counter(p.age_group for p in population)
        weights = DemographicTables().age_group_weights
        for group in AgeGroup:
            assert counts[group] / len(population) == pytest.approx(weights[group.value], abs=0.015)

    def test_income_rises_with_education(self, population):
        """Bachelor+ subjects earn more on average than those without high school"""
        def mean_income(education):
            values = [p.income_numeric for p in population if p.education == education]
            return sum(values) / len(values)

        assert mean_income(Education.BACHELOR_PLUS) > mean_income(Education.LESS_THAN_HS)

    def test_fitness_declines_with_age(self, population):
        """Younger subjects are more often high-fitness"""
        def high_share(group):
            members = [p for p in population if p.age_group == group]
            return sum(p.fitness_level == FitnessLevel.HIGH for p in members) / len(members)

        assert high_share(AgeGroup.AGE_18_24) > high_share(AgeGroup.AGE_65_74)

    def test_urban_rural_depends_on_region(self, population):
        """The Midwest is more rural than the West"""
        def rural_share(region):
            members = [p for p in population if p.region == region]
            return sum(p.urban_rural == UrbanRural.RURAL for p in members) / len(members)

        assert rural_share(Region.MIDWEST) > rural_share(Region.WEST)

    def test_occupation_from_education_or_age(self, population):
        """Occupation comes from the education list or the age-group list"""
        tables = DemographicTables()
        for p in population[:2000]:
            allowed = (set(tables.occupations_by_education[p.education.value])
                       | set(tables.occupations_by_age[p.age_group.value]))
            assert p.occupation in allowed

    def test_no_students_over_75(self, population):
        """Age-only occupations stay within their age group"""
        assert not any(p.occupation == "Student" for p in population
                       if p.age_group == AgeGroup.AGE_75_PLUS)
