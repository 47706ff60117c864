"""
Shared builders for the TWA synthetic wellness test suite.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from twa_synth.models import (
    AgeGroup, BehaviorVector, Education, Ethnicity, FitnessLevel, Gender,
    IncomeBracket, Region, SleepType, SmokingStatus, SubjectProfile, UrbanRural,
)


def _profile(**overrides) -> SubjectProfile:
    values = dict(
        subject_id="SYNTH_000001",
        age_group=AgeGroup.AGE_35_44,
        age_numeric=39.5,
        gender=Gender.FEMALE,
        ethnicity=Ethnicity.WHITE,
        education=Education.BACHELOR_PLUS,
        income_bracket=IncomeBracket.FROM_75K_TO_100K,
        income_numeric=87500.0,
        fitness_level=FitnessLevel.MEDIUM,
        sleep_type=SleepType.REGULAR,
        region=Region.WEST,
        urban_rural=UrbanRural.SUBURBAN,
        occupation="Engineer",
    )
    values.update(overrides)
    return SubjectProfile(**values)


def _behaviors(**overrides) -> BehaviorVector:
    """Middle-of-the-road month: crosses no effect threshold except regular exercise"""
    values = dict(
        motion_days_week=3,
        sleep_hours=7.0,
        sleep_quality_score=6.5,
        hydration_cups_day=6,
        diet_mediterranean_score=5.0,
        meditation_minutes_week=60,
        smoking_status=SmokingStatus.NEVER,
        alcohol_drinks_week=3,
        added_sugar_grams_day=50,
        sodium_grams_day=3.5,
        processed_food_servings_week=5,
        social_connections_count=3,
        nature_minutes_week=60,
        cultural_hours_week=2,
        purpose_meaning_score=5.0,
    )
    values.update(overrides)
    return BehaviorVector(**values)


@pytest.fixture
def make_profile():
    return _profile


@pytest.fixture
def make_behaviors():
    return _behaviors


@pytest.fixture
def healthy_behaviors():
    return _behaviors(
        motion_days_week=5,
        sleep_hours=8.0,
        sleep_quality_score=8.0,
        diet_mediterranean_score=8.0,
        meditation_minutes_week=200,
        social_connections_count=5,
        nature_minutes_week=150,
        purpose_meaning_score=9.0,
    )
