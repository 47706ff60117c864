"""
TWA Synthetic Wellness - Data Models & Schemas
==============================================
Enumerations, record dataclasses and the tabular schema for the synthetic
longitudinal wellness dataset.
Implements Chain-of-Verification through domain assertions: every record
checks its documented value ranges on construction.
"""

import logging
from dataclasses import dataclass, fields
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)


# ============================================================
# ENUMERATIONS - Constrained categorical values
# ============================================================

class AgeGroup(str, Enum):
    AGE_18_24 = "18-24"
    AGE_25_34 = "25-34"
    AGE_35_44 = "35-44"
    AGE_45_54 = "45-54"
    AGE_55_64 = "55-64"
    AGE_65_74 = "65-74"
    AGE_75_PLUS = "75+"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    NON_BINARY = "Non-binary"


class Ethnicity(str, Enum):
    WHITE = "White"
    HISPANIC = "Hispanic"
    BLACK = "Black"
    ASIAN = "Asian"
    OTHER = "Other"


class Education(str, Enum):
    LESS_THAN_HS = "Less than HS"
    HIGH_SCHOOL = "High School"
    SOME_COLLEGE = "Some College"
    BACHELOR_PLUS = "Bachelor+"


class IncomeBracket(str, Enum):
    UNDER_35K = "<$35k"
    FROM_35K_TO_75K = "$35-75k"
    FROM_75K_TO_100K = "$75-100k"
    OVER_100K = ">$100k"


class FitnessLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class SleepType(str, Enum):
    REGULAR = "Regular"
    SHORT = "Short"
    IRREGULAR = "Irregular"


class Region(str, Enum):
    NORTHEAST = "Northeast"
    MIDWEST = "Midwest"
    SOUTH = "South"
    WEST = "West"


class UrbanRural(str, Enum):
    URBAN = "Urban"
    SUBURBAN = "Suburban"
    RURAL = "Rural"


class SmokingStatus(str, Enum):
    NEVER = "Never"
    FORMER = "Former"
    CURRENT = "Current"


class Season(str, Enum):
    WINTER = "Winter"
    SPRING = "Spring"
    SUMMER = "Summer"
    FALL = "Fall"


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    EXCEL = "excel"


# Bracket midpoints; numeric age/income are always derived from these
AGE_MIDPOINTS: Dict[AgeGroup, float] = {
    AgeGroup.AGE_18_24: 21.0,
    AgeGroup.AGE_25_34: 29.5,
    AgeGroup.AGE_35_44: 39.5,
    AgeGroup.AGE_45_54: 49.5,
    AgeGroup.AGE_55_64: 59.5,
    AgeGroup.AGE_65_74: 69.5,
    AgeGroup.AGE_75_PLUS: 80.0,
}

INCOME_MIDPOINTS: Dict[IncomeBracket, float] = {
    IncomeBracket.UNDER_35K: 25000.0,
    IncomeBracket.FROM_35K_TO_75K: 55000.0,
    IncomeBracket.FROM_75K_TO_100K: 87500.0,
    IncomeBracket.OVER_100K: 125000.0,
}


# ============================================================
# VALUE DOMAINS - (low, high); None means unbounded on that side
# ============================================================

BEHAVIOR_DOMAINS: Dict[str, Tuple[Optional[float], Optional[float]]] = {
    'motion_days_week': (0, 7),
    'sleep_hours': (4, 10),
    'sleep_quality_score': (1, 10),
    'hydration_cups_day': (2, 12),
    'diet_mediterranean_score': (1, 10),
    'meditation_minutes_week': (0, 300),
    'alcohol_drinks_week': (0, 35),
    'added_sugar_grams_day': (10, 150),
    'sodium_grams_day': (1, 8),
    'processed_food_servings_week': (0, 20),
    'social_connections_count': (0, 10),
    'nature_minutes_week': (0, 300),
    'cultural_hours_week': (0, 20),
    'purpose_meaning_score': (1, 10),
}

OUTCOME_DOMAINS: Dict[str, Tuple[Optional[float], Optional[float]]] = {
    'biological_age_years': (18, None),
    'biological_age_acceleration': (None, None),
    'mortality_risk_score': (0.1, 10),
    'estimated_lifespan_years': (50, 100),
    'crp_mg_l': (0.1, None),
    'il6_pg_ml': (0.1, None),
    'igf1_ng_ml': (50, None),
    'gdf15_pg_ml': (100, None),
    'cortisol_ug_dl': (5, None),
    'grip_strength_kg': (10, None),
    'gait_speed_ms': (0.5, None),
    'balance_score': (1, 10),
    'frailty_index': (0, 1),
    'cognitive_composite_score': (50, 150),
    'processing_speed_score': (50, 150),
    'life_satisfaction_score': (1, 10),
    'stress_level_score': (1, 10),
    'depression_risk_score': (1, 10),
    'social_support_score': (1, 10),
}


def _check_domains(obj, domains: Dict[str, Tuple[Optional[float], Optional[float]]]):
    for name, (low, high) in domains.items():
        value = getattr(obj, name)
        assert low is None or value >= low, f"{name}={value} below {low}"
        assert high is None or value <= high, f"{name}={value} above {high}"


def _plain(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


# ============================================================
# DATACLASS MODELS - With validation
# ============================================================

@dataclass(frozen=True)
class SubjectProfile:
    """
    Static demographic profile of one synthetic subject.
    Fixed for the whole observation period.
    """
    subject_id: str
    age_group: AgeGroup
    age_numeric: float
    gender: Gender
    ethnicity: Ethnicity
    education: Education
    income_bracket: IncomeBracket
    income_numeric: float
    fitness_level: FitnessLevel
    sleep_type: SleepType
    region: Region
    urban_rural: UrbanRural
    occupation: str

    def __post_init__(self):
        """Chain-of-Verification: numeric fields follow their brackets"""
        assert self.age_numeric == AGE_MIDPOINTS[self.age_group], \
            f"Age {self.age_numeric} is not the midpoint of {self.age_group.value}"
        assert self.income_numeric == INCOME_MIDPOINTS[self.income_bracket], \
            f"Income {self.income_numeric} is not the midpoint of {self.income_bracket.value}"
        assert self.occupation, "Occupation must be non-empty"

    def to_dict(self) -> dict:
        return {f.name: _plain(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class BehaviorVector:
    """
    One month of lifestyle behaviours, grouped as do-more, do-less and
    connection practices.
    """
    # Do-more
    motion_days_week: int
    sleep_hours: float
    sleep_quality_score: float
    hydration_cups_day: int
    diet_mediterranean_score: float
    meditation_minutes_week: int
    # Do-less
    smoking_status: SmokingStatus
    alcohol_drinks_week: int
    added_sugar_grams_day: int
    sodium_grams_day: float
    processed_food_servings_week: int
    # Connection
    social_connections_count: int
    nature_minutes_week: int
    cultural_hours_week: int
    purpose_meaning_score: float

    def __post_init__(self):
        """Chain-of-Verification: Validate constraints"""
        _check_domains(self, BEHAVIOR_DOMAINS)

    def to_dict(self) -> dict:
        return {f.name: _plain(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class OutcomeVector:
    """One month of derived aging, biomarker, functional and psychosocial outcomes"""
    biological_age_years: float
    biological_age_acceleration: float
    mortality_risk_score: float
    estimated_lifespan_years: float
    # Biomarkers
    crp_mg_l: float
    il6_pg_ml: float
    igf1_ng_ml: float
    gdf15_pg_ml: float
    cortisol_ug_dl: float
    # Functional
    grip_strength_kg: float
    gait_speed_ms: float
    balance_score: float
    frailty_index: float
    # Cognitive
    cognitive_composite_score: float
    processing_speed_score: float
    # Psychosocial
    life_satisfaction_score: float
    stress_level_score: float
    depression_risk_score: float
    social_support_score: float

    def __post_init__(self):
        """Chain-of-Verification: Validate constraints"""
        _check_domains(self, OUTCOME_DOMAINS)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class MonthlyRecord:
    """
    Person-Month Longitudinal Record
    One record per subject per month
    """
    subject_id: str
    month: int
    season: Season
    observation_date: date
    profile: SubjectProfile
    behaviors: BehaviorVector
    outcomes: OutcomeVector
    meets_exercise_guidelines: bool
    meets_sleep_guidelines: bool
    high_diet_quality: bool
    regular_meditation: bool
    strong_social_support: bool
    high_purpose: bool
    healthy_aging_profile: float
    blue_zone_similarity_score: float

    def __post_init__(self):
        """Chain-of-Verification: Validate constraints"""
        assert self.month >= 0, f"Month {self.month} must be >= 0"
        assert self.subject_id == self.profile.subject_id, "Record and profile subject ids differ"
        assert 0 <= self.healthy_aging_profile <= 100, \
            f"Healthy aging profile {self.healthy_aging_profile} out of range"
        assert 0 <= self.blue_zone_similarity_score <= 100, \
            f"Blue Zone score {self.blue_zone_similarity_score} out of range"

    def _header(self) -> dict:
        return {
            'subject_id': self.subject_id,
            'month': self.month,
            'season': self.season.value,
            'observation_date': self.observation_date.isoformat(),
        }

    def _scores(self) -> dict:
        return {
            'meets_exercise_guidelines': self.meets_exercise_guidelines,
            'meets_sleep_guidelines': self.meets_sleep_guidelines,
            'high_diet_quality': self.high_diet_quality,
            'regular_meditation': self.regular_meditation,
            'strong_social_support': self.strong_social_support,
            'high_purpose': self.high_purpose,
            'healthy_aging_profile': self.healthy_aging_profile,
            'blue_zone_similarity_score': self.blue_zone_similarity_score,
        }

    def to_dict(self) -> dict:
        """
        Nested view: demographics, behaviors and outcomes as sub-dicts.

        The ``profile`` attribute is exported under the ``demographics`` key.
        """
        row = self._header()
        row['demographics'] = self.profile.to_dict()
        row['behaviors'] = self.behaviors.to_dict()
        row['outcomes'] = self.outcomes.to_dict()
        row.update(self._scores())
        return row

    def to_flat_dict(self) -> dict:
        """Single-row view used for tabular export"""
        row = self._header()
        profile = self.profile.to_dict()
        profile.pop('subject_id')
        row.update(profile)
        row.update(self.behaviors.to_dict())
        row.update(self.outcomes.to_dict())
        row.update(self._scores())
        return row


# ============================================================
# SCHEMA DEFINITIONS - For DataFrame export
# ============================================================

MONTHLY_RECORD_SCHEMA = {
    'subject_id': 'string',
    'month': 'int32',
    'season': 'category',
    'observation_date': 'datetime64[ns]',
    # Demographics
    'age_group': 'category',
    'age_numeric': 'float64',
    'gender': 'category',
    'ethnicity': 'category',
    'education': 'category',
    'income_bracket': 'category',
    'income_numeric': 'float64',
    'fitness_level': 'category',
    'sleep_type': 'category',
    'region': 'category',
    'urban_rural': 'category',
    'occupation': 'category',
    # Behaviors
    'motion_days_week': 'int8',
    'sleep_hours': 'float64',
    'sleep_quality_score': 'float64',
    'hydration_cups_day': 'int8',
    'diet_mediterranean_score': 'float64',
    'meditation_minutes_week': 'int16',
    'smoking_status': 'category',
    'alcohol_drinks_week': 'int8',
    'added_sugar_grams_day': 'int16',
    'sodium_grams_day': 'float64',
    'processed_food_servings_week': 'int8',
    'social_connections_count': 'int8',
    'nature_minutes_week': 'int16',
    'cultural_hours_week': 'int8',
    'purpose_meaning_score': 'float64',
    # Outcomes
    'biological_age_years': 'float64',
    'biological_age_acceleration': 'float64',
    'mortality_risk_score': 'float64',
    'estimated_lifespan_years': 'float64',
    'crp_mg_l': 'float64',
    'il6_pg_ml': 'float64',
    'igf1_ng_ml': 'float64',
    'gdf15_pg_ml': 'float64',
    'cortisol_ug_dl': 'float64',
    'grip_strength_kg': 'float64',
    'gait_speed_ms': 'float64',
    'balance_score': 'float64',
    'frailty_index': 'float64',
    'cognitive_composite_score': 'float64',
    'processing_speed_score': 'float64',
    'life_satisfaction_score': 'float64',
    'stress_level_score': 'float64',
    'depression_risk_score': 'float64',
    'social_support_score': 'float64',
    # Flags & composites
    'meets_exercise_guidelines': 'bool',
    'meets_sleep_guidelines': 'bool',
    'high_diet_quality': 'bool',
    'regular_meditation': 'bool',
    'strong_social_support': 'bool',
    'high_purpose': 'bool',
    'healthy_aging_profile': 'float64',
    'blue_zone_similarity_score': 'float64',
}


def validate_dataframe(df: pd.DataFrame, schema: dict, table_name: str) -> list:
    """
    Chain-of-Verification: Validate DataFrame against schema
    Returns list of validation errors
    """
    errors = []

    missing_cols = set(schema.keys()) - set(df.columns)
    if missing_cols:
        errors.append(f"{table_name}: Missing columns: {sorted(missing_cols)}")

    extra_cols = set(df.columns) - set(schema.keys())
    if extra_cols:
        errors.append(f"{table_name}: Unexpected columns: {sorted(extra_cols)}")

    for col in ['subject_id', 'month']:
        if col in df.columns and df[col].isnull().any():
            errors.append(f"{table_name}: Null values in {col}")

    return errors


def apply_schema(df: pd.DataFrame, schema: dict) -> pd.DataFrame:
    """Apply schema types to DataFrame for memory optimization"""
    for col, dtype in schema.items():
        if col in df.columns:
            try:
                if dtype == 'category':
                    df[col] = df[col].astype('category')
                elif dtype.startswith('datetime'):
                    df[col] = pd.to_datetime(df[col])
                else:
                    df[col] = df[col].astype(dtype)
            except (TypeError, ValueError) as e:
                logger.warning("Could not convert %s to %s: %s", col, dtype, e)
    return df


def records_to_dataframe(records: Iterable[MonthlyRecord]) -> pd.DataFrame:
    """Flatten records into one typed row each, columns in schema order"""
    rows: List[dict] = [r.to_flat_dict() for r in records]
    df = pd.DataFrame(rows, columns=list(MONTHLY_RECORD_SCHEMA))
    return apply_schema(df, MONTHLY_RECORD_SCHEMA)
