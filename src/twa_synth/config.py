"""
TWA Synthetic Wellness - Research Configuration
===============================================

Immutable tables of categorical weights, behaviour effect multipliers and
outcome effect sizes. Every sampler receives its table at construction time,
so calibration runs and tests can swap constants without touching control
flow.

Effect sizes
------------
Outcome effect sizes are illustrative constants drawn from published
lifestyle-and-longevity literature. They are NOT standardised statistical
effect sizes:

- biological_age_effects: years added to (positive) or removed from
  (negative) biological age per year while a behaviour crosses its threshold
- mortality_risk_effects: hazard-ratio-like multipliers on a relative
  mortality score of 1.0
- biomarker_effects: multipliers applied to the age/gender baseline of a
  biomarker while a behaviour crosses its threshold

Overrides
---------
``load_research_effects`` reads a YAML file with any of the sections
``demographics``, ``behaviors``, ``outcomes``, ``composites`` and
``validation``. Mapping-valued fields merge key by key; scalar and
sequence fields are replaced.
"""

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)


def _freeze(value: Any) -> Any:
    """Recursively convert dicts to read-only mappings and lists to tuples"""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


class _FrozenTables:
    """Mixin for frozen dataclasses whose container fields must be read-only"""

    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(self, f.name, _freeze(getattr(self, f.name)))


# =============================================================================
# DEMOGRAPHIC SAMPLING TABLES
# =============================================================================

@dataclass(frozen=True)
class DemographicTables(_FrozenTables):
    """Weight tables for the conditional demographic chain (US-census-like marginals)"""

    age_group_weights: Dict[str, float] = field(default_factory=lambda: {
        "18-24": 0.11, "25-34": 0.14, "35-44": 0.13, "45-54": 0.12,
        "55-64": 0.13, "65-74": 0.11, "75+": 0.07,
    })
    gender_weights: Dict[str, float] = field(default_factory=lambda: {
        "Male": 0.49, "Female": 0.505, "Non-binary": 0.005,
    })
    ethnicity_weights: Dict[str, float] = field(default_factory=lambda: {
        "White": 0.60, "Hispanic": 0.19, "Black": 0.13, "Asian": 0.06, "Other": 0.02,
    })
    region_weights: Dict[str, float] = field(default_factory=lambda: {
        "Northeast": 0.17, "Midwest": 0.21, "South": 0.38, "West": 0.24,
    })

    # Education ordered: Less than HS, High School, Some College, Bachelor+
    education_by_age: Dict[str, List[float]] = field(default_factory=lambda: {
        "18-24": [0.05, 0.25, 0.45, 0.25],
        "25-34": [0.08, 0.22, 0.30, 0.40],
        "35-44": [0.10, 0.25, 0.28, 0.37],
        "45-54": [0.12, 0.28, 0.30, 0.30],
        "55-64": [0.15, 0.32, 0.28, 0.25],
        "65-74": [0.18, 0.35, 0.25, 0.22],
        "75+": [0.20, 0.40, 0.25, 0.15],
    })

    # Income ordered: <$35k, $35-75k, $75-100k, >$100k
    income_by_education: Dict[str, List[float]] = field(default_factory=lambda: {
        "Less than HS": [0.50, 0.35, 0.10, 0.05],
        "High School": [0.35, 0.40, 0.20, 0.05],
        "Some College": [0.25, 0.45, 0.25, 0.05],
        "Bachelor+": [0.10, 0.30, 0.35, 0.25],
    })
    # Income is skewed upward by age_numeric / income_age_reference when > 1
    income_age_reference: float = 50.0

    # Fitness ordered: Low, Medium, High
    fitness_weights: Dict[str, List[float]] = field(default_factory=lambda: {
        "base": [0.30, 0.50, 0.20],
        "older": [0.50, 0.40, 0.10],
        "younger": [0.15, 0.45, 0.40],
    })
    fitness_income_shift: float = 1.2
    fitness_education_shift: float = 1.1

    # Sleep type: Regular, Short, Irregular (income overrides age)
    sleep_type_weights: Dict[str, List[float]] = field(default_factory=lambda: {
        "base": [0.60, 0.25, 0.15],
        "older": [0.70, 0.20, 0.10],
        "younger": [0.45, 0.30, 0.25],
        "high_income": [0.70, 0.20, 0.10],
        "low_income": [0.50, 0.30, 0.20],
    })

    older_age_cutoff: float = 50
    younger_age_cutoff: float = 30
    high_income_cutoff: float = 75000
    low_income_cutoff: float = 35000

    # Urban, Suburban, Rural
    urban_rural_by_region: Dict[str, List[float]] = field(default_factory=lambda: {
        "Northeast": [0.25, 0.60, 0.15],
        "Midwest": [0.15, 0.50, 0.35],
        "South": [0.20, 0.45, 0.35],
        "West": [0.30, 0.55, 0.15],
    })

    occupations_by_education: Dict[str, List[str]] = field(default_factory=lambda: {
        "Less than HS": ["Service Worker", "Laborer", "Retail Worker", "Unemployed"],
        "High School": ["Office Worker", "Technician", "Sales", "Service Worker"],
        "Some College": ["Administrative", "Technician", "Sales Manager", "Healthcare Support"],
        "Bachelor+": ["Professional", "Manager", "Engineer", "Healthcare Professional"],
    })
    occupations_by_age: Dict[str, List[str]] = field(default_factory=lambda: {
        "18-24": ["Student", "Service Worker", "Retail Worker"],
        "25-34": ["Professional", "Office Worker", "Technician"],
        "35-44": ["Manager", "Professional", "Healthcare Professional"],
        "45-54": ["Manager", "Professional", "Administrative"],
        "55-64": ["Manager", "Administrative", "Consultant"],
        "65-74": ["Retired", "Consultant", "Part-time"],
        "75+": ["Retired", "Volunteer"],
    })
    age_only_occupation_weight: float = 0.5


# =============================================================================
# BEHAVIOUR SAMPLING EFFECTS
# =============================================================================

@dataclass(frozen=True)
class BehaviorEffects(_FrozenTables):
    """Base values, demographic multipliers and noise bands for monthly behaviours"""

    base_values: Dict[str, float] = field(default_factory=lambda: {
        "motion": 2.0,
        "sleep_hours": 7.5,
        "sleep_quality": 7.0,
        "hydration": 6.0,
        "diet": 5.0,
        "meditation": 30.0,
        "alcohol": 2.0,
        "sugar": 50.0,
        "sodium": 3.5,
        "processed_food": 5.0,
        "social": 3.0,
        "nature": 60.0,
        "cultural": 2.0,
        "purpose": 5.0,
    })

    # Uniform multiplicative noise band per field
    noise_ranges: Dict[str, Tuple[float, float]] = field(default_factory=lambda: {
        "motion": (0.8, 1.2),
        "sleep_hours": (0.9, 1.1),
        "sleep_quality": (0.8, 1.2),
        "hydration": (0.8, 1.2),
        "diet": (0.7, 1.3),
        "meditation": (0.2, 1.8),
        "alcohol": (0.3, 1.7),
        "sugar": (0.6, 1.4),
        "sodium": (0.7, 1.3),
        "processed_food": (0.6, 1.4),
        "social": (0.6, 1.4),
        "nature": (0.4, 1.6),
        "cultural": (0.3, 1.7),
        "purpose": (0.6, 1.4),
    })

    # Only exercise and outdoor time respond to season; mood is carried for reference
    seasonal_factors: Dict[str, Dict[str, float]] = field(default_factory=lambda: {
        "Spring": {"exercise": 1.1, "mood": 1.05, "outdoor": 1.2},
        "Summer": {"exercise": 1.2, "mood": 1.1, "outdoor": 1.5},
        "Fall": {"exercise": 0.9, "mood": 0.95, "outdoor": 1.0},
        "Winter": {"exercise": 0.8, "mood": 0.9, "outdoor": 0.6},
    })

    fitness_motion: Dict[str, float] = field(default_factory=lambda: {
        "Low": 0.3, "Medium": 0.6, "High": 1.0,
    })

    education_effects: Dict[str, Dict[str, float]] = field(default_factory=lambda: {
        "motion": {"Less than HS": 0.7, "High School": 0.8, "Some College": 0.9, "Bachelor+": 1.1},
        "hydration": {"Less than HS": 0.8, "High School": 0.9, "Some College": 1.0, "Bachelor+": 1.1},
        "diet": {"Less than HS": 0.6, "High School": 0.8, "Some College": 1.0, "Bachelor+": 1.2},
        "meditation": {"Less than HS": 0.3, "High School": 0.6, "Some College": 1.0, "Bachelor+": 1.5},
        "alcohol": {"Less than HS": 0.7, "High School": 0.9, "Some College": 1.1, "Bachelor+": 1.3},
        "sugar": {"Less than HS": 1.3, "High School": 1.1, "Some College": 1.0, "Bachelor+": 0.8},
        "processed_food": {"Less than HS": 1.4, "High School": 1.2, "Some College": 1.0, "Bachelor+": 0.7},
        "social": {"Less than HS": 0.8, "High School": 0.9, "Some College": 1.0, "Bachelor+": 1.2},
        "cultural": {"Less than HS": 0.5, "High School": 0.8, "Some College": 1.0, "Bachelor+": 1.5},
        "purpose": {"Less than HS": 0.8, "High School": 0.9, "Some College": 1.0, "Bachelor+": 1.1},
    })

    sleep_type_effects: Dict[str, Dict[str, float]] = field(default_factory=lambda: {
        "Regular": {"hours": 1.0, "quality": 1.0},
        "Short": {"hours": 0.7, "quality": 0.6},
        "Irregular": {"hours": 0.8, "quality": 0.7},
    })

    # Never, Former, Current (later rules override earlier ones)
    smoking_weights: Dict[str, List[float]] = field(default_factory=lambda: {
        "base": [0.65, 0.25, 0.10],
        "high_income": [0.80, 0.15, 0.05],
        "low_income": [0.50, 0.30, 0.20],
        "older": [0.60, 0.30, 0.10],
    })
    smoking_alcohol_effects: Dict[str, float] = field(default_factory=lambda: {
        "Never": 1.0, "Former": 1.2, "Current": 1.5,
    })

    urban_social_effects: Dict[str, float] = field(default_factory=lambda: {
        "Urban": 1.3, "Suburban": 1.1, "Rural": 0.8,
    })
    urban_nature_effects: Dict[str, float] = field(default_factory=lambda: {
        "Urban": 0.5, "Suburban": 0.8, "Rural": 1.5,
    })

    high_income_cutoff: float = 75000
    low_income_cutoff: float = 35000


# =============================================================================
# OUTCOME EFFECT SIZES
# =============================================================================

@dataclass(frozen=True)
class OutcomeEffects(_FrozenTables):
    """Threshold-triggered effect sizes for the wellness/aging outcome model"""

    # Annual years; negative slows biological aging
    biological_age_effects: Dict[str, float] = field(default_factory=lambda: {
        "motion_high": -1.2,
        "diet_mediterranean": -2.3,
        "meditation_regular": -1.8,
        "smoking_current": 5.3,
        "purpose_high": -3.1,
        "social_connected": -1.5,
        "sleep_quality_per_hour": -0.5,
        "alcohol_excess": 2.1,
        "processed_foods": 1.7,
    })

    mortality_risk_effects: Dict[str, float] = field(default_factory=lambda: {
        "purpose_high": 0.57,
        "social_isolated": 1.91,
        "smoking_current": 2.24,
        "exercise_regular": 0.72,
        "diet_quality_high": 0.70,
        "meditation_practice": 0.82,
    })
    mortality_age_base: float = 1.1
    mortality_bounds: Tuple[float, float] = (0.1, 10.0)

    biomarker_effects: Dict[str, float] = field(default_factory=lambda: {
        "crp_exercise": 0.75,
        "igf1_exercise": 1.15,
        "il6_meditation": 0.70,
        "cortisol_meditation": 0.70,
        "cortisol_nature": 0.70,
        "crp_diet": 0.80,
        "il6_diet": 0.85,
        "cortisol_per_stress_point": 0.1,
    })

    functional_effects: Dict[str, Dict[str, float]] = field(default_factory=lambda: {
        "exercise": {"grip": 1.15, "gait": 1.10, "balance": 1.10, "frailty": 0.80},
        "diet": {"grip": 1.05, "gait": 1.05, "balance": 1.05, "frailty": 0.90},
        "sleep": {"grip": 1.05, "gait": 1.05, "balance": 1.05, "frailty": 0.95},
        "social": {"frailty": 0.90},
    })

    education_cognitive: Dict[str, float] = field(default_factory=lambda: {
        "Less than HS": 0.8, "High School": 0.9, "Some College": 1.0, "Bachelor+": 1.1,
    })

    # Behaviour thresholds that switch effects on
    thresholds: Dict[str, float] = field(default_factory=lambda: {
        "motion_high": 4,
        "motion_regular": 3,
        "diet_high": 7,
        "meditation_regular": 150,
        "sleep_quality_good": 7,
        "purpose_high": 8,
        "social_connected": 4,
        "social_isolated": 2,
        "alcohol_excess": 14,
        "processed_excess": 10,
        "nature_regular": 120,
    })

    baseline_lifespan: Dict[str, float] = field(default_factory=lambda: {
        "Female": 81.0, "default": 76.0,
    })
    minimum_biological_age: float = 18.0
    biomarker_noise: Tuple[float, float] = (0.8, 1.2)
    lifespan_noise: Tuple[float, float] = (0.9, 1.1)


# =============================================================================
# COMPOSITE SCORES & VALIDATION BENCHMARKS
# =============================================================================

@dataclass(frozen=True)
class CompositeScoring(_FrozenTables):
    """Guideline thresholds and Blue Zone targets for per-record derived fields"""

    guidelines: Dict[str, float] = field(default_factory=lambda: {
        "exercise_days": 3,
        "sleep_hours": 7,
        "sleep_quality": 6,
        "diet_score": 7,
        "meditation_minutes": 150,
        "social_connections": 4,
        "purpose_score": 8,
    })
    blue_zone_targets: Dict[str, float] = field(default_factory=lambda: {
        "diet_score": 8,
        "motion_days": 5,
        "meditation_minutes": 150,
        "social_connections": 4,
        "purpose_score": 8,
        "max_alcohol_drinks": 7,
    })
    healthy_aging_reference_age: float = 85.0


@dataclass(frozen=True)
class ValidationBenchmarks(_FrozenTables):
    """Reference distributions, subgroup cut-offs and pass thresholds"""

    expected_age_distribution: Dict[str, float] = field(default_factory=lambda: {
        "18-24": 11, "25-34": 14, "35-44": 13, "45-54": 12,
        "55-64": 13, "65-74": 11, "75+": 7,
    })
    education_ordinal: Dict[str, int] = field(default_factory=lambda: {
        "Less than HS": 1, "High School": 2, "Some College": 3, "Bachelor+": 4,
    })
    fitness_ordinal: Dict[str, int] = field(default_factory=lambda: {
        "Low": 1, "Medium": 2, "High": 3,
    })
    high_motion_days: float = 4
    low_motion_days: float = 2
    high_purpose_score: float = 8
    low_purpose_score: float = 4

    # Consumer-side pass thresholds (see validation.ReportAssessor)
    pass_thresholds: Dict[str, float] = field(default_factory=lambda: {
        "age_distribution_ks_test": 0.1,
        "income_education_correlation": 0.3,
        "fitness_age_relationship": 0.2,
        "exercise_sleep_correlation": 0.2,
        "diet_meditation_correlation": 0.2,
        "social_purpose_correlation": 0.2,
        "biological_age_effects": 0.5,
        "mortality_risk_factors": 0.5,
        "purpose_longevity_relationship": 1.0,
        "seasonal_variations": 0.1,
        "aging_trajectories": 0.01,
        "behavior_stability": 0.5,
    })


@dataclass(frozen=True)
class ResearchEffects:
    """All research constants consumed by one generation/validation run"""
    demographics: DemographicTables = field(default_factory=DemographicTables)
    behaviors: BehaviorEffects = field(default_factory=BehaviorEffects)
    outcomes: OutcomeEffects = field(default_factory=OutcomeEffects)
    composites: CompositeScoring = field(default_factory=CompositeScoring)
    validation: ValidationBenchmarks = field(default_factory=ValidationBenchmarks)


DEFAULT_EFFECTS = ResearchEffects()


# =============================================================================
# YAML OVERRIDES
# =============================================================================

def _apply_overrides(section: str, tables, overrides: Optional[Mapping[str, Any]]):
    if not overrides:
        return tables
    if not isinstance(overrides, Mapping):
        raise InvalidConfiguration(f"Section '{section}' must be a mapping")

    known = {f.name for f in fields(tables)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise InvalidConfiguration(f"Unknown fields in section '{section}': {unknown}")

    changes = {}
    for name, value in overrides.items():
        current = getattr(tables, name)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged = dict(current)
            merged.update(value)
            changes[name] = merged
        else:
            changes[name] = value
    return replace(tables, **changes)


def load_research_effects(
    path: Union[str, Path],
    base: ResearchEffects = DEFAULT_EFFECTS,
) -> ResearchEffects:
    """
    Load effect-size overrides from a YAML file on top of ``base``.

    Args:
        path: YAML file with optional top-level sections matching the
            ResearchEffects attributes.
        base: Effects to override; defaults to the published constants.

    Raises:
        InvalidConfiguration: if the file is missing or names an unknown
            section or field.
    """
    path = Path(path)
    if not path.exists():
        raise InvalidConfiguration(f"Research effects file {path} does not exist")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, Mapping):
        raise InvalidConfiguration(f"{path} must contain a mapping at the top level")

    sections = {f.name for f in fields(base)}
    unknown = sorted(set(data) - sections)
    if unknown:
        raise InvalidConfiguration(f"Unknown sections in {path}: {unknown}")

    logger.debug("Loading research effect overrides from %s: %s", path, sorted(data))
    return replace(base, **{
        name: _apply_overrides(name, getattr(base, name), data.get(name))
        for name in sections
    })
