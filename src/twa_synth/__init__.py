"""
TWA Synthetic Wellness
======================
Synthetic longitudinal wellness dataset: demographic profiles, monthly
lifestyle behaviours and derived aging outcomes, with a validation report.
"""

from .config import (
    DEFAULT_EFFECTS,
    ResearchEffects,
    DemographicTables,
    BehaviorEffects,
    OutcomeEffects,
    CompositeScoring,
    ValidationBenchmarks,
    load_research_effects
)

from .errors import (
    TWASynthError,
    InvalidConfiguration,
    InsufficientData,
    GenerationCancelled
)

from .models import (
    SubjectProfile,
    BehaviorVector,
    OutcomeVector,
    MonthlyRecord,
    ExportFormat,
    Season,
    records_to_dataframe
)

from .demographics import DemographicSampler
from .behaviors import BehaviorSampler
from .outcomes import OutcomeModel

from .generator import (
    GenerationConfig,
    LongitudinalOrchestrator,
    DatasetResult,
    generate,
    run_pipeline,
    load_dataset_config
)

from .validation import (
    ValidationEngine,
    ValidationReport,
    ReportAssessor
)

__version__ = "1.0.0"
