"""
TWA Synthetic Wellness - Longitudinal Data Generation Engine
============================================================
Chains DemographicSampler -> BehaviorSampler -> OutcomeModel over a
subjects x months grid and attaches guideline flags and composite scores.

Design Principles:
1. Reproducibility via seed control: one SeedSequence root, a demographics
   stream and one child stream per subject, so output does not depend on
   the number of workers
2. Configuration errors are raised before any sampling begins
3. Records are produced lazily, grouped by subject, months ascending
4. Cooperative cancellation and progress reporting between subjects
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
import yaml

from .behaviors import BehaviorSampler
from .config import DEFAULT_EFFECTS, ResearchEffects
from .demographics import DemographicSampler
from .errors import GenerationCancelled, InvalidConfiguration
from .models import ExportFormat, MonthlyRecord, Season, SubjectProfile, records_to_dataframe
from .outcomes import OutcomeModel
from .scoring import blue_zone_similarity, compliance_flags, healthy_aging_profile
from .validation import ValidationEngine, ValidationReport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
CancelCheck = Callable[[], bool]

DEFAULT_START_DATE = date(2024, 1, 15)
PROGRESS_LOG_EVERY = 1000

# Month index (mod 12) -> season
SEASON_BY_MONTH = [
    Season.WINTER, Season.WINTER,
    Season.SPRING, Season.SPRING, Season.SPRING,
    Season.SUMMER, Season.SUMMER, Season.SUMMER,
    Season.FALL, Season.FALL, Season.FALL,
    Season.WINTER,
]


def month_to_season(month: int) -> Season:
    return SEASON_BY_MONTH[month % 12]


def _is_count(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


# ============================================================
# CONFIGURATION
# ============================================================

@dataclass(frozen=True)
class GenerationConfig:
    """Size and options of one dataset run"""
    subject_count: int = 1000
    months: int = 12
    include_validation: bool = True
    export_format: Union[ExportFormat, str] = ExportFormat.JSON

    def validate(self):
        """Raise InvalidConfiguration for any setting that cannot be generated"""
        if not _is_count(self.subject_count) or self.subject_count < 1:
            raise InvalidConfiguration(
                f"subject_count must be a positive integer, got {self.subject_count!r}")
        if not _is_count(self.months) or self.months < 1:
            raise InvalidConfiguration(f"months must be a positive integer, got {self.months!r}")
        try:
            ExportFormat(self.export_format)
        except ValueError:
            raise InvalidConfiguration(
                f"Unknown export format {self.export_format!r}; "
                f"expected one of {[f.value for f in ExportFormat]}") from None

    @property
    def format(self) -> ExportFormat:
        return ExportFormat(self.export_format)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "GenerationConfig":
        return load_dataset_config(path)[0]


def load_dataset_config(path: Union[str, Path]) -> Tuple[GenerationConfig, Dict[str, Any]]:
    """
    Read the ``dataset`` section of a YAML run file.

    Returns the GenerationConfig and the orchestrator options present in the
    file (``seed``, ``start_date``, ``workers``), ready to pass as keyword
    arguments to ``run_pipeline``.
    """
    path = Path(path)
    if not path.exists():
        raise InvalidConfiguration(f"Dataset config {path} does not exist")

    with open(path, 'r') as f:
        raw = yaml.safe_load(f) or {}

    dataset = raw.get('dataset')
    if not isinstance(dataset, dict):
        raise InvalidConfiguration(f"{path} has no 'dataset' section")

    # Verification: Check required keys
    required = ['subject_count', 'months', 'include_validation', 'export_format']
    missing = [k for k in required if k not in dataset]
    if missing:
        raise InvalidConfiguration(f"Missing config keys: {missing}")

    config = GenerationConfig(**{k: dataset[k] for k in required})
    config.validate()

    options: Dict[str, Any] = {}
    if dataset.get('seed') is not None:
        options['seed'] = dataset['seed']
    if dataset.get('workers') is not None:
        options['workers'] = dataset['workers']
    if dataset.get('start_date') is not None:
        start = dataset['start_date']
        # PyYAML already parses unquoted ISO dates
        options['start_date'] = start if isinstance(start, date) else date.fromisoformat(str(start))

    logger.debug("Loaded dataset config from %s: %s %s", path, config, options)
    return config, options


# ============================================================
# ORCHESTRATOR
# ============================================================

class LongitudinalOrchestrator:
    """
    Main engine for generating the synthetic longitudinal wellness dataset.

    Seasons follow the month index (month 0 is Winter), not the calendar
    month of ``start_date``: a July start still labels month 0 Winter.
    ``start_date`` only places the observation dates.

    Usage:
        orchestrator = LongitudinalOrchestrator(seed=42)
        for record in orchestrator.iter_records(GenerationConfig(100, 12)):
            ...
    """

    def __init__(
        self,
        effects: ResearchEffects = DEFAULT_EFFECTS,
        seed: Optional[int] = None,
        start_date: date = DEFAULT_START_DATE,
        workers: int = 1,
    ):
        if not _is_count(workers) or workers < 1:
            raise InvalidConfiguration(f"workers must be a positive integer, got {workers!r}")
        if start_date.day > 28:
            raise InvalidConfiguration(
                f"start_date day must be <= 28 so every month has it, got {start_date}")

        self.effects = effects
        self.seed = seed
        self.start_date = start_date
        self.workers = workers

        self.demographics = DemographicSampler(effects.demographics)
        self.behaviors = BehaviorSampler(effects.behaviors)
        self.outcomes = OutcomeModel(effects.outcomes)

    def observation_date(self, month: int) -> date:
        """start_date advanced by ``month`` calendar months"""
        months_total = self.start_date.year * 12 + self.start_date.month - 1 + month
        return date(months_total // 12, months_total % 12 + 1, self.start_date.day)

    def iter_records(
        self,
        config: GenerationConfig,
        progress: Optional[ProgressCallback] = None,
        should_cancel: Optional[CancelCheck] = None,
    ) -> Iterator[MonthlyRecord]:
        """
        Validate ``config`` immediately, then return a lazy record iterator.

        Calling again restarts generation from the seed.

        Raises:
            InvalidConfiguration: before any sampling, for a bad config.
            GenerationCancelled: while iterating, once ``should_cancel``
                returns True between two subjects.
        """
        config.validate()
        return self._iter_records(config, progress, should_cancel)

    def generate(
        self,
        config: GenerationConfig,
        progress: Optional[ProgressCallback] = None,
        should_cancel: Optional[CancelCheck] = None,
    ) -> List[MonthlyRecord]:
        records = list(self.iter_records(config, progress, should_cancel))
        logger.info("Generated %s records for %s subjects over %s months",
                    f"{len(records):,}", f"{config.subject_count:,}", config.months)
        return records

    def _iter_records(self, config, progress, should_cancel) -> Iterator[MonthlyRecord]:
        total = config.subject_count
        root = np.random.SeedSequence(self.seed)
        demographic_seq, subjects_seq = root.spawn(2)

        profiles = self.demographics.generate(total, np.random.default_rng(demographic_seq))
        subject_seqs = subjects_seq.spawn(total)
        logger.info("Generating %s subjects x %s months (workers=%d)",
                    f"{total:,}", config.months, self.workers)

        if self.workers == 1:
            batches = (
                [self._subject_records(p, s, config.months)]
                for p, s in zip(profiles, subject_seqs)
            )
            yield from self._drain(batches, total, progress, should_cancel)
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                yield from self._drain(
                    self._parallel_batches(executor, profiles, subject_seqs, config.months),
                    total, progress, should_cancel,
                )

    def _parallel_batches(self, executor, profiles, subject_seqs, months):
        """Submit subjects in bounded batches; yield each batch's results in input order"""
        batch_size = self.workers * 4
        for start in range(0, len(profiles), batch_size):
            futures = [
                executor.submit(self._subject_records, p, s, months)
                for p, s in zip(profiles[start:start + batch_size],
                                subject_seqs[start:start + batch_size])
            ]
            yield [f.result() for f in futures]

    def _drain(self, batches, total, progress, should_cancel) -> Iterator[MonthlyRecord]:
        done = 0
        for batch in batches:
            for records in batch:
                if should_cancel is not None and should_cancel():
                    logger.info("Generation cancelled after %s of %s subjects",
                                f"{done:,}", f"{total:,}")
                    raise GenerationCancelled(done, total)

                yield from records
                done += 1
                if progress is not None:
                    progress(done, total)
                if done % PROGRESS_LOG_EVERY == 0:
                    logger.info("  Generated %s / %s subjects", f"{done:,}", f"{total:,}")

    def _subject_records(self, profile: SubjectProfile, seq: np.random.SeedSequence,
                         months: int) -> List[MonthlyRecord]:
        rng = np.random.default_rng(seq)
        baseline_age = profile.age_numeric
        composites = self.effects.composites

        records = []
        for month in range(months):
            season = month_to_season(month)
            behaviors = self.behaviors.generate_month(profile, month, season, rng)
            outcomes = self.outcomes.generate_month(profile, behaviors, baseline_age, month, rng)

            records.append(MonthlyRecord(
                subject_id=profile.subject_id,
                month=month,
                season=season,
                observation_date=self.observation_date(month),
                profile=profile,
                behaviors=behaviors,
                outcomes=outcomes,
                healthy_aging_profile=healthy_aging_profile(behaviors, outcomes, composites),
                blue_zone_similarity_score=blue_zone_similarity(behaviors, composites),
                **compliance_flags(behaviors, composites),
            ))
        return records


# ============================================================
# PIPELINE ENTRY POINTS
# ============================================================

@dataclass
class DatasetResult:
    """Generated records plus the optional validation report"""
    config: GenerationConfig
    records: List[MonthlyRecord] = field(default_factory=list)
    validation: Optional[ValidationReport] = None

    def to_dataframe(self) -> pd.DataFrame:
        return records_to_dataframe(self.records)


def generate(
    config: GenerationConfig,
    seed: Optional[int] = None,
    effects: ResearchEffects = DEFAULT_EFFECTS,
    start_date: date = DEFAULT_START_DATE,
    workers: int = 1,
    progress: Optional[ProgressCallback] = None,
    should_cancel: Optional[CancelCheck] = None,
) -> List[MonthlyRecord]:
    """Generate a complete in-memory dataset"""
    orchestrator = LongitudinalOrchestrator(effects, seed=seed, start_date=start_date, workers=workers)
    return orchestrator.generate(config, progress, should_cancel)


def run_pipeline(
    config: GenerationConfig,
    seed: Optional[int] = None,
    effects: ResearchEffects = DEFAULT_EFFECTS,
    start_date: date = DEFAULT_START_DATE,
    workers: int = 1,
    progress: Optional[ProgressCallback] = None,
    should_cancel: Optional[CancelCheck] = None,
) -> DatasetResult:
    """Generate, then validate when ``config.include_validation`` is set"""
    records = generate(config, seed, effects, start_date, workers, progress, should_cancel)

    validation = None
    if config.include_validation:
        validation = ValidationEngine(effects.validation).validate(records)

    return DatasetResult(config=config, records=records, validation=validation)


if __name__ == "__main__":
    from .validation import ReportAssessor

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    config, options = load_dataset_config("configs/dataset_config.yaml")
    result = run_pipeline(config, **options)

    df = result.to_dataframe()
    print("\nGeneration complete!")
    print(f"Records: {df.shape}")
    if result.validation is not None:
        assessor = ReportAssessor(DEFAULT_EFFECTS.validation.pass_thresholds)
        for check in assessor.assess(result.validation):
            print(f"  {check.severity.value:4s} {check.name}: {check.message}")
        print(f"Summary: {assessor.get_summary()}")
