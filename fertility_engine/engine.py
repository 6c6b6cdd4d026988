"""
Prognosis engine - combines the age baseline with factor multipliers in odds space.
Orchestrates evaluation, combination, report generation and result caching.
"""

import logging
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from .cache import ResultCache
from .config import EngineConfig
from .convert import ProbabilityConverter
from .errors import ErrorLogger, handle_input_validation_error, handle_invalid_baseline_error
from .evaluators import evaluate_factors
from .report import ReportGenerator
from .schema import ClinicalInput, DiagnosticSet, Evaluation, FactorSet

logger = logging.getLogger(__name__)

class PrognosisEngine:
    """
    Per-cycle pregnancy prognosis from a clinical record.

    The age band value is the reference per-cycle rate. Every factor
    multiplies the odds of that rate, and the twelve-month probability is
    the cumulative chance over a year of cycles at the combined rate.
    An absolute blocker (prior tubal ligation, bilateral obstruction) skips
    the odds algebra and yields 0.
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 cache: Optional[ResultCache] = None):
        self.config = config or EngineConfig()
        self.config.validate()
        self.converter = ProbabilityConverter(self.config.cycles_per_year)
        self.report_generator = ReportGenerator(self.config)
        self.error_logger = ErrorLogger(__name__)

        if cache is None and self.config.cache_enabled:
            cache = ResultCache(self.config.cache_max_size, self.config.cache_ttl_seconds)
        self.cache = cache

    def parse_input(self, data: Union[ClinicalInput, Mapping[str, Any]]) -> ClinicalInput:
        """Validate a raw mapping into a ClinicalInput"""
        if isinstance(data, ClinicalInput):
            return data
        try:
            return ClinicalInput.model_validate(dict(data))
        except (ValidationError, TypeError, ValueError) as e:
            error = handle_input_validation_error(data, e)
            self.error_logger.log_error(error)
            raise error from e

    def combine(self, baseline: float, factors: FactorSet) -> Tuple[float, float]:
        """
        Combined (per-cycle %, twelve-month %) for a baseline per-cycle %
        """
        if factors.blocker() is not None:
            return 0.0, 0.0

        if not 0.0 <= baseline <= 100.0:
            raise handle_invalid_baseline_error(baseline)

        per_cycle = self.converter.combine_odds(baseline / 100.0, [value for _, value in factors.items()])
        annual = self.converter.per_cycle_to_annual(per_cycle)

        return (round(self.converter.to_percentage(per_cycle), 6),
                round(self.converter.to_percentage(annual), 6))

    def evaluate(self, data: Union[ClinicalInput, Mapping[str, Any]]) -> Evaluation:
        """Full pipeline for one record, served from the cache when possible"""
        clinical_input = self.parse_input(data)

        if self.cache is None:
            return self._evaluate(clinical_input)

        key = clinical_input.cache_key()
        return self.cache.get_or_compute(key, lambda: self._evaluate(clinical_input))

    def _evaluate(self, clinical_input: ClinicalInput) -> Evaluation:
        evaluated = evaluate_factors(clinical_input, self.config)
        evaluation = self.build_evaluation(
            clinical_input, evaluated.baseline, evaluated.factors, evaluated.diagnostics
        )

        report = evaluation.report
        logger.info(f"Evaluated age {clinical_input.age:g}: {report.numeric_prognosis:.1f}% "
                    f"per cycle ({report.category.value}), "
                    f"{len(evaluated.diagnostics.missing_data)} missing inputs")
        return evaluation

    def build_evaluation(self, clinical_input: ClinicalInput, baseline: float,
                         factors: FactorSet, diagnostics: DiagnosticSet) -> Evaluation:
        numeric, twelve_month = self.combine(baseline, factors)
        report = self.report_generator.generate(
            clinical_input, numeric, twelve_month, factors, diagnostics
        )
        return Evaluation(
            input=clinical_input,
            baseline=baseline,
            factors=factors,
            diagnostics=diagnostics,
            report=report
        )

    def evaluate_with_factors(self, evaluation: Evaluation, factors: FactorSet) -> Evaluation:
        """Re-run combination and reporting for a counterfactual FactorSet"""
        return self.build_evaluation(
            evaluation.input, evaluation.baseline, factors, evaluation.diagnostics
        )
