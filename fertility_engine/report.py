"""
Report generator - category, benchmark comparison and ordered recommendations
"""

import logging
from typing import Callable, List, Optional, Tuple

from .baseline import get_benchmark
from .config import EngineConfig
from .evaluators import (BMI_UNDERWEIGHT, HSG_UNILATERAL, HSG_BILATERAL, HSG_MALFORMATION,
                         MYOMA_SUBMUCOSAL, MYOMA_INTRAMURAL, ADENOMYOSIS_FOCAL)
from .schema import (ClinicalInput, DiagnosticSet, FactorName, FactorSet,
                     PrognosisCategory, Report)
from .texts import (RECOMMENDATIONS, PHRASES, BLOCKER_REASONS, BENCHMARK_PHRASE,
                    BENCHMARK_NOT_APPLICABLE)

logger = logging.getLogger(__name__)

CATEGORY_EMOJI = {
    PrognosisCategory.GOOD: "🟢",
    PrognosisCategory.MODERATE: "🟡",
    PrognosisCategory.LOW: "🔴",
    PrognosisCategory.REQUIRES_TREATMENT: "⛔",
}

def _bmi_recommendation(comment: str) -> Optional[str]:
    return RECOMMENDATIONS["BMI_LOW"] if comment == BMI_UNDERWEIGHT else RECOMMENDATIONS["BMI_HIGH"]

def _endometriosis_recommendation(comment: str) -> Optional[str]:
    return RECOMMENDATIONS["ENDO_MILD"] if comment in ("grade 1", "grade 2") else RECOMMENDATIONS["ENDO_SEVERE"]

def _myoma_recommendation(comment: str) -> Optional[str]:
    if comment == MYOMA_SUBMUCOSAL:
        return RECOMMENDATIONS["MYOMA_SUBMUCOSAL"]
    if comment == MYOMA_INTRAMURAL:
        return RECOMMENDATIONS["MYOMA_INTRAMURAL"]
    return None

def _adenomyosis_recommendation(comment: str) -> Optional[str]:
    return RECOMMENDATIONS["ADENO_FOCAL"] if comment == ADENOMYOSIS_FOCAL else RECOMMENDATIONS["ADENO_DIFFUSE"]

def _hsg_recommendation(comment: str) -> Optional[str]:
    if comment == HSG_UNILATERAL:
        return RECOMMENDATIONS["HSG_UNILATERAL"]
    if comment == HSG_BILATERAL:
        return RECOMMENDATIONS["HSG_BILATERAL"]
    if comment == HSG_MALFORMATION:
        return RECOMMENDATIONS["HSG_MALFORMATION"]
    return None

def _amh_recommendation(comment: str) -> Optional[str]:
    return RECOMMENDATIONS["AMH_HIGH"] if comment == "high ovarian reserve" else RECOMMENDATIONS["AMH_LOW"]

def _fixed(key: str) -> Callable[[str], Optional[str]]:
    return lambda comment: RECOMMENDATIONS[key]

# The order here is the order the recommendations are read in
RECOMMENDATION_ORDER: Tuple[Tuple[FactorName, Callable[[str], Optional[str]]], ...] = (
    (FactorName.BMI, _bmi_recommendation),
    (FactorName.CYCLE, _fixed("CYCLE_IRREGULAR")),
    (FactorName.PCOS, _fixed("PCOS")),
    (FactorName.ENDOMETRIOSIS, _endometriosis_recommendation),
    (FactorName.MYOMA, _myoma_recommendation),
    (FactorName.ADENOMYOSIS, _adenomyosis_recommendation),
    (FactorName.POLYP, _fixed("POLYP")),
    (FactorName.HSG, _hsg_recommendation),
    (FactorName.AMH, _amh_recommendation),
    (FactorName.PROLACTIN, _fixed("PRL_HIGH")),
    (FactorName.TSH, _fixed("TSH_HIGH")),
    (FactorName.HOMA, _fixed("HOMA_HIGH")),
    (FactorName.MALE, _fixed("MALE_FACTOR")),
)

class ReportGenerator:
    """Builds the Report record from the combined prognosis"""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def categorize(self, numeric_prognosis: float,
                   blocker: Optional[FactorName] = None) -> PrognosisCategory:
        """First matching threshold wins; an absolute blocker overrides the value"""
        if blocker is not None:
            return PrognosisCategory.REQUIRES_TREATMENT
        if numeric_prognosis >= self.config.good_threshold:
            return PrognosisCategory.GOOD
        if numeric_prognosis >= self.config.moderate_threshold:
            return PrognosisCategory.MODERATE
        return PrognosisCategory.LOW

    def prognosis_phrase(self, category: PrognosisCategory, numeric_prognosis: float,
                         twelve_month: float, blocker: Optional[FactorName] = None) -> str:
        reason = BLOCKER_REASONS.get(blocker.value, "") if blocker else ""
        return PHRASES[category.value].format(
            value=numeric_prognosis, annual=twelve_month, reason=reason
        )

    def compare_to_benchmark(self, age: float, numeric_prognosis: float,
                             blocker: Optional[FactorName] = None) -> str:
        """Label the result against the age-matched benchmark"""
        if blocker is not None:
            return BENCHMARK_NOT_APPLICABLE.format(reason=BLOCKER_REASONS[blocker.value])

        band = get_benchmark(age)
        difference = numeric_prognosis - band.benchmark
        margin = self.config.benchmark_margin_pp

        if difference > margin:
            comparison = "notably above"
        elif difference < -margin:
            comparison = "notably below"
        else:
            comparison = "similar to"

        return BENCHMARK_PHRASE.format(
            comparison=comparison, age_group=band.label, benchmark=band.benchmark
        )

    def collect_recommendations(self, factors: FactorSet,
                                diagnostics: DiagnosticSet) -> List[str]:
        """Walk the fixed factor order, emitting advice only for sub-optimal factors"""
        recommendations: List[str] = []

        if factors.get(FactorName.OTB) == 0.0:
            recommendations.append(RECOMMENDATIONS["OTB"])

        for name, template in RECOMMENDATION_ORDER:
            if factors.get(name) >= 1.0:
                continue
            text = template(diagnostics.comment(name))
            if text:
                recommendations.append(text)

        return recommendations

    def generate(self, clinical_input: ClinicalInput, numeric_prognosis: float,
                 twelve_month: float, factors: FactorSet,
                 diagnostics: DiagnosticSet) -> Report:
        """Assemble the complete report"""
        blocker = factors.blocker()
        category = self.categorize(numeric_prognosis, blocker)

        report = Report(
            numeric_prognosis=numeric_prognosis,
            twelve_month_probability=twelve_month,
            category=category,
            emoji=CATEGORY_EMOJI[category],
            phrase=self.prognosis_phrase(category, numeric_prognosis, twelve_month, blocker),
            benchmark_phrase=self.compare_to_benchmark(clinical_input.age, numeric_prognosis, blocker),
            recommendations=self.collect_recommendations(factors, diagnostics)
        )

        logger.debug(f"Report generated: {category.value} {numeric_prognosis:.1f}% "
                     f"with {len(report.recommendations)} recommendations")
        return report
