"""
What-if simulator - recompute the prognosis with sub-optimal factors normalized
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from .engine import PrognosisEngine
from .errors import handle_unknown_factor_error
from .schema import ALL_FACTORS, Evaluation, FactorName, SimulationResult

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class FactorMetadata:
    """Display label and practical profile of improving a factor"""
    label: str
    timeframe: str
    difficulty: str
    cost: str
    evidence: str

FACTOR_METADATA: Dict[FactorName, FactorMetadata] = {
    FactorName.BMI: FactorMetadata("Body mass index", "3-6 months", "moderate", "low", "Strong evidence (PMID: 25431122)"),
    FactorName.CYCLE: FactorMetadata("Cycle regularity", "2-4 months", "easy", "low", "Moderate evidence (PMID: 23870423)"),
    FactorName.PCOS: FactorMetadata("Polycystic ovary syndrome", "6-12 months", "difficult", "medium", "Strong evidence (PMID: 28460551)"),
    FactorName.ENDOMETRIOSIS: FactorMetadata("Endometriosis", "6-18 months", "complex", "high", "Strong evidence (PMID: 31277194)"),
    FactorName.MYOMA: FactorMetadata("Uterine myomas", "3-12 months", "difficult", "high", "Moderate evidence (PMID: 29453926)"),
    FactorName.ADENOMYOSIS: FactorMetadata("Adenomyosis", "6-24 months", "complex", "high", "Limited evidence (PMID: 30447124)"),
    FactorName.POLYP: FactorMetadata("Endometrial polyps", "1-3 months", "easy", "medium", "Moderate evidence (PMID: 27568409)"),
    FactorName.HSG: FactorMetadata("Tubal patency", "3-6 months", "difficult", "high", "Strong evidence (PMID: 28460551)"),
    FactorName.OTB: FactorMetadata("Prior tubal ligation", "N/A", "complex", "high", "Surgical reversal or IVF"),
    FactorName.AMH: FactorMetadata("Ovarian reserve (AMH)", "6-12 months", "complex", "medium", "Strong evidence (PMID: 29453926)"),
    FactorName.PROLACTIN: FactorMetadata("Prolactin levels", "1-3 months", "easy", "low", "Strong evidence (PMID: 25431122)"),
    FactorName.TSH: FactorMetadata("Thyroid function (TSH)", "2-6 months", "easy", "low", "Strong evidence (PMID: 28460551)"),
    FactorName.HOMA: FactorMetadata("Insulin resistance", "3-6 months", "moderate", "low", "Moderate evidence (PMID: 27568409)"),
    FactorName.INFERTILITY_DURATION: FactorMetadata("Infertility duration", "N/A", "complex", "low", "Observational data"),
    FactorName.PELVIC_SURGERY: FactorMetadata("Pelvic surgeries", "N/A", "complex", "high", "Limited evidence"),
    FactorName.MALE: FactorMetadata("Male factor", "3-6 months", "moderate", "medium", "Strong evidence (PMID: 30447124)"),
}

def impact_level(improvement: float) -> str:
    """Classify an improvement expressed in percentage points"""
    if improvement >= 5.0:
        return "critical"
    if improvement >= 2.5:
        return "high"
    if improvement >= 1.0:
        return "medium"
    return "low"

class FertilitySimulator:
    """Counterfactual re-evaluation of an Evaluation; never mutates it"""

    def __init__(self, engine: Optional[PrognosisEngine] = None):
        self.engine = engine or PrognosisEngine()

    @staticmethod
    def _resolve(name: Union[FactorName, str]) -> FactorName:
        try:
            return FactorName(name)
        except ValueError:
            raise handle_unknown_factor_error(name) from None

    def can_simulate_all(self, evaluation: Evaluation) -> bool:
        """Whether 'simulate all' adds anything over single-factor simulation"""
        return len(evaluation.factors.suboptimal()) >= 2

    def simulate_factor(self, evaluation: Evaluation, name: Union[FactorName, str],
                        label: Optional[str] = None) -> SimulationResult:
        """Force one factor to its best value (1.0), everything else unchanged"""
        factor = self._resolve(name)
        metadata = FACTOR_METADATA[factor]
        label = label or metadata.label

        original = evaluation.report.numeric_prognosis
        already_optimal = evaluation.factors.get(factor) >= 1.0
        improved = [] if already_optimal else [factor]

        simulated = self.engine.evaluate_with_factors(
            evaluation, evaluation.factors.with_factors({factor: 1.0})
        )
        new = simulated.report.numeric_prognosis
        improvement = new - original

        if already_optimal:
            explanation = f"{label} is already at its optimal value; the prognosis stays at {original:.1f}% per cycle."
        else:
            explanation = (f"Normalizing {label} would change the prognosis from {original:.1f}% "
                           f"to {new:.1f}% per cycle ({improvement:+.1f} points).")

        logger.debug(f"Simulated {factor.value}: {original:.2f}% -> {new:.2f}%")

        return SimulationResult(
            factor_name=factor,
            report=simulated.report,
            explanation=explanation,
            original_prognosis=original,
            new_prognosis=new,
            improvement=improvement,
            impact_level=impact_level(improvement),
            improved_factors=improved,
            timeframe=metadata.timeframe,
            difficulty=metadata.difficulty,
            cost=metadata.cost,
            evidence=metadata.evidence
        )

    def simulate_all_improvements(self, evaluation: Evaluation) -> SimulationResult:
        """Force every sub-optimal factor to 1.0 at once"""
        suboptimal = evaluation.factors.suboptimal()
        original = evaluation.report.numeric_prognosis

        simulated = self.engine.evaluate_with_factors(
            evaluation, evaluation.factors.with_factors({name: 1.0 for name in suboptimal})
        )
        new = simulated.report.numeric_prognosis
        improvement = new - original

        if suboptimal:
            labels = ", ".join(FACTOR_METADATA[name].label for name in suboptimal)
            explanation = (f"Normalizing all sub-optimal factors ({labels}) would change the prognosis "
                           f"from {original:.1f}% to {new:.1f}% per cycle ({improvement:+.1f} points).")
        else:
            explanation = f"No sub-optimal factors to improve; the prognosis stays at {original:.1f}% per cycle."

        logger.debug(f"Simulated all ({len(suboptimal)} factors): {original:.2f}% -> {new:.2f}%")

        return SimulationResult(
            factor_name=ALL_FACTORS,
            report=simulated.report,
            explanation=explanation,
            original_prognosis=original,
            new_prognosis=new,
            improvement=improvement,
            impact_level=impact_level(improvement),
            improved_factors=suboptimal
        )

    def rank_improvements(self, evaluation: Evaluation) -> List[SimulationResult]:
        """Single-factor simulations for every sub-optimal factor, largest gain first"""
        results = [self.simulate_factor(evaluation, name) for name in evaluation.factors.suboptimal()]
        # sorted() is stable, so ties keep evaluation order
        return sorted(results, key=lambda result: result.improvement, reverse=True)
