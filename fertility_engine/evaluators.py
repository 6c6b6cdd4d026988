"""
Factor evaluators - map raw clinical values to bounded multipliers and diagnostics

Each evaluator is a pure function returning an EvaluatorResult; 1.0 means
no penalty and a missing factor is treated as neutral downstream.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .baseline import evaluate_age_baseline
from .config import EngineConfig
from .schema import (ClinicalInput, FactorName, FactorSet, DiagnosticSet,
                     MyomaType, AdenomyosisType, PolypType, HsgResult)

logger = logging.getLogger(__name__)

# Diagnostic labels referenced by the report generator
BMI_UNDERWEIGHT = "underweight"
BMI_NORMAL = "normal"
BMI_OVERWEIGHT = "overweight/obese"
CYCLE_REGULAR = "regular"
CYCLE_IRREGULAR = "irregular"
HSG_NORMAL = "both tubes patent"
HSG_UNILATERAL = "unilateral tubal obstruction"
HSG_BILATERAL = "bilateral tubal obstruction"
HSG_MALFORMATION = "uterine cavity malformation"
MYOMA_SUBMUCOSAL = "submucosal myoma"
MYOMA_INTRAMURAL = "large intramural myoma"
MYOMA_SUBSEROSAL = "subserosal myoma without cavity impact"
ADENOMYOSIS_FOCAL = "focal adenomyosis"
ADENOMYOSIS_DIFFUSE = "diffuse adenomyosis"
OTB_PRESENT = "prior tubal ligation"
MALE_NORMAL = "normal parameters"

@dataclass(frozen=True)
class EvaluatorResult:
    """Output of one evaluator: at most one factor, comment and missing-data label"""
    factor: Optional[float] = None
    diagnostic: Optional[str] = None
    missing: Optional[str] = None

def evaluate_bmi(bmi: Optional[float]) -> EvaluatorResult:
    if bmi is None:
        return EvaluatorResult(missing="Body mass index (BMI)")
    if bmi < 18.5:
        return EvaluatorResult(0.8, BMI_UNDERWEIGHT)
    if bmi <= 24.9:
        return EvaluatorResult(1.0, BMI_NORMAL)
    return EvaluatorResult(0.85, BMI_OVERWEIGHT)

def evaluate_cycle(cycle_duration: Optional[float]) -> EvaluatorResult:
    if cycle_duration is None:
        return EvaluatorResult(missing="Menstrual cycle length")
    if 21 <= cycle_duration <= 35:
        return EvaluatorResult(1.0, CYCLE_REGULAR)
    return EvaluatorResult(0.7, CYCLE_IRREGULAR)

def evaluate_pcos(has_pcos: bool, bmi: Optional[float],
                  cycle_duration: Optional[float]) -> EvaluatorResult:
    """
    PCOS penalty composed from a metabolic and an anovulatory component

    Both multipliers can apply; severity escalates to severe with BMI >= 30
    or cycles longer than 45 days.
    """
    if not has_pcos:
        return EvaluatorResult(1.0)

    factor = 1.0
    severity = "mild"

    if bmi is not None and bmi >= 25:
        factor *= 0.9
        severity = "moderate"
    if cycle_duration is not None and cycle_duration > 35:
        factor *= 0.85
        severity = "moderate"
    if (bmi is not None and bmi >= 30) or (cycle_duration is not None and cycle_duration > 45):
        severity = "severe"

    return EvaluatorResult(factor, severity)

def evaluate_endometriosis(grade: int) -> EvaluatorResult:
    if grade in (1, 2):
        return EvaluatorResult(0.85, f"grade {grade}")
    if grade in (3, 4):
        return EvaluatorResult(0.60, f"grade {grade}")
    return EvaluatorResult(1.0)

def evaluate_myoma(myoma_type: MyomaType) -> EvaluatorResult:
    if myoma_type is MyomaType.SUBMUCOSAL:
        return EvaluatorResult(0.30, MYOMA_SUBMUCOSAL)
    if myoma_type is MyomaType.INTRAMURAL_LARGE:
        return EvaluatorResult(0.60, MYOMA_INTRAMURAL)
    if myoma_type is MyomaType.SUBSEROSAL:
        return EvaluatorResult(1.0, MYOMA_SUBSEROSAL)
    return EvaluatorResult(1.0)

def evaluate_adenomyosis(adenomyosis_type: AdenomyosisType) -> EvaluatorResult:
    if adenomyosis_type is AdenomyosisType.FOCAL:
        return EvaluatorResult(0.8, ADENOMYOSIS_FOCAL)
    if adenomyosis_type is AdenomyosisType.DIFFUSE:
        return EvaluatorResult(0.5, ADENOMYOSIS_DIFFUSE)
    return EvaluatorResult(1.0)

def evaluate_polyp(polyp_type: PolypType) -> EvaluatorResult:
    if polyp_type is PolypType.SMALL:
        return EvaluatorResult(0.85, "small endometrial polyp (< 1 cm)")
    if polyp_type is PolypType.LARGE:
        return EvaluatorResult(0.70, "large (>= 1 cm) or multiple polyps")
    if polyp_type is PolypType.OSTIUM:
        return EvaluatorResult(0.50, "polyp on tubal ostium")
    return EvaluatorResult(1.0)

def evaluate_hsg(hsg_result: HsgResult) -> EvaluatorResult:
    if hsg_result.is_absent:
        return EvaluatorResult(missing="Hysterosalpingography (HSG) result")
    if hsg_result is HsgResult.UNILATERAL:
        return EvaluatorResult(0.7, HSG_UNILATERAL)
    if hsg_result is HsgResult.BILATERAL:
        return EvaluatorResult(0.0, HSG_BILATERAL)
    if hsg_result is HsgResult.MALFORMATION:
        return EvaluatorResult(0.3, HSG_MALFORMATION)
    return EvaluatorResult(1.0, HSG_NORMAL)

def evaluate_otb(has_otb: bool) -> EvaluatorResult:
    if has_otb:
        return EvaluatorResult(0.0, OTB_PRESENT)
    return EvaluatorResult(1.0)

def evaluate_amh(amh: Optional[float]) -> EvaluatorResult:
    if amh is None:
        return EvaluatorResult(missing="Anti-Mullerian hormone (AMH)")
    if amh > 4.0:
        return EvaluatorResult(0.9, "high ovarian reserve")
    if amh >= 2.0:
        return EvaluatorResult(1.0, "adequate ovarian reserve")
    if amh >= 1.0:
        return EvaluatorResult(0.85, "slightly reduced ovarian reserve")
    if amh >= 0.5:
        return EvaluatorResult(0.6, "low ovarian reserve")
    return EvaluatorResult(0.3, "very low ovarian reserve")

def evaluate_prolactin(prolactin: Optional[float]) -> EvaluatorResult:
    if prolactin is None:
        return EvaluatorResult(missing="Prolactin level")
    if prolactin >= 25:
        return EvaluatorResult(0.7, "hyperprolactinemia")
    return EvaluatorResult(1.0)

def evaluate_tsh(tsh: Optional[float]) -> EvaluatorResult:
    if tsh is None:
        return EvaluatorResult(missing="TSH level")
    if tsh > 2.5:
        return EvaluatorResult(0.8, "suboptimal for fertility")
    return EvaluatorResult(1.0)

def evaluate_homa(homa: Optional[float]) -> EvaluatorResult:
    # No missing-data notice: HOMA is an optional refinement
    if homa is None:
        return EvaluatorResult()
    if homa >= 4.0:
        return EvaluatorResult(0.90, "insulin resistance")
    if homa >= 2.5:
        return EvaluatorResult(0.95, "mild insulin resistance")
    return EvaluatorResult(1.0)

def evaluate_infertility_duration(years: Optional[float]) -> EvaluatorResult:
    if years is None:
        return EvaluatorResult()
    if years >= 5:
        return EvaluatorResult(0.85, f"{years:g} years of infertility")
    if years >= 3:
        return EvaluatorResult(0.93, f"{years:g} years of infertility")
    return EvaluatorResult(1.0)

def evaluate_pelvic_surgeries(surgeries: Optional[int]) -> EvaluatorResult:
    if surgeries is None:
        return EvaluatorResult()
    if surgeries >= 2:
        return EvaluatorResult(0.88, f"{surgeries} prior pelvic surgeries")
    if surgeries == 1:
        return EvaluatorResult(0.95, "1 prior pelvic surgery")
    return EvaluatorResult(1.0)

def _check_concentration(value: float) -> Optional[Tuple[float, str]]:
    if value < 5:
        return 0.25, "severe oligozoospermia"
    if value < 16:
        return 0.7, "mild-moderate oligozoospermia"
    return None

def _check_motility(value: float) -> Optional[Tuple[float, str]]:
    if value < 20:
        return 0.4, "severe asthenozoospermia"
    if value < 30:
        return 0.85, "mild asthenozoospermia"
    return None

def _check_morphology(value: float) -> Optional[Tuple[float, str]]:
    if value < 4:
        return 0.5, "teratozoospermia"
    return None

def evaluate_male_factor(concentration: Optional[float], motility: Optional[float],
                         morphology: Optional[float]) -> EvaluatorResult:
    """
    Worst of the three semen-analysis checks

    The reported factor is the minimum score (first checked wins a tie) and
    the diagnostic lists every abnormality in check order.
    Parameters left out of a partial analysis are reported as missing data.
    """
    checks = (
        ("sperm concentration", concentration, _check_concentration),
        ("progressive motility", motility, _check_motility),
        ("normal morphology", morphology, _check_morphology),
    )

    absent = [name for name, value, _ in checks if value is None]
    if len(absent) == len(checks):
        return EvaluatorResult(1.0, missing="Complete semen analysis")
    missing = f"Semen analysis: {', '.join(absent)}" if absent else None

    worst: Optional[float] = None
    labels: List[str] = []
    for _, value, check in checks:
        if value is None:
            continue
        finding = check(value)
        if finding is None:
            continue
        score, label = finding
        labels.append(label)
        if worst is None or score < worst:
            worst = score

    if worst is None:
        return EvaluatorResult(1.0, MALE_NORMAL, missing)
    return EvaluatorResult(worst, ", ".join(labels), missing)

# Fixed evaluation order; each entry contributes at most one factor
FACTOR_EVALUATORS: Tuple[Tuple[FactorName, Callable[[ClinicalInput], EvaluatorResult]], ...] = (
    (FactorName.BMI, lambda i: evaluate_bmi(i.bmi)),
    (FactorName.CYCLE, lambda i: evaluate_cycle(i.cycle_duration)),
    (FactorName.PCOS, lambda i: evaluate_pcos(i.has_pcos, i.bmi, i.cycle_duration)),
    (FactorName.ENDOMETRIOSIS, lambda i: evaluate_endometriosis(i.endometriosis_grade)),
    (FactorName.MYOMA, lambda i: evaluate_myoma(i.myoma_type)),
    (FactorName.ADENOMYOSIS, lambda i: evaluate_adenomyosis(i.adenomyosis_type)),
    (FactorName.POLYP, lambda i: evaluate_polyp(i.polyp_type)),
    (FactorName.HSG, lambda i: evaluate_hsg(i.hsg_result)),
    (FactorName.OTB, lambda i: evaluate_otb(i.has_otb)),
    (FactorName.AMH, lambda i: evaluate_amh(i.amh)),
    (FactorName.PROLACTIN, lambda i: evaluate_prolactin(i.prolactin)),
    (FactorName.TSH, lambda i: evaluate_tsh(i.tsh)),
    (FactorName.HOMA, lambda i: evaluate_homa(i.effective_homa())),
    (FactorName.INFERTILITY_DURATION, lambda i: evaluate_infertility_duration(i.infertility_years)),
    (FactorName.PELVIC_SURGERY, lambda i: evaluate_pelvic_surgeries(i.pelvic_surgeries)),
    (FactorName.MALE, lambda i: evaluate_male_factor(
        i.sperm_concentration, i.sperm_progressive_motility, i.sperm_normal_morphology)),
)

@dataclass(frozen=True)
class FactorEvaluation:
    """Baseline plus the FactorSet/DiagnosticSet pair built in lock-step"""
    baseline: float
    factors: FactorSet
    diagnostics: DiagnosticSet

def evaluate_factors(clinical_input: ClinicalInput,
                     config: Optional[EngineConfig] = None) -> FactorEvaluation:
    """Run every evaluator once and accumulate their results"""
    config = config or EngineConfig()

    baseline, age_potential = evaluate_age_baseline(
        clinical_input.age, config.min_clinical_age, config.max_clinical_age
    )

    factors: Dict[FactorName, float] = {}
    comments: Dict[FactorName, str] = {}
    missing_data: List[str] = []

    for name, evaluator in FACTOR_EVALUATORS:
        result = evaluator(clinical_input)
        if result.factor is not None:
            factors[name] = result.factor
        if result.diagnostic:
            comments[name] = result.diagnostic
        if result.missing:
            missing_data.append(result.missing)

    logger.debug(f"Evaluated {len(factors)} factors, {len(missing_data)} missing inputs")

    return FactorEvaluation(
        baseline=baseline,
        factors=FactorSet(values=factors),
        diagnostics=DiagnosticSet(
            age_potential=age_potential,
            comments=comments,
            missing_data=missing_data
        )
    )
