"""
Pydantic schemas for fertility engine components
"""

import hashlib
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, field_validator

class MyomaType(str, Enum):
    NONE = "none"
    SUBMUCOSAL = "submucosal"
    INTRAMURAL_LARGE = "intramural_large"
    SUBSEROSAL = "subserosal"

    @property
    def is_absent(self) -> bool:
        return self is MyomaType.NONE

class AdenomyosisType(str, Enum):
    NONE = "none"
    FOCAL = "focal"
    DIFFUSE = "diffuse"

    @property
    def is_absent(self) -> bool:
        return self is AdenomyosisType.NONE

class PolypType(str, Enum):
    NONE = "none"
    SMALL = "small"
    LARGE = "large"
    OSTIUM = "ostium"

    @property
    def is_absent(self) -> bool:
        return self is PolypType.NONE

class HsgResult(str, Enum):
    UNKNOWN = "unknown"
    NORMAL = "normal"
    UNILATERAL = "unilateral"
    BILATERAL = "bilateral"
    MALFORMATION = "malformation"

    @property
    def is_absent(self) -> bool:
        return self is HsgResult.UNKNOWN

class PrognosisCategory(str, Enum):
    GOOD = "GOOD"
    MODERATE = "MODERATE"
    LOW = "LOW"
    REQUIRES_TREATMENT = "REQUIRES_TREATMENT"

class FactorName(str, Enum):
    """Adjustable factors, in the order they are evaluated"""
    BMI = "bmi"
    CYCLE = "cycle"
    PCOS = "pcos"
    ENDOMETRIOSIS = "endometriosis"
    MYOMA = "myoma"
    ADENOMYOSIS = "adenomyosis"
    POLYP = "polyp"
    HSG = "hsg"
    OTB = "otb"
    AMH = "amh"
    PROLACTIN = "prolactin"
    TSH = "tsh"
    HOMA = "homa"
    INFERTILITY_DURATION = "infertility_duration"
    PELVIC_SURGERY = "pelvic_surgery"
    MALE = "male"

ALL_FACTORS = "ALL"

# Factors whose 0.0 value overrides the whole computation, checked in this order
BLOCKING_FACTORS: Tuple[FactorName, ...] = (FactorName.OTB, FactorName.HSG)

# 405 converts glucose (mg/dL) x insulin (uU/mL) into HOMA-IR
HOMA_IR_CONSTANT = 405.0

def _absent_to_default(value, default: Enum):
    """Treat None and empty strings as the absent member of a categorical field"""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    return value

class ClinicalInput(BaseModel):
    """One evaluation request as supplied by the intake form"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Scalars are strict: "yes" or "30" is rejected rather than coerced
    # Basic profile
    age: StrictFloat = Field(ge=0)
    bmi: Optional[StrictFloat] = Field(default=None, ge=0)
    cycle_duration: Optional[StrictFloat] = Field(default=None, ge=0)
    infertility_years: Optional[StrictFloat] = Field(default=None, ge=0)

    # Gynecological history
    has_pcos: StrictBool = False
    endometriosis_grade: StrictInt = Field(default=0, ge=0, le=4)
    myoma_type: MyomaType = MyomaType.NONE
    adenomyosis_type: AdenomyosisType = AdenomyosisType.NONE
    polyp_type: PolypType = PolypType.NONE
    hsg_result: HsgResult = HsgResult.UNKNOWN
    has_otb: StrictBool = False
    pelvic_surgeries: Optional[StrictInt] = Field(default=None, ge=0)

    # Laboratory
    amh: Optional[StrictFloat] = Field(default=None, ge=0)
    prolactin: Optional[StrictFloat] = Field(default=None, ge=0)
    tsh: Optional[StrictFloat] = Field(default=None, ge=0)
    homa_ir: Optional[StrictFloat] = Field(default=None, ge=0)
    fasting_insulin: Optional[StrictFloat] = Field(default=None, ge=0)
    fasting_glucose: Optional[StrictFloat] = Field(default=None, ge=0)

    # Semen analysis
    sperm_concentration: Optional[StrictFloat] = Field(default=None, ge=0)
    sperm_progressive_motility: Optional[StrictFloat] = Field(default=None, ge=0)
    sperm_normal_morphology: Optional[StrictFloat] = Field(default=None, ge=0)

    @field_validator("myoma_type", mode="before")
    @classmethod
    def _myoma_absent(cls, value):
        return _absent_to_default(value, MyomaType.NONE)

    @field_validator("adenomyosis_type", mode="before")
    @classmethod
    def _adenomyosis_absent(cls, value):
        return _absent_to_default(value, AdenomyosisType.NONE)

    @field_validator("polyp_type", mode="before")
    @classmethod
    def _polyp_absent(cls, value):
        return _absent_to_default(value, PolypType.NONE)

    @field_validator("hsg_result", mode="before")
    @classmethod
    def _hsg_absent(cls, value):
        return _absent_to_default(value, HsgResult.UNKNOWN)

    def effective_homa(self) -> Optional[float]:
        """Reported HOMA-IR, or the value derived from fasting insulin and glucose"""
        if self.homa_ir is not None:
            return self.homa_ir
        if self.fasting_insulin is not None and self.fasting_glucose is not None:
            return round(self.fasting_insulin * self.fasting_glucose / HOMA_IR_CONSTANT, 2)
        return None

    def cache_key(self) -> str:
        """Stable digest of the record's content"""
        payload = self.model_dump_json()
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

class FactorSet(BaseModel):
    """Multipliers in [0,1]; names absent from the set are neutral"""
    model_config = ConfigDict(frozen=True)

    values: Dict[FactorName, float] = {}

    @field_validator("values")
    @classmethod
    def _check_range(cls, values: Dict[FactorName, float]) -> Dict[FactorName, float]:
        for name, value in values.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"factor {name.value} must lie in [0, 1], got {value}")
        return values

    def get(self, name: FactorName) -> float:
        return self.values.get(name, 1.0)

    def __contains__(self, name: FactorName) -> bool:
        return name in self.values

    def items(self) -> List[Tuple[FactorName, float]]:
        """Present factors in evaluation order"""
        return [(name, self.values[name]) for name in FactorName if name in self.values]

    def with_factors(self, updates: Dict[FactorName, float]) -> "FactorSet":
        """Return a new set with the given values replaced"""
        merged = dict(self.values)
        merged.update(updates)
        return FactorSet(values=merged)

    def suboptimal(self) -> List[FactorName]:
        return [name for name, value in self.items() if value < 1.0]

    def blocker(self) -> Optional[FactorName]:
        """The absolute blocker in effect, if any"""
        for name in BLOCKING_FACTORS:
            if name in self.values and self.values[name] == 0.0:
                return name
        return None

class DiagnosticSet(BaseModel):
    """Descriptive output produced alongside the FactorSet"""
    model_config = ConfigDict(frozen=True)

    age_potential: str = ""
    comments: Dict[FactorName, str] = {}
    missing_data: List[str] = []

    def comment(self, name: FactorName) -> str:
        return self.comments.get(name, "")

class Report(BaseModel):
    """Final prognosis as consumed by the presentation layer"""
    model_config = ConfigDict(frozen=True)

    numeric_prognosis: float = Field(ge=0, le=100)  # per-cycle %
    twelve_month_probability: float = Field(ge=0, le=100)
    category: PrognosisCategory
    emoji: str
    phrase: str
    benchmark_phrase: str
    recommendations: List[str] = []

class Evaluation(BaseModel):
    """Input, derived factors and report of one evaluation"""
    model_config = ConfigDict(frozen=True)

    input: ClinicalInput
    baseline: float  # per-cycle % from the age table
    factors: FactorSet
    diagnostics: DiagnosticSet
    report: Report

class SimulationResult(BaseModel):
    """Counterfactual report with one or all sub-optimal factors normalized"""
    model_config = ConfigDict(frozen=True)

    factor_name: Union[FactorName, str]  # FactorName or "ALL"
    report: Report
    explanation: str

    original_prognosis: float
    new_prognosis: float
    improvement: float  # percentage points
    impact_level: str
    improved_factors: List[FactorName] = []

    # Factor metadata
    timeframe: str = "Variable"
    difficulty: str = "moderate"
    cost: str = "medium"
    evidence: str = "Clinical assessment"
