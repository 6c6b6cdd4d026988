"""
Fertility Prognosis Engine
Per-cycle spontaneous pregnancy prognosis with odds-space factor combination and what-if simulation
"""

from .schema import (ClinicalInput, FactorSet, DiagnosticSet, Report, Evaluation,
                     SimulationResult, FactorName, PrognosisCategory, MyomaType,
                     AdenomyosisType, PolypType, HsgResult, ALL_FACTORS)
from .config import EngineConfig, load_config
from .convert import ProbabilityConverter
from .engine import PrognosisEngine
from .report import ReportGenerator
from .simulator import FertilitySimulator
from .cache import ResultCache
from .errors import FertilityEngineError, InputValidationError, ConfigurationError, ErrorCode

__all__ = [
    'ClinicalInput', 'FactorSet', 'DiagnosticSet', 'Report', 'Evaluation', 'SimulationResult',
    'FactorName', 'PrognosisCategory', 'MyomaType', 'AdenomyosisType', 'PolypType', 'HsgResult',
    'ALL_FACTORS', 'EngineConfig', 'load_config', 'ProbabilityConverter', 'PrognosisEngine',
    'ReportGenerator', 'FertilitySimulator', 'ResultCache',
    'FertilityEngineError', 'InputValidationError', 'ConfigurationError', 'ErrorCode'
]
