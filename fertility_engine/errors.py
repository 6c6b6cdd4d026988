"""
Fertility engine error code system
Provides specific, auditable error codes for input validation and configuration failures.
"""

from enum import Enum
from typing import Dict, Any, Optional
import logging
from datetime import datetime, timezone
import json
import uuid

class ErrorCode(Enum):
    """Specific error codes for fertility engine components"""

    # Input Errors (INPUT_xxx)
    INPUT_INVALID_RECORD = "INPUT_001"
    INPUT_INVALID_CATEGORY = "INPUT_002"
    INPUT_NEGATIVE_VALUE = "INPUT_003"
    INPUT_MISSING_AGE = "INPUT_004"
    INPUT_INVALID_TYPE = "INPUT_005"

    # Engine Errors (ENGINE_xxx)
    ENGINE_INVALID_PROBABILITY = "ENGINE_001"

    # Simulation Errors (SIM_xxx)
    SIM_UNKNOWN_FACTOR = "SIM_001"

    # Configuration Errors (CFG_xxx)
    CFG_INVALID_CONFIG = "CFG_001"
    CFG_FILE_UNREADABLE = "CFG_002"

class FertilityEngineError(Exception):
    """Base exception class for the fertility engine with specific error codes"""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.trace_id = str(uuid.uuid4())[:8]

        super().__init__(f"[{error_code.value}] {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/API responses"""
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
            "trace_id": self.trace_id,
            "original_error": str(self.original_exception) if self.original_exception else None
        }

    def to_json(self) -> str:
        """Convert error to JSON string"""
        return json.dumps(self.to_dict(), indent=2, default=str)

class InputValidationError(FertilityEngineError, ValueError):
    """Structurally invalid clinical input (wrong type, invalid enum, negative value)"""

class ConfigurationError(FertilityEngineError):
    """Invalid or unreadable engine configuration"""

class ErrorLogger:
    """Centralized error logging with structured output"""

    def __init__(self, logger_name: str = "fertility_engine"):
        self.logger = logging.getLogger(logger_name)

    def log_error(self, error: FertilityEngineError, level: int = logging.ERROR):
        """Log error with structured format"""
        self.logger.log(
            level,
            f"ENGINE_ERROR: {error.error_code.value} - {error.message}",
            extra={
                "error_code": error.error_code.value,
                "trace_id": error.trace_id,
                "details": error.details,
                "timestamp": error.timestamp
            }
        )

        if error.original_exception:
            self.logger.debug(
                f"Original exception for {error.trace_id}:",
                exc_info=error.original_exception
            )

def _classify_validation_error(original_error: Exception) -> ErrorCode:
    """Pick the most specific input error code from a pydantic failure"""
    errors = getattr(original_error, "errors", None)
    if not callable(errors):
        return ErrorCode.INPUT_INVALID_RECORD

    for item in errors():
        location = item.get("loc", ())
        error_type = item.get("type", "")
        if error_type == "enum":
            return ErrorCode.INPUT_INVALID_CATEGORY
        if error_type == "missing" and "age" in location:
            return ErrorCode.INPUT_MISSING_AGE
        if error_type == "greater_than_equal":
            return ErrorCode.INPUT_NEGATIVE_VALUE
        if error_type.endswith("_type"):
            return ErrorCode.INPUT_INVALID_TYPE
    return ErrorCode.INPUT_INVALID_RECORD

def handle_input_validation_error(data: Any, original_error: Exception) -> InputValidationError:
    """Create specific error for a clinical record that fails validation"""
    fields = []
    errors = getattr(original_error, "errors", None)
    if callable(errors):
        fields = [".".join(str(part) for part in item.get("loc", ())) for item in errors()]

    return InputValidationError(
        error_code=_classify_validation_error(original_error),
        message="Clinical input failed validation",
        details={
            "fields": fields,
            "received_keys": sorted(data.keys()) if isinstance(data, dict) else None,
            "suggested_action": "Check field names, enumeration values and sign of numeric values"
        },
        original_exception=original_error
    )

def handle_unknown_factor_error(factor_name: Any) -> InputValidationError:
    """Create specific error for simulation of a factor outside the enumeration"""
    return InputValidationError(
        error_code=ErrorCode.SIM_UNKNOWN_FACTOR,
        message=f"Unknown factor '{factor_name}'",
        details={
            "factor_name": str(factor_name),
            "suggested_action": "Use one of the FactorName values or the 'ALL' simulation"
        }
    )

def handle_invalid_baseline_error(baseline: float) -> FertilityEngineError:
    """Create specific error for a baseline outside [0, 100] percent"""
    return FertilityEngineError(
        error_code=ErrorCode.ENGINE_INVALID_PROBABILITY,
        message=f"Baseline probability {baseline}% is outside [0, 100]",
        details={"baseline": baseline}
    )

def handle_config_error(path: str, reason: str, original_error: Optional[Exception] = None) -> ConfigurationError:
    """Create specific error for an invalid configuration file"""
    error_code = ErrorCode.CFG_FILE_UNREADABLE if original_error else ErrorCode.CFG_INVALID_CONFIG
    return ConfigurationError(
        error_code=error_code,
        message=f"Invalid engine configuration: {reason}",
        details={"path": path, "reason": reason},
        original_exception=original_error
    )

# Error code mapping for quick lookups
ERROR_CODE_DESCRIPTIONS = {
    ErrorCode.INPUT_INVALID_RECORD: "Clinical input is structurally invalid",
    ErrorCode.INPUT_INVALID_CATEGORY: "Categorical value outside its enumeration",
    ErrorCode.INPUT_NEGATIVE_VALUE: "Negative numeric clinical value",
    ErrorCode.INPUT_MISSING_AGE: "Age is required",
    ErrorCode.INPUT_INVALID_TYPE: "Clinical value has the wrong type",
    ErrorCode.ENGINE_INVALID_PROBABILITY: "Probability outside its valid range",
    ErrorCode.SIM_UNKNOWN_FACTOR: "Simulation requested for an unknown factor",
    ErrorCode.CFG_INVALID_CONFIG: "Engine configuration is inconsistent",
    ErrorCode.CFG_FILE_UNREADABLE: "Configuration file could not be read or parsed"
}

def get_error_description(error_code: ErrorCode) -> str:
    """Get human-readable description for error code"""
    return ERROR_CODE_DESCRIPTIONS.get(error_code, "Unknown error")
