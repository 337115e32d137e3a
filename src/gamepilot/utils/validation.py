"""
Validation utilities for pipeline outputs

Validation never raises: callers receive a report they can log and continue
past. Range violations make a report invalid; suspicious but legal
combinations are attached as advisory warnings.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Any, Optional, Mapping


class ValidationResult(Enum):
    """Validation result types"""
    VALID = "valid"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """Represents a validation issue"""
    level: ValidationResult
    field: str
    message: str
    value: Any = None


@dataclass
class ValidationReport:
    """Outcome of validating one record"""
    entries: List[ValidationIssue] = field(default_factory=list)

    @property
    def issues(self) -> List[str]:
        return [entry.message for entry in self.entries if entry.level == ValidationResult.ERROR]

    @property
    def warnings(self) -> List[str]:
        return [entry.message for entry in self.entries if entry.level == ValidationResult.WARNING]

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def error(self, field_name: str, message: str, value: Any = None):
        self.entries.append(ValidationIssue(ValidationResult.ERROR, field_name, message, value))

    def warn(self, field_name: str, message: str, value: Any = None):
        self.entries.append(ValidationIssue(ValidationResult.WARNING, field_name, message, value))

    def merge(self, other: 'ValidationReport') -> 'ValidationReport':
        """Append another report's entries to this one"""
        self.entries.extend(other.entries)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'issues': self.issues,
            'warnings': self.warnings
        }


def check_unit_range(values: Mapping[str, float], report: Optional[ValidationReport] = None,
                     lower: float = 0.0, upper: float = 1.0) -> ValidationReport:
    """Flag every value outside [lower, upper]"""
    report = report if report is not None else ValidationReport()
    for key, value in values.items():
        if value is None or value < lower or value > upper:
            report.error(key, f"{key} is out of range [{lower:g},{upper:g}]: {value}", value)
    return report
