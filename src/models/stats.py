"""
Conversion statistics models

ConversionStats is owned by the preview context (one per server process) and
handed to the converter explicitly; nothing here is module-global.
"""

from datetime import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class ConversionErrorRecord:
    """
    A failed conversion, as recorded in the statistics error log

    Attributes:
        message: Exception message
        timestamp: ISO-8601 time the failure was recorded
        stack: Formatted traceback of the escaping exception
        context: Extra detail (pass name, document length)
    """
    message: str
    timestamp: str
    stack: str = ""
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'message': self.message,
            'timestamp': self.timestamp,
            'stack': self.stack,
            'context': dict(self.context),
        }


@dataclass
class ConversionStats:
    """
    Process-lifetime conversion counters

    Invariant: total_conversions counts every convert() call, failed ones
    included; len(errors) counts the failed ones.
    """
    total_conversions: int = 0
    errors: List[ConversionErrorRecord] = field(default_factory=list)

    def conversion_count(self) -> None:
        self.total_conversions += 1

    def error_record(self, message: str, stack: str = "", **context: Any) -> ConversionErrorRecord:
        """Append a failure with the current timestamp and return it"""
        record = ConversionErrorRecord(
            message=message,
            timestamp=datetime.now().isoformat(),
            stack=stack,
            context=context,
        )
        self.errors.append(record)
        return record

    def reset(self) -> None:
        """Clear the counter and the error log"""
        self.total_conversions = 0
        self.errors = []

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalConversions': self.total_conversions,
            'errors': [record.to_dict() for record in self.errors],
        }


@dataclass
class ConversionReport:
    """
    Per-call summary of one conversion

    Attributes:
        substitutions: Custom tag name -> number of elements rewritten
    """
    substitutions: Dict[str, int] = field(default_factory=dict)

    def substitution_count(self, tag_name: str) -> None:
        self.substitutions[tag_name] = self.substitutions.get(tag_name, 0) + 1

    @property
    def total(self) -> int:
        return sum(self.substitutions.values())
