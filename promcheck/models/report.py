"""
Check Report Model
Outcome of one MetricChecker run
"""

from dataclasses import dataclass, field
from typing import Dict

import structlog
import yaml

from promcheck.models.metric_family import MetricFamilies

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single checker"""

    passed: bool
    message: str = ""

    def to_dict(self) -> dict:
        return {"passed": self.passed, "message": self.message}


@dataclass
class CheckReport:
    """
    Result of evaluating every checker against one scrape

    Attributes:
        success: True when every checker passed
        metric_families: The full scraped family map, kept for diagnostics
        results: Checker description to its outcome
    """

    success: bool = True
    metric_families: MetricFamilies = field(default_factory=dict)
    results: Dict[str, CheckResult] = field(default_factory=dict)

    def record(self, description: str, passed: bool, message: str) -> None:
        """
        Record the outcome of a checker

        Args:
            description: Stable checker description (report key)
            passed: Whether the checker passed
            message: Failure message, or "ok" for a passing checker

        Checkers sharing a description share one entry; a failure is never
        replaced by a later pass.
        """
        if not passed:
            self.success = False

        existing = self.results.get(description)
        if existing is not None:
            logger.warning("Duplicate checker description", checker=description)
            if not existing.passed:
                return

        self.results[description] = CheckResult(passed=passed, message=message or "ok")

    def failures(self) -> Dict[str, CheckResult]:
        """Get only the failed results"""
        return {key: result for key, result in self.results.items() if not result.passed}

    def to_dict(self) -> dict:
        """
        Convert to dictionary

        Returns:
            Dict with success, results and metrics
        """
        return {
            "success": self.success,
            "results": {key: result.to_dict() for key, result in self.results.items()},
            "metrics": {
                name: family.to_dict() for name, family in self.metric_families.items()
            },
        }

    def to_yaml(self) -> str:
        """Serialize the report as YAML text"""
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)
