"""
Exception hierarchy for promcheck
Infrastructure failures and assertion failures are kept apart
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from promcheck.models.report import CheckReport


class PromCheckError(Exception):
    """Base exception for promcheck errors"""

    pass


class ConfigError(PromCheckError):
    """Configuration could not be loaded or validated"""

    pass


class FixtureError(PromCheckError):
    """Base exception for fixture errors"""

    pass


class FixtureSetupError(FixtureError):
    """A fixture failed to set up"""

    pass


class FixtureTeardownError(FixtureError):
    """A fixture failed to tear down"""

    pass


class ScriptError(FixtureError):
    """A hook command could not be parsed or exited with a non-zero code"""

    pass


class ExporterStartError(PromCheckError):
    """The exporter could not be located or never became reachable"""

    pass


class MetricsFetchError(PromCheckError):
    """The metrics endpoint could not be scraped"""

    pass


class MetricsParseError(MetricsFetchError):
    """The scraped body is not valid Prometheus text exposition format"""

    pass


class CheckFailedError(PromCheckError):
    """
    One or more checkers reported a failure

    The run itself completed; ``report`` carries the result of every checker.
    """

    def __init__(self, report: "CheckReport"):
        self.report = report
        failed = [
            f"{description}: {result.message}"
            for description, result in report.results.items()
            if not result.passed
        ]
        super().__init__("check failed, details:\n" + "\n".join(failed))
