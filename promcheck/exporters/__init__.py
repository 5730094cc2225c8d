"""
Exporters yield the base URL to scrape
"""

from promcheck.exporters.base import Exporter
from promcheck.exporters.compose import ComposeExporter, wait_for_port
from promcheck.exporters.external import ExternalExporter

EXPORTER_TYPES = {
    "compose": ComposeExporter,
    "external": ExternalExporter,
}

__all__ = [
    "Exporter",
    "ComposeExporter",
    "ExternalExporter",
    "EXPORTER_TYPES",
    "wait_for_port",
]
