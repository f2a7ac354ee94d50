"""
SmartReports - Dynamic report builder engine.

Builds report configurations (data source, fields, filters, sort keys and
aggregations) against a per-source field catalog, executes them on the
back-office API, exports the displayed result and persists configurations
as templates.
"""

__version__ = "0.1.0"
__author__ = "SmartReports Team"
__license__ = "MIT"

from smartreports.client import SmartReportsClient
from smartreports.services.session import ReportBuilderSession

__all__ = ["ReportBuilderSession", "SmartReportsClient", "__version__"]
