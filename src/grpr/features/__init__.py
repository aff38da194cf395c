"""
Features built on top of discovery and execution.
"""

from .report import RunReport, write_report_file

__all__ = [
    "RunReport",
    "write_report_file",
]
