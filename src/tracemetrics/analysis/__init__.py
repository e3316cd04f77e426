"""Trace loading and reporting helpers."""

from .loader import load_trace_events
from .report import PageLoadReport, analyze_trace, build_page_load_report, first_fcp_timestamp, report_to_dict

__all__ = [
    "PageLoadReport",
    "analyze_trace",
    "build_page_load_report",
    "first_fcp_timestamp",
    "load_trace_events",
    "report_to_dict",
]
