"""Reporting utilities for sparseae."""

from .artifacts import write_manifest
from .metrics import CallbackFanout, CsvSink, JsonlSink, MetricsCapture
from .plots import PlotAdapter
from .summary import write_summary

__all__ = [
    "write_manifest",
    "write_summary",
    "CallbackFanout",
    "CsvSink",
    "JsonlSink",
    "MetricsCapture",
    "PlotAdapter",
]
