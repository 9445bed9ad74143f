"""Reporting utilities for neuralnet."""

from .artifacts import write_manifest
from .metrics import CostPrinter, CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = [
    "CostPrinter",
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "write_manifest",
    "write_summary",
]
