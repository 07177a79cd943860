"""Reporting helpers for training runs."""

from .metrics import CsvSink, HistoryRecorder, JsonlSink

__all__ = ["CsvSink", "HistoryRecorder", "JsonlSink"]
