"""Tabular storage and dataset helpers."""

from .csv_generic import load_csv
from .store import TabularStore
from .synthetic import make_and_gate, make_blobs, make_threshold_dataset
from .utils import seed_everything

__all__ = [
    "TabularStore",
    "load_csv",
    "make_and_gate",
    "make_blobs",
    "make_threshold_dataset",
    "seed_everything",
]
