"""Load CSV files into a :class:`TabularStore`."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.preprocessing import LabelEncoder

from .store import TabularStore
from .utils import standardize


def load_csv(
    path: str | Path,
    target_col: str = "target",
    *,
    encode_labels: bool = True,
    standardize_inputs: bool = False,
) -> Tuple[TabularStore, Optional[List[object]]]:
    """Read ``path`` and return the store plus the decoded class names.

    Non-numeric targets are mapped to class indices with a
    :class:`~sklearn.preprocessing.LabelEncoder`; the second return value lists
    the original class values in index order, or is ``None`` when the target
    column was already numeric.
    """

    df = pd.read_csv(path)
    if target_col not in df.columns:
        raise KeyError(f"Target column {target_col!r} not found in CSV")
    target = df.pop(target_col)
    X = df.to_numpy(dtype=np.float64)
    if standardize_inputs:
        X, _, _ = standardize(X)

    classes: Optional[List[object]] = None
    if encode_labels and not pd.api.types.is_numeric_dtype(target):
        encoder = LabelEncoder()
        y = encoder.fit_transform(target.to_numpy()).astype(np.float64)
        classes = list(encoder.classes_)
    else:
        y = target.to_numpy(dtype=np.float64)
    return TabularStore.from_arrays(X, y), classes


__all__ = ["load_csv"]
