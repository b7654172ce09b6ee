from __future__ import annotations

from typing import Any

import numpy as np
import pytest

from datamatrix import DataMatrix


class RecordingLogger:
    """Collects logged metrics for assertions."""

    def __init__(self) -> None:
        self.records: list[tuple[int, dict[str, Any]]] = []
        self.finished = False

    def log(self, metrics: dict[str, Any], step: int) -> None:
        self.records.append((step, dict(metrics)))

    def finish(self) -> None:
        self.finished = True


@pytest.fixture
def rows() -> np.ndarray:
    # 4 exemplars x 3 features: [[1, 2, 3], [4, 5, 6], [7, 8, 9], [10, 11, 12]]
    return np.arange(1, 13, dtype=np.float32).reshape(4, 3)


@pytest.fixture
def image() -> np.ndarray:
    # 2 x 3 pixels with 2 channels each
    return np.arange(12, dtype=np.float32).reshape(2, 3, 2) * 10.0 + 1.0


@pytest.fixture
def recorder() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def matrix(rows: np.ndarray, recorder: RecordingLogger) -> DataMatrix:
    dm = DataMatrix(logger=recorder)
    dm.attach(rows, ["data", "feature"])
    return dm
