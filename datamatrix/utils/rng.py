"""Counter-based random sources for exemplar draws."""
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np


def philox_rng(key: int | Sequence[int], counter: Optional[int | Sequence[int]] = None) -> np.random.Generator:
    """Generator over a Philox stream addressed by (key, counter).

    The same key and counter always give the same stream, so a draw can be
    replayed from its position alone.
    """
    return np.random.Generator(np.random.Philox(key=key, counter=counter))
