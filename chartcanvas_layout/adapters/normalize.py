from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

import numpy as np

from chartcanvas_layout.errors import InvalidArgumentError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


def coerce_values(value: Any, *, label: str = "values", strict: bool = True) -> np.ndarray:
    """Return `value` as a 1-D float64 array.

    `None` entries become NaN. With `strict=False`, entries that cannot be read
    as numbers also become NaN instead of raising.
    """
    if value is None:
        return np.empty(0, dtype=np.float64)

    if torch is not None and isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.ndim != 1:
            raise InvalidArgumentError(f"{label} must be 1-D")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return tensor.to(torch.float64).numpy()

    if pd is not None and isinstance(value, pd.Series):
        return _coerce_ndarray(value.to_numpy(), label=label, strict=strict)

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise InvalidArgumentError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label, strict=strict)

    if isinstance(value, (str, bytes, bytearray)):
        raise InvalidArgumentError(f"unsupported {label} input type: {type(value)!r}")

    if isinstance(value, Sequence):
        return _coerce_ndarray(np.asarray(list(value), dtype=object), label=label, strict=strict)

    if hasattr(value, "__iter__"):
        return _coerce_ndarray(np.asarray(list(value), dtype=object), label=label, strict=strict)

    raise InvalidArgumentError(f"unsupported {label} input type: {type(value)!r}")


def _coerce_ndarray(arr: np.ndarray, *, label: str, strict: bool) -> np.ndarray:
    if arr.ndim != 1:
        raise InvalidArgumentError(f"{label} must be 1-D")
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return arr.astype(np.float64, copy=False)

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            if not strict:
                out[i] = np.nan
                continue
            raise InvalidArgumentError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
