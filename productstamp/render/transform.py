from __future__ import annotations

import math
from contextlib import contextmanager
from typing import Iterator, NamedTuple


class Affine(NamedTuple):
    """2D affine map ``x' = a*x + b*y + c``, ``y' = d*x + e*y + f``.

    Coefficients use the same order as Pillow's ``Image.Transform.AFFINE``
    data, so ``inverse()`` can be handed straight to ``Image.transform``.
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 0.0
    e: float = 1.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> "Affine":
        return cls()

    @classmethod
    def translation(cls, tx: float, ty: float) -> "Affine":
        return cls(1.0, 0.0, tx, 0.0, 1.0, ty)

    @classmethod
    def scaling(cls, sx: float, sy: float | None = None) -> "Affine":
        return cls(sx, 0.0, 0.0, 0.0, sx if sy is None else sy, 0.0)

    @classmethod
    def rotation(cls, degrees: float) -> "Affine":
        # y grows downward, so positive angles turn clockwise on screen
        radians = math.radians(degrees)
        cos_v = math.cos(radians)
        sin_v = math.sin(radians)
        return cls(cos_v, -sin_v, 0.0, sin_v, cos_v, 0.0)

    def __matmul__(self, other: "Affine") -> "Affine":  # type: ignore[override]
        a, b, c, d, e, f = self
        oa, ob, oc, od, oe, of = other
        return Affine(
            a * oa + b * od,
            a * ob + b * oe,
            a * oc + b * of + c,
            d * oa + e * od,
            d * ob + e * oe,
            d * oc + e * of + f,
        )

    def apply(self, x: float, y: float) -> tuple[float, float]:
        a, b, c, d, e, f = self
        return (a * x + b * y + c, d * x + e * y + f)

    def inverse(self) -> "Affine":
        a, b, c, d, e, f = self
        det = a * e - b * d
        if abs(det) < 1e-12:
            raise ValueError("affine transform is not invertible")
        ia = e / det
        ib = -b / det
        id_ = -d / det
        ie = a / det
        return Affine(ia, ib, -(ia * c + ib * f), id_, ie, -(id_ * c + ie * f))

    @property
    def is_identity(self) -> bool:
        return all(abs(x - y) < 1e-12 for x, y in zip(self, Affine.identity()))


def pivot_transform(center: tuple[float, float], rotation_degrees: float = 0.0, scale: float = 1.0) -> Affine:
    """Rotate then scale about ``center``; the center itself never moves."""
    cx, cy = center
    return (
        Affine.translation(cx, cy)
        @ Affine.rotation(rotation_degrees)
        @ Affine.scaling(scale)
        @ Affine.translation(-cx, -cy)
    )


class TransformStack:
    """Explicit save/restore stack of affine transforms for one surface."""

    def __init__(self) -> None:
        self._stack: list[Affine] = [Affine.identity()]

    @property
    def current(self) -> Affine:
        return self._stack[-1]

    @property
    def depth(self) -> int:
        return len(self._stack) - 1

    def push(self, transform: Affine) -> Affine:
        combined = self.current @ transform
        self._stack.append(combined)
        return combined

    def pop(self) -> Affine:
        if len(self._stack) == 1:
            raise RuntimeError("transform stack underflow")
        return self._stack.pop()

    @contextmanager
    def scoped(self, transform: Affine) -> Iterator[Affine]:
        """Apply ``transform`` for the body; restored even when it raises."""
        combined = self.push(transform)
        try:
            yield combined
        finally:
            self.pop()

    def pivot(
        self,
        center: tuple[float, float],
        rotation_degrees: float = 0.0,
        scale: float = 1.0,
    ):
        return self.scoped(pivot_transform(center, rotation_degrees, scale))
