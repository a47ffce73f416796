# affine.py
from dataclasses import dataclass
from typing import Tuple

from errors import SingularTransformError


_EPS = 1e-9


# -----------------------------
# Rectangles
# -----------------------------

@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def is_empty(self) -> bool:
        return self.right <= self.left or self.bottom <= self.top

    def contains(self, other: "Rect", tol: float = 1e-6) -> bool:
        if self.is_empty:
            return False
        return (
            self.left <= other.left + tol
            and self.top <= other.top + tol
            and self.right >= other.right - tol
            and self.bottom >= other.bottom - tol
        )

    def is_bigger_than(self, other: "Rect") -> bool:
        # strictly bigger on BOTH axes
        return self.width > other.width and self.height > other.height

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.left, self.top, self.right, self.bottom)


EMPTY_RECT = Rect(0.0, 0.0, 0.0, 0.0)


# -----------------------------
# 2x3 affine transform
# -----------------------------

class AffineTransform:
    """
    2x3 affine matrix mapping content space to view space:

        x' = a*x + b*y + c
        y' = d*x + e*y + f

    Instances are mutable in place (the zoom engine updates its live
    transform that way). Anything that must outlive the current call
    keeps a copy().
    """

    def __init__(self, a=1.0, b=0.0, c=0.0, d=0.0, e=1.0, f=0.0):
        self.a = float(a)
        self.b = float(b)
        self.c = float(c)
        self.d = float(d)
        self.e = float(e)
        self.f = float(f)

    # builders
    @classmethod
    def identity(cls) -> "AffineTransform":
        return cls()

    @classmethod
    def scale_translate(cls, s: float, tx: float = 0.0, ty: float = 0.0) -> "AffineTransform":
        return cls(s, 0.0, tx, 0.0, s, ty)

    @staticmethod
    def concat(first: "AffineTransform", second: "AffineTransform") -> "AffineTransform":
        """Transform that applies `first`, then `second`."""
        out = AffineTransform()
        out.set_concat(first, second)
        return out

    # -----------------------------
    # In-place mutation
    # -----------------------------
    def set(self, a, b, c, d, e, f) -> "AffineTransform":
        self.a, self.b, self.c = float(a), float(b), float(c)
        self.d, self.e, self.f = float(d), float(e), float(f)
        return self

    def copy_from(self, other: "AffineTransform") -> "AffineTransform":
        return self.set(*other.coefficients())

    def set_concat(self, first: "AffineTransform", second: "AffineTransform") -> "AffineTransform":
        # second * first, read before writing so self may alias either operand
        f1 = first.coefficients()
        s = second.coefficients()
        return self.set(
            s[0] * f1[0] + s[1] * f1[3],
            s[0] * f1[1] + s[1] * f1[4],
            s[0] * f1[2] + s[1] * f1[5] + s[2],
            s[3] * f1[0] + s[4] * f1[3],
            s[3] * f1[1] + s[4] * f1[4],
            s[3] * f1[2] + s[4] * f1[5] + s[5],
        )

    def post_translate(self, dx: float, dy: float) -> "AffineTransform":
        self.c += dx
        self.f += dy
        return self

    def post_scale(self, s: float, px: float = 0.0, py: float = 0.0) -> "AffineTransform":
        """Scale the view-space result by `s` around pivot (px, py)."""
        return self.set_concat(self, AffineTransform(s, 0.0, px - s * px, 0.0, s, py - s * py))

    # -----------------------------
    # Queries
    # -----------------------------
    def coefficients(self) -> Tuple[float, float, float, float, float, float]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)

    def determinant(self) -> float:
        return self.a * self.e - self.b * self.d

    @property
    def scale_x(self) -> float:
        return (self.a * self.a + self.d * self.d) ** 0.5

    @property
    def scale_y(self) -> float:
        return (self.b * self.b + self.e * self.e) ** 0.5

    def copy(self) -> "AffineTransform":
        return AffineTransform(*self.coefficients())

    def invert(self) -> "AffineTransform":
        det = self.determinant()
        if abs(det) < _EPS:
            raise SingularTransformError(f"Transform is not invertible: {self!r}")
        a, b, c, d, e, f = self.coefficients()
        ia = e / det
        ib = -b / det
        id_ = -d / det
        ie = a / det
        return AffineTransform(
            ia, ib, -(ia * c + ib * f),
            id_, ie, -(id_ * c + ie * f),
        )

    def map_point(self, x: float, y: float) -> Tuple[float, float]:
        return (self.a * x + self.b * y + self.c, self.d * x + self.e * y + self.f)

    def map_rect(self, r: Rect) -> Rect:
        """Axis-aligned bounding box of the mapped quadrilateral."""
        xs = []
        ys = []
        for x, y in ((r.left, r.top), (r.right, r.top), (r.right, r.bottom), (r.left, r.bottom)):
            mx, my = self.map_point(x, y)
            xs.append(mx)
            ys.append(my)
        return Rect(min(xs), min(ys), max(xs), max(ys))

    def almost_equals(self, other: "AffineTransform", tol: float = 1e-9) -> bool:
        return all(abs(p - q) <= tol for p, q in zip(self.coefficients(), other.coefficients()))

    def __eq__(self, other):
        if not isinstance(other, AffineTransform):
            return NotImplemented
        return self.coefficients() == other.coefficients()

    __hash__ = None

    def __repr__(self):
        return "AffineTransform(a=%g, b=%g, c=%g, d=%g, e=%g, f=%g)" % self.coefficients()
