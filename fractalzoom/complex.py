from __future__ import annotations

import math
from dataclasses import dataclass

@dataclass(frozen=True)
class Complex:
    """Immutable complex value; arithmetic returns new instances."""

    real: float
    imag: float

    def __add__(self, other: "Complex") -> "Complex":
        return Complex(self.real + other.real, self.imag + other.imag)

    def __mul__(self, other: "Complex") -> "Complex":
        return Complex(
            self.real * other.real - self.imag * other.imag,
            self.real * other.imag + self.imag * other.real,
        )

    def square_length(self) -> float:
        return self.real * self.real + self.imag * self.imag

    def norm(self) -> float:
        return math.sqrt(self.square_length())

    def as_list(self) -> list:
        return [self.real, self.imag]

    @classmethod
    def from_pair(cls, pair) -> "Complex":
        if not (isinstance(pair, (list, tuple)) and len(pair) == 2):
            raise ValueError("complex values must be [real, imag].")
        return cls(float(pair[0]), float(pair[1]))

    def __str__(self) -> str:
        return f"({self.real}+{self.imag}i)"

ZERO = Complex(0.0, 0.0)
