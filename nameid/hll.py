"""
HyperLogLog approximate distinct counting.

A sketch holds ``2**bits`` one-byte registers. Each value is hashed to 64 bits; the leading ``bits``
bits select a register and the register keeps the maximum rank (position of the first set bit) seen
in the remaining bits. Union is an elementwise maximum, which makes the sketch a commutative,
associative, idempotent monoid whose identity is the sketch with no registers set.

Sketches are immutable: register arrays are flagged read-only and every merge returns a new sketch.
An empty sketch stores no array at all, so per-record identities cost nothing.
"""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from nameid.consts import DEFAULT_HLL_BITS, MAX_HLL_BITS, MIN_HLL_BITS

_HASH_BITS = 64


def hash64(value: str) -> int:
    digest = hashlib.blake2b(value.encode("utf-8", "surrogatepass"), digest_size=8).digest()
    return int.from_bytes(digest, "big")


def _alpha(num_registers: int) -> float:
    if num_registers == 16:
        return 0.673
    if num_registers == 32:
        return 0.697
    if num_registers == 64:
        return 0.709
    return 0.7213 / (1.0 + 1.079 / num_registers)


def _frozen(registers: np.ndarray) -> np.ndarray:
    registers.setflags(write=False)
    return registers


@dataclass(frozen=True, eq=False)
class HyperLogLog:
    bits: int = DEFAULT_HLL_BITS
    registers: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        if not MIN_HLL_BITS <= self.bits <= MAX_HLL_BITS:
            raise ValueError(f"HyperLogLog bits must be in [{MIN_HLL_BITS}, {MAX_HLL_BITS}], got {self.bits}")

    @classmethod
    def empty(cls, bits: int = DEFAULT_HLL_BITS) -> "HyperLogLog":
        return cls(bits=bits)

    @classmethod
    def create(cls, value: str, bits: int = DEFAULT_HLL_BITS) -> "HyperLogLog":
        """Sketch of a single value."""
        hashed = hash64(value)
        index = hashed >> (_HASH_BITS - bits)
        remainder = hashed & ((1 << (_HASH_BITS - bits)) - 1)
        rank = (_HASH_BITS - bits) - remainder.bit_length() + 1
        registers = np.zeros(1 << bits, dtype=np.uint8)
        registers[index] = rank
        return cls(bits=bits, registers=_frozen(registers))

    @property
    def is_empty(self) -> bool:
        return self.registers is None

    def merge(self, other: "HyperLogLog") -> "HyperLogLog":
        """Union of two sketches; an empty sketch is the identity at any precision."""
        if other.is_empty:
            return self
        if self.is_empty:
            return other
        if self.bits != other.bits:
            raise ValueError(f"cannot merge HyperLogLog sketches with {self.bits} and {other.bits} bits")
        return HyperLogLog(bits=self.bits, registers=_frozen(np.maximum(self.registers, other.registers)))

    def __add__(self, other: "HyperLogLog") -> "HyperLogLog":
        return self.merge(other)

    def estimate(self) -> float:
        """Approximate number of distinct values added to the sketch."""
        if self.registers is None:
            return 0.0
        num_registers = 1 << self.bits
        harmonic = float(np.sum(np.power(2.0, -self.registers.astype(np.float64))))
        raw = _alpha(num_registers) * num_registers * num_registers / harmonic
        num_zero = int(np.count_nonzero(self.registers == 0))
        # small range correction (linear counting)
        if raw <= 2.5 * num_registers and num_zero > 0:
            return num_registers * math.log(num_registers / num_zero)
        return raw

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HyperLogLog):
            return NotImplemented
        if self.is_empty or other.is_empty:
            return self.is_empty and other.is_empty
        return self.bits == other.bits and bool(np.array_equal(self.registers, other.registers))

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> Dict[str, Any]:
        return {"bits": self.bits, "estimate": self.estimate()}
