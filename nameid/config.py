from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Tuple

from nameid.consts import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_GENDER_DICTIONARY_PATH,
    DEFAULT_HLL_BITS,
    DEFAULT_N_JOBS,
    DEFAULT_NAME_DICTIONARY_PATH,
    DEFAULT_THRESHOLD,
    GENDER_PROBABILITY_COLUMN,
    MAX_HLL_BITS,
    MAX_NUM_TOKENS,
    MIN_CHAR_LENGTH,
    MIN_GUARD_FRACTION,
    MIN_HLL_BITS,
    MIN_NUM_UNIQUE,
    MIN_STDDEV,
    STDDEV_BYPASS_COUNT,
    UNIQUE_BYPASS_COUNT,
)
from nameid.strategies import NAME_DETECT_STRATEGIES, NameDetectStrategy


@dataclass(frozen=True)
class GuardCheckLimits:
    """Dataset-level plausibility limits applied before trusting the dictionary score."""

    max_num_tokens: int = MAX_NUM_TOKENS
    min_char_length: int = MIN_CHAR_LENGTH
    min_fraction: float = MIN_GUARD_FRACTION
    min_stddev: float = MIN_STDDEV
    min_num_unique: int = MIN_NUM_UNIQUE
    stddev_bypass_count: int = STDDEV_BYPASS_COUNT
    unique_bypass_count: int = UNIQUE_BYPASS_COUNT


@dataclass(frozen=True)
class NameIdentifierConfig:
    """Immutable configuration for fitting and applying the name identifier."""

    # Fraction of dictionary hits required before a column is treated as names
    threshold: float

    guard_limits: GuardCheckLimits
    hll_bits: int
    strategies: Tuple[NameDetectStrategy, ...]

    # Dictionary resources
    name_dictionary_path: Path
    gender_dictionary_path: Path
    gender_probability_column: int

    # Parallel reduction
    n_jobs: int
    chunk_size: int

    def __post_init__(self) -> None:
        if not 0.0 < self.threshold < 1.0:
            raise ValueError(f"threshold must be in (0, 1), got {self.threshold}")
        if not MIN_HLL_BITS <= self.hll_bits <= MAX_HLL_BITS:
            raise ValueError(f"hll_bits must be in [{MIN_HLL_BITS}, {MAX_HLL_BITS}], got {self.hll_bits}")
        if not self.strategies:
            raise ValueError("at least one strategy is required")
        if self.n_jobs < 1:
            raise ValueError(f"n_jobs must be positive, got {self.n_jobs}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

    @classmethod
    def create_default(cls) -> "NameIdentifierConfig":
        return cls(
            threshold=DEFAULT_THRESHOLD,
            guard_limits=GuardCheckLimits(),
            hll_bits=DEFAULT_HLL_BITS,
            strategies=NAME_DETECT_STRATEGIES,
            name_dictionary_path=DEFAULT_NAME_DICTIONARY_PATH,
            gender_dictionary_path=DEFAULT_GENDER_DICTIONARY_PATH,
            gender_probability_column=GENDER_PROBABILITY_COLUMN,
            n_jobs=DEFAULT_N_JOBS,
            chunk_size=DEFAULT_CHUNK_SIZE,
        )

    def with_threshold(self, threshold: float) -> "NameIdentifierConfig":
        return replace(self, threshold=threshold)

    def with_dictionaries(self, name_dictionary_path: Path, gender_dictionary_path: Path) -> "NameIdentifierConfig":
        return replace(
            self, name_dictionary_path=Path(name_dictionary_path), gender_dictionary_path=Path(gender_dictionary_path)
        )

    def with_strategies(self, strategies: Tuple[NameDetectStrategy, ...]) -> "NameIdentifierConfig":
        return replace(self, strategies=tuple(strategies))

    def with_parallelism(self, n_jobs: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> "NameIdentifierConfig":
        return replace(self, n_jobs=n_jobs, chunk_size=chunk_size)
