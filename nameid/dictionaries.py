"""
Name and gender dictionaries.

Both dictionaries are built once from static resources and are read-only afterwards:

- **NameDictionary**: set of lowercase known names, one per line of a UTF-8 word list.
- **GenderDictionary**: lowercase name → probability that the name belongs to a male, read from a
  CSV with a header row. The first column is the name, a fixed column holds the probability.
  Rows whose probability is not a finite number in [0, 1] are skipped and logged; when a name repeats the last row
  wins.

Loaded dictionaries are cached per process, keyed by the resolved resource path and its
modification time, so repeated fits reuse the same snapshot and an edited file is picked up.
Snapshots are frozen and are what every parallel worker receives.
"""

from __future__ import annotations

import csv
import logging
import math
import time
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Tuple, Union

from nameid.consts import DEFAULT_GENDER_DICTIONARY_PATH, DEFAULT_NAME_DICTIONARY_PATH, GENDER_PROBABILITY_COLUMN
from nameid.tokenizer import normalize_name_key

PathLike = Union[str, Path]


@dataclass(frozen=True)
class NameDictionary:
    value: FrozenSet[str]

    def __contains__(self, token: object) -> bool:
        return token in self.value

    def __len__(self) -> int:
        return len(self.value)


@dataclass(frozen=True)
class GenderDictionary:
    value: Mapping[str, float]

    def get(self, name: str):
        return self.value.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.value

    def __len__(self) -> int:
        return len(self.value)

    def __reduce__(self):
        # MappingProxyType cannot be pickled; ship a plain dict to worker processes
        return (_gender_dictionary_from_dict, (dict(self.value),))


def _gender_dictionary_from_dict(value: Dict[str, float]) -> GenderDictionary:
    return GenderDictionary(MappingProxyType(value))


def read_name_dictionary(path: PathLike = DEFAULT_NAME_DICTIONARY_PATH) -> NameDictionary:
    """Build a NameDictionary from a newline-delimited word list."""
    path = Path(path)
    start_time = time.perf_counter()
    names = set()
    with path.open(encoding="utf-8") as f:
        for line in f:
            name = line.strip().lower()
            if name:
                names.add(name)
    logging.info(f"Loaded {len(names)} names from {path.name} in {time.perf_counter() - start_time:.3f}s")
    return NameDictionary(frozenset(names))


def read_gender_dictionary(
    path: PathLike = DEFAULT_GENDER_DICTIONARY_PATH, probability_column: int = GENDER_PROBABILITY_COLUMN
) -> GenderDictionary:
    """Build a GenderDictionary from a CSV, skipping rows with a malformed probability."""
    path = Path(path)
    start_time = time.perf_counter()
    probabilities: Dict[str, float] = {}
    skipped = 0
    with path.open(encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        next(reader, None)  # header
        for row in reader:
            cols = [col.strip() for col in row]
            if not cols or not any(cols):
                continue
            name = normalize_name_key(cols[0])
            try:
                prob_male = float(cols[probability_column])
                if not math.isfinite(prob_male) or not 0.0 <= prob_male <= 1.0:
                    raise ValueError(f"probability {prob_male} is outside [0, 1]")
            except (IndexError, ValueError):
                skipped += 1
                logging.warning(f"Skipping gender dictionary row {reader.line_num} in {path.name}: {row!r}")
                continue
            if not name:
                skipped += 1
                logging.warning(f"Skipping gender dictionary row {reader.line_num} in {path.name}: empty name")
                continue
            probabilities[name] = prob_male
    logging.info(
        f"Loaded {len(probabilities)} gender entries from {path.name} "
        f"in {time.perf_counter() - start_time:.3f}s ({skipped} rows skipped)"
    )
    return GenderDictionary(MappingProxyType(probabilities))


def _cache_key(path: PathLike) -> Tuple[str, int]:
    resolved = Path(path).resolve()
    return str(resolved), resolved.stat().st_mtime_ns


@lru_cache(maxsize=8)
def _cached_name_dictionary(path: str, mtime_ns: int) -> NameDictionary:
    return read_name_dictionary(path)


@lru_cache(maxsize=8)
def _cached_gender_dictionary(path: str, mtime_ns: int, probability_column: int) -> GenderDictionary:
    return read_gender_dictionary(path, probability_column)


def load_name_dictionary(path: PathLike = DEFAULT_NAME_DICTIONARY_PATH) -> NameDictionary:
    """Cached NameDictionary for a resource path."""
    return _cached_name_dictionary(*_cache_key(path))


def load_gender_dictionary(
    path: PathLike = DEFAULT_GENDER_DICTIONARY_PATH, probability_column: int = GENDER_PROBABILITY_COLUMN
) -> GenderDictionary:
    """Cached GenderDictionary for a resource path."""
    return _cached_gender_dictionary(*_cache_key(path), probability_column)


def clear_cache() -> None:
    """Drop every cached dictionary snapshot."""
    _cached_name_dictionary.cache_clear()
    _cached_gender_dictionary.cache_clear()
