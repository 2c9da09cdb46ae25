import random

import pytest

from nameid import parallel
from nameid.features import NameStatsExtractor
from nameid.parallel import chunked, map_reduce
from nameid.stats import NameDetectStats, fold

FIRST = ["Alice", "Bob", "Carol", "Dave", "Jordan", "Taylor", "Mallory", "Trent"]
LAST = ["Smith", "Jones", "Nguyen", "Okafor"]


@pytest.fixture
def extractor(config, name_dictionary, gender_dictionary):
    return NameStatsExtractor.from_config(config, name_dictionary, gender_dictionary)


@pytest.fixture
def records():
    rng = random.Random(7)
    rows = []
    for i in range(500):
        if i % 50 == 0:
            rows.append(None)
        else:
            rows.append(f"{rng.choice(FIRST)} {rng.choice(LAST)} {i}")
    return rows


def test_chunked():
    assert list(chunked(range(7), 3)) == [[0, 1, 2], [3, 4, 5], [6]]
    assert list(chunked([], 3)) == []
    with pytest.raises(ValueError):
        list(chunked(range(3), 0))


@pytest.mark.parametrize("chunk_size", [1, 7, 64, 1000])
def test_partition_invariance(extractor, records, chunk_size):
    sequential = fold(extractor(record) for record in records)
    partitioned = map_reduce(records, extractor, n_jobs=1, chunk_size=chunk_size)

    assert partitioned.isclose(sequential)
    assert partitioned.guard_check_quantities == sequential.guard_check_quantities


def test_worker_pool_matches_sequential(extractor, records):
    sequential = map_reduce(records, extractor, n_jobs=1, chunk_size=500)
    pooled = map_reduce(iter(records), extractor, n_jobs=2, chunk_size=37)

    assert pooled.isclose(sequential)
    assert pooled.guard_check_quantities == sequential.guard_check_quantities


def test_empty_input_reduces_to_identity(extractor):
    assert map_reduce([], extractor) == NameDetectStats.empty()


def test_invalid_worker_count(extractor):
    with pytest.raises(ValueError):
        map_reduce(["Alice"], extractor, n_jobs=0)


def test_worker_pool_releases_extractor_in_parent(extractor, records):
    map_reduce(records, extractor, n_jobs=2, chunk_size=50)
    assert parallel._worker_extractor is None
