import random
import tempfile
from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kharness.logstore import LogStore
from kharness.sampler import sample_failing


def _store(tmp_path: Path, failing: list[str]) -> LogStore:
    store = LogStore(tmp_path)
    for test_id in failing:
        store.record_fail(test_id)
    return store


def test_sample_missing_log_is_empty(tmp_path: Path) -> None:
    assert sample_failing(LogStore(tmp_path / "absent"), 3) == []


def test_sample_empty_log_is_empty(tmp_path: Path) -> None:
    store = LogStore(tmp_path)
    store.failing_path.write_text("", encoding="utf-8")
    assert sample_failing(store, 2) == []


def test_sample_zero(tmp_path: Path) -> None:
    assert sample_failing(_store(tmp_path, ["a", "b"]), 0) == []


def test_sample_defaults_to_one(tmp_path: Path) -> None:
    picked = sample_failing(_store(tmp_path, ["a", "b", "c"]))
    assert len(picked) == 1
    assert picked[0] in {"a", "b", "c"}


def test_sample_more_than_available_returns_all(tmp_path: Path) -> None:
    picked = sample_failing(_store(tmp_path, ["a", "b", "a"]), 10)
    assert sorted(picked) == ["a", "b"]


def test_sample_rejects_negative(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        sample_failing(_store(tmp_path, ["a"]), -1)


@given(
    failing=st.lists(st.sampled_from(["a", "b", "c", "d", "e", "f"]), max_size=10),
    count=st.integers(min_value=0, max_value=8),
    seed=st.integers(min_value=0, max_value=2**16),
)
def test_sample_bounds(failing: list[str], count: int, seed: int) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = _store(Path(tmp), failing)
        picked = sample_failing(store, count, rng=random.Random(seed))
    assert len(picked) == min(count, len(set(failing)))
    assert len(set(picked)) == len(picked)
    assert set(picked) <= set(failing)
