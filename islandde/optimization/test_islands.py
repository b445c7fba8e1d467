# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import operator
import threading
import numpy as np
import pytest
import islandde.common.typing as tp
from islandde.common import errors
from islandde.functions import sphere
from . import differentialevolution as de
from .islands import IslandWorker


class GatedSphere:
    """Sphere function which blocks while the gate is closed"""

    def __init__(self) -> None:
        self.gate = threading.Event()
        self.gate.set()
        self.count = 0

    def __call__(self, x: np.ndarray) -> float:
        self.gate.wait()
        self.count += 1
        return sphere(x)


def make_worker(evaluator: tp.Callable[[np.ndarray], tp.Any] = sphere, size: int = 5, **kwargs: tp.Any) -> IslandWorker:
    config = de.DEConfig(3, 0.5, 0.8, np.random.normal, evaluator, operator.lt)
    initial = np.random.RandomState(12).normal(size=(size, 3))
    return IslandWorker(0, config, size, seed=12, initial_population=initial, **kwargs)


def test_island_initialization() -> None:
    worker = make_worker()
    worker.await_completion()
    assert not worker.busy
    assert worker.is_alive()
    assert worker.population.shape == (5, 3)
    np.testing.assert_array_equal(worker.errors, [sphere(x) for x in worker.population])
    assert worker.best_candidate is None
    assert "rank=0" in repr(worker)
    worker.await_completion()  # idle: returns immediately
    worker.close()
    assert not worker.is_alive()


def test_island_generation() -> None:
    worker = make_worker()
    worker.await_completion()
    before = worker.errors
    worker.request_generation()
    worker.await_completion()
    after = worker.errors
    assert len(after) == len(worker.population) == 5
    assert all(new <= old for new, old in zip(after, before))
    assert 0 <= worker.num_replacements <= 5
    worker.close()


def test_island_best_candidate() -> None:
    worker = make_worker()
    worker.await_completion()
    worker.request_best_candidate()
    worker.await_completion()
    best = worker.best_candidate
    assert best is not None
    index = int(np.argmin(worker.errors))
    assert best.error == worker.errors[index]
    np.testing.assert_array_equal(best.candidate, worker.population_slot(index))
    worker.close()


def test_island_replace_slot() -> None:
    worker = make_worker()
    worker.await_completion()
    worker.replace_slot(2, np.array([1.0, 2.0, 3.0]), 14.0)
    np.testing.assert_array_equal(worker.population_slot(2), [1, 2, 3])
    assert worker.error_slot(2) == 14.0
    assert len(worker.errors) == len(worker.population)
    with pytest.raises(errors.IslandDEValueError):
        worker.replace_slot(2, np.array([1.0, 2.0]), 5.0)
    worker.close()


def test_island_busy() -> None:
    func = GatedSphere()
    worker = make_worker(func)
    worker.await_completion()
    func.gate.clear()
    worker.request_generation()
    assert worker.busy
    with pytest.raises(errors.IslandBusyError):
        worker.request_best_candidate()
    with pytest.raises(errors.IslandBusyError):
        worker.population_slot(0)
    with pytest.raises(errors.IslandBusyError):
        worker.replace_slot(0, np.zeros(3), 0.0)
    with pytest.raises(errors.CompletionTimeoutError):
        worker.await_completion(timeout=0.05)
    func.gate.set()
    worker.await_completion(timeout=10)
    assert not worker.busy
    assert func.count == 10  # 5 initial evaluations and 5 trials
    worker.close()


def test_island_failure() -> None:
    calls = []

    def failing(x: np.ndarray) -> float:
        calls.append(x)
        if len(calls) > 5:
            raise ZeroDivisionError("Bad luck")
        return sphere(x)

    worker = make_worker(failing)
    worker.await_completion()
    worker.request_generation()
    with pytest.raises(errors.EngineFaultedError) as excinfo:
        worker.await_completion()
    assert isinstance(excinfo.value.__cause__, ZeroDivisionError)
    assert isinstance(worker.error, ZeroDivisionError)
    worker.close()


def test_island_initialization_failure() -> None:
    config = de.DEConfig(2, 0.5, 0.8, lambda: 1 / 0, sphere, operator.lt)
    worker = IslandWorker(3, config, 4)
    with pytest.raises(errors.EngineFaultedError, match="Island 3"):
        worker.await_completion()
    worker.close()


def test_island_closed() -> None:
    worker = make_worker()
    worker.await_completion()
    worker.close()
    with pytest.raises(errors.IslandDERuntimeError):
        worker.request_generation()


def test_island_stop_does_not_wait() -> None:
    func = GatedSphere()
    worker = make_worker(func)
    worker.await_completion()
    func.gate.clear()
    worker.request_generation()
    worker.stop()  # returns while the generation is blocked
    assert worker.is_alive()
    func.gate.set()
    worker.await_completion(timeout=10)
    worker.close(timeout=10)
    assert not worker.is_alive()
