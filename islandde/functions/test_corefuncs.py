# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import typing as tp
import numpy as np
import pytest
from islandde.common import testing
from . import corefuncs


@testing.parametrized(**{name: (name, func, argmin) for name, (func, argmin) in corefuncs.BENCHMARKS.items()})
def test_benchmark_function(name: str, func: tp.Callable[..., tp.Any], argmin: float) -> None:
    x = np.random.normal(0, 1, 10)
    outputs = []
    for _ in range(2):
        np.random.seed(12)
        outputs.append(func(x))
    np.testing.assert_equal(outputs[0], outputs[1], f"Function {name} is not deterministic")
    optimum = np.full(10, argmin)
    np.testing.assert_almost_equal(func(optimum), 0.0, err_msg=f"Wrong argmin for {name}")
    for _ in range(5):
        assert func(optimum + np.random.uniform(-0.4, 0.4, size=10)) > 0.0


def test_point_fitting() -> None:
    func = corefuncs.PointFitting([1.0, -2.0, 0.5], num_points=15)
    assert func.dimension == 3
    np.testing.assert_almost_equal(func(np.array([1.0, -2.0, 0.5])), 0.0)
    # a constant offset of 1 leads to a residual of 1 on each point
    np.testing.assert_almost_equal(func(np.array([2.0, -2.0, 0.5])), 15.0)
    assert "PointFitting" in repr(func)


def test_point_fitting_noise() -> None:
    funcs = [corefuncs.PointFitting([0.0, 1.0], noise=0.1, seed=seed) for seed in [12, 12, 13]]
    np.testing.assert_array_equal(funcs[0].y, funcs[1].y)
    assert not np.array_equal(funcs[0].y, funcs[2].y)
    assert funcs[0](np.array([0.0, 1.0])) > 0


def test_point_fitting_not_enough_points() -> None:
    with pytest.raises(ValueError):
        corefuncs.PointFitting([1.0, 2.0, 3.0], num_points=2)
