# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import inspect
import typing as tp
try:
    import pytest
except ImportError:
    pass  # makes most of this module usable without pytest
import numpy as np


def printed_assert_equal(actual: tp.Any, desired: tp.Any, err_msg: str = '') -> None:
    try:
        np.testing.assert_equal(actual, desired, err_msg=err_msg)
    except AssertionError as e:
        print("\n" + "# " * 12 + "DEBUG MESSAGE " + "# " * 12)
        print(f"Expected: {desired}\nbut got:  {actual}")
        raise e


def assert_rows_equal(estimate: np.ndarray, reference: np.ndarray, err_msg: str = "") -> None:
    """Asserts that both 2d arrays contain the same rows, whatever their order,
    with comprehensive error message.
    This function should only be used in tests.

    Parameters
    ----------
    estimate: np.ndarray
        2d array of rows to compare with the reference rows
    reference: np.ndarray
        2d array of reference rows
    """
    estimate_rows, reference_rows = (sorted(tuple(row) for row in np.asarray(x).tolist()) for x in [estimate, reference])
    if estimate_rows != reference_rows:
        messages = ([err_msg] if err_msg else []) + [
            "Rows are not equal:",
            f"  - got: {estimate_rows}",
            f"  - expected: {reference_rows}",
        ]
        raise AssertionError("\n".join(messages))


class parametrized:
    """Simplified decorator API for specifying named parametrized test with pytests
    (like with old "genty" package)
    See example of use in test_testing

    Parameters
    ----------
    **kwargs:
        name of the argument is converted as id of the experiments, and the provided tuple
        contains a value for each of the arguments of the underlying function (in the definition order).
    """

    def __init__(self, **kwargs: tp.Tuple[tp.Any, ...]):
        self.ids = sorted(kwargs)
        self.params = tuple(kwargs[name] for name in self.ids)
        assert self.params
        self.num_params = len(self.params[0])
        assert all(isinstance(p, (tuple, list)) for p in self.params)
        assert all(self.num_params == len(p) for p in self.params[1:])

    def __call__(self, func: tp.Callable[..., None]) -> tp.Any:  # type is lost here :(
        names = list(inspect.signature(func).parameters.keys())
        assert len(names) == self.num_params, f"Parameter names: {names}"
        return pytest.mark.parametrize(
            ",".join(names), self.params if self.num_params > 1 else [p[0] for p in self.params], ids=self.ids)(func)
