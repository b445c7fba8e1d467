# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import typing as tp
import numpy as np
from . import testing


@testing.parametrized(
    equal=([[1.0, 2.0], [3.0, 4.0]], False),
    permuted=([[3.0, 4.0], [1.0, 2.0]], False),
    different=([[1.0, 2.0], [3.0, 5.0]], True),
    missing=([[1.0, 2.0]], True),
)
def test_assert_rows_equal(estimate: tp.List[tp.List[float]], error: bool) -> None:
    reference = np.array([[1.0, 2.0], [3.0, 4.0]])
    try:
        testing.assert_rows_equal(np.array(estimate), reference)
    except AssertionError as e:
        if not error:
            raise AssertionError("An error has been raised while it should not.")
        assert "Rows are not equal:" in e.args[0]
    else:
        if error:
            raise AssertionError("An error should have been raised.")


def test_printed_assert_equal() -> None:
    testing.printed_assert_equal(0, 0)
    np.testing.assert_raises(AssertionError, testing.printed_assert_equal, 0, 1)
