# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import pytest
from .randomstreams import RandomStreams


def test_streams_seeding() -> None:
    streams = [RandomStreams(("a", "b"), seed=12) for _ in range(2)]
    for name in ["a", "b"]:
        np.testing.assert_equal(streams[0].uniform(name), streams[1].uniform(name))
    other = RandomStreams(("a", "b"), seed=13)
    assert other.uniform("a") != RandomStreams(("a", "b"), seed=12).uniform("a")


def test_streams_independence() -> None:
    reference = RandomStreams(("a", "b"), seed=12)
    expected = [reference.uniform("a") for _ in range(3)]
    streams = RandomStreams(("a", "b"), seed=12)
    output = []
    for _ in range(3):
        streams.randint("b", 10)  # draws on b must not shift the draws on a
        output.append(streams.uniform("a"))
    np.testing.assert_array_equal(output, expected)


def test_uniform_array() -> None:
    streams = [RandomStreams(("a",), seed=3) for _ in range(2)]
    single = [streams[0].uniform("a") for _ in range(5)]
    np.testing.assert_array_equal(streams[1].uniform_array("a", 5), single)
    assert all(0 <= x < 1 for x in single)


def test_randint_bounds() -> None:
    streams = RandomStreams(("a",), seed=0)
    draws = {streams.randint("a", 4) for _ in range(200)}
    assert draws == {0, 1, 2, 3}


def test_spawn() -> None:
    seeds = [RandomStreams(("a",), seed=1).spawn(4) for _ in range(2)]
    assert seeds[0] == seeds[1]
    assert len(set(seeds[0])) == 4
    assert all(isinstance(s, int) for s in seeds[0])


def test_unique_names() -> None:
    with pytest.raises(ValueError):
        RandomStreams(("a", "a"))
    assert "names=['a', 'b']" in repr(RandomStreams(("a", "b"), seed=2))
