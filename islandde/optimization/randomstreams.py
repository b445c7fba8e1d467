# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import islandde.common.typing as tp


class RandomStreams:
    """Set of independent named random streams, owned by a single thread.
    Each stream is a :code:`np.random.RandomState` seeded from the provided seed,
    so that the draws of one stream never shift the draws of another one.

    Parameters
    ----------
    names: sequence of str
        names of the streams to create (the order matters for seeding)
    seed: int/None
        seed of the streams, or None for seeding from system entropy

    Note
    ----
    This class is not thread-safe, each thread must own its instance.
    """

    def __init__(self, names: tp.Sequence[str], seed: tp.Optional[int] = None) -> None:
        if len(set(names)) != len(names):
            raise ValueError(f"Stream names must be unique (got {names})")
        self.seed = seed
        master = np.random.RandomState(seed)
        self._streams: tp.Dict[str, np.random.RandomState] = {
            name: np.random.RandomState(master.randint(2 ** 32, dtype=np.uint32)) for name in names
        }
        self._spawner = np.random.RandomState(master.randint(2 ** 32, dtype=np.uint32))

    @property
    def names(self) -> tp.Tuple[str, ...]:
        return tuple(self._streams)

    def uniform(self, name: str) -> float:
        """Uniform draw in [0, 1)"""
        return float(self._streams[name].random_sample())

    def uniform_array(self, name: str, size: int) -> np.ndarray:
        """Array of uniform draws in [0, 1), identical to :code:`size` successive calls to :code:`uniform`"""
        return self._streams[name].random_sample(size)

    def randint(self, name: str, high: int) -> int:
        """Uniform integer draw in [0, high)"""
        return int(self._streams[name].randint(high))

    def spawn(self, num: int) -> tp.List[int]:
        """Draws seeds for child streams, deterministic if this instance was seeded"""
        return [int(s) for s in self._spawner.randint(2 ** 32, size=num, dtype=np.uint32)]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(names={list(self._streams)}, seed={self.seed})"
