# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import islandde.common.typing as tp
from . import base
from .differentialevolution import BestCandidate, DEConfig, Partition


class SequentialDE(base.Engine):
    """Single-threaded differential evolution (DE/rand/1/bin) over one population.
    Everything runs on the caller's thread, which makes it a reference for the
    multi-threaded :code:`ThreadsDE` with one worker and no migration.

    Parameters
    ----------
    dimension: int
        number of components of each candidate
    population_size: int
        number of candidates (at least 3)
    CR: float
        crossover rate in [0, 1]
    F: float
        differential weight
    generator: callable
        function without arguments returning one component of a candidate
    evaluator: callable
        function computing the error of a candidate
    comparator: callable
        comparator(a, b) returns True if error a should be preferred over error b
    seed: int/None
        seed of the random streams
    initial_population: np.ndarray/None
        array of shape (population_size, dimension) used instead of the generator
    """

    def __init__(
        self,
        dimension: int,
        population_size: int,
        CR: float,
        F: float,
        generator: tp.PopulationGenerator,
        evaluator: tp.ErrorEvaluator,
        comparator: tp.ErrorComparator[tp.Any],
        *,
        seed: tp.Optional[int] = None,
        initial_population: tp.Optional[np.ndarray] = None,
    ) -> None:
        super().__init__(DEConfig(dimension, CR, F, generator, evaluator, comparator), population_size)
        self._partition = Partition(self.config, self.population_size, seed=seed, initial_population=initial_population)
        self._guarded(self._partition.initialize)

    def _internal_evolve_one_generation(self) -> None:
        self._guarded(self._partition.evolve)

    def _internal_best_candidate(self) -> BestCandidate:
        return self._guarded(self._partition.best_candidate)

    def _internal_population(self) -> tp.Tuple[np.ndarray, tp.List[tp.ErrorValue]]:
        return np.array(self._partition.population, copy=True), list(self._partition.errors)
