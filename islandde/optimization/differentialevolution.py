# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import warnings
import numpy as np
import islandde.common.typing as tp
from islandde.common import errors
from .randomstreams import RandomStreams


PARTITION_STREAMS = ("dimension", "parents", "crossover")


class BestCandidate(tp.NamedTuple):
    """Snapshot of the best entry of a population (it is not updated afterwards)"""

    error: tp.ErrorValue
    candidate: np.ndarray


class DEConfig:
    """Static configuration shared by all the populations of an engine.

    Parameters
    ----------
    dimension: int
        number of components of each candidate
    CR: float
        crossover rate, probability for each non-forced dimension to take the mutated value.
        This value must be in [0, 1].
    F: float
        differential weight applied to the difference of the two secondary parents
    generator: callable
        function without arguments returning one component of a candidate, used for
        generating the initial population
    evaluator: callable
        function computing the error of a candidate (1d array of size dimension).
        It is called concurrently from several threads in the multi-threaded engine.
    comparator: callable
        function taking two errors (a, b) and returning True if a should be preferred over b.
        Eg: :code:`operator.lt` for minimization, :code:`operator.gt` for maximization.
    """

    def __init__(
        self,
        dimension: int,
        CR: float,
        F: float,
        generator: tp.PopulationGenerator,
        evaluator: tp.ErrorEvaluator,
        comparator: tp.ErrorComparator[tp.Any],
    ) -> None:
        if int(dimension) != dimension or dimension < 1:
            raise errors.IslandDEValueError(f"dimension must be a positive integer (got {dimension})")
        if not 0 <= CR <= 1:
            raise errors.IslandDEValueError(f"CR must be in [0, 1] (got {CR})")
        if not np.isfinite(F):
            raise errors.IslandDEValueError(f"F must be finite (got {F})")
        if not 0 <= F <= 2:
            warnings.warn(
                f"F = {F} is outside of the usual [0, 2] range", errors.InefficientSettingsWarning
            )
        for name, func in [("generator", generator), ("evaluator", evaluator), ("comparator", comparator)]:
            if not callable(func):
                raise errors.IslandDETypeError(f"{name} must be callable (got {func!r})")
        self.dimension = int(dimension)
        self.CR = float(CR)
        self.F = float(F)
        self.generator = generator
        self.evaluator = evaluator
        self.comparator = comparator

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dimension={self.dimension}, CR={self.CR}, F={self.F})"


class RandOneBinomial:
    """DE/rand/1/bin trial vector construction.
    The mutated value is :code:`x[r0] + F * (x[r1] - x[r2])` with r0, r1, r2 three pairwise distinct
    indices (the current index is not excluded). One random dimension always takes the mutated value,
    the other ones take it with probability CR, visiting the dimensions cyclically from that one.
    """

    def __init__(self, streams: RandomStreams, CR: float, F: float) -> None:
        self.streams = streams
        self.CR = CR
        self.F = F

    def parents(self, size: int) -> tp.Tuple[int, int, int]:
        if size < 3:
            raise errors.IslandDEValueError(f"At least 3 candidates are required for mutation (got {size})")
        r0 = self.streams.randint("parents", size)
        r1 = self.streams.randint("parents", size)
        while r1 == r0:
            r1 = self.streams.randint("parents", size)
        r2 = self.streams.randint("parents", size)
        while r2 in (r0, r1):
            r2 = self.streams.randint("parents", size)
        return r0, r1, r2

    def trial(self, population: np.ndarray, index: int) -> np.ndarray:
        size, dim = population.shape
        j0 = self.streams.randint("dimension", dim)
        r0, r1, r2 = self.parents(size)
        mutant = population[r0] + self.F * (population[r1] - population[r2])
        trial = np.array(population[index], copy=True)
        trial[j0] = mutant[j0]
        if dim > 1:
            order = (j0 + 1 + np.arange(dim - 1)) % dim
            transfer = order[self.streams.uniform_array("crossover", dim - 1) <= self.CR]
            trial[transfer] = mutant[transfer]
        return trial


def best_index(errors_: tp.Sequence[tp.ErrorValue], comparator: tp.ErrorComparator[tp.Any]) -> int:
    """Index of the best error according to the comparator, the first one wins in case of ties"""
    if not errors_:
        raise errors.IslandDEValueError("Cannot find the best of an empty sequence of errors")
    best = 0
    for k in range(1, len(errors_)):
        if comparator(errors_[k], errors_[best]):
            best = k
    return best


class Partition:
    """A population of candidates and their paired errors, with the differential evolution
    generation step. It is not thread-safe: only one thread can use it at a time.

    Parameters
    ----------
    config: DEConfig
        the shared configuration
    size: int
        number of candidates (at least 3)
    seed: int/None
        seed of the random streams used for the mutation
    initial_population: np.ndarray/None
        array of shape (size, dimension) to start from. If not provided, the population
        is filled with the config generator.

    Note
    ----
    Initialization calls user callbacks and may fail; call :code:`initialize` explicitly.
    """

    def __init__(
        self,
        config: DEConfig,
        size: int,
        seed: tp.Optional[int] = None,
        initial_population: tp.Optional[np.ndarray] = None,
    ) -> None:
        if size < 3:
            raise errors.IslandDEValueError(f"A population requires at least 3 candidates (got {size})")
        self.config = config
        self.size = int(size)
        self.streams = RandomStreams(PARTITION_STREAMS, seed=seed)
        self._mutation = RandOneBinomial(self.streams, CR=config.CR, F=config.F)
        self._initial_population = (
            None if initial_population is None else check_population(initial_population, (size, config.dimension))
        )
        self.population = np.zeros((self.size, config.dimension), dtype=float)
        self.errors: tp.List[tp.ErrorValue] = [None] * self.size

    def initialize(self) -> None:
        """Fills the population (from the initial population or the generator) and computes all errors"""
        if self._initial_population is not None:
            self.population[:] = self._initial_population
            self._initial_population = None
        else:
            for i in range(self.size):
                for d in range(self.config.dimension):
                    self.population[i, d] = self.config.generator()
        self.errors = [self.config.evaluator(np.array(x, copy=True)) for x in self.population]

    def step(self, index: int) -> bool:
        """Mutation and selection of the candidate at the given index.
        Returns True if the trial replaced the candidate.
        """
        trial = self._mutation.trial(self.population, index)
        error = self.config.evaluator(np.array(trial, copy=True))
        if self.config.comparator(error, self.errors[index]):
            self.population[index] = trial
            self.errors[index] = error
            return True
        return False

    def evolve(self) -> int:
        """Runs one generation over all indices, and returns the number of replaced candidates"""
        return sum(self.step(i) for i in range(self.size))

    def best_candidate(self) -> BestCandidate:
        best = best_index(self.errors, self.config.comparator)
        return BestCandidate(self.errors[best], np.array(self.population[best], copy=True))

    def replace(self, index: int, candidate: tp.ArrayLike, error: tp.ErrorValue) -> None:
        """Overwrites a candidate and its error"""
        array = np.asarray(candidate, dtype=float)
        if array.shape != (self.config.dimension,):
            raise errors.IslandDEValueError(
                f"Expected a candidate of shape {(self.config.dimension,)} but got {array.shape}"
            )
        self.population[index] = array
        self.errors[index] = error


def check_population(population: tp.Any, shape: tp.Tuple[int, int]) -> np.ndarray:
    """Validates and copies an initial population array"""
    if not isinstance(population, (np.ndarray, list, tuple)):
        raise errors.IslandDETypeError(f"Initial population must be an array (got {type(population)})")
    array = np.array(population, dtype=float)
    if array.shape != shape:
        raise errors.IslandDEValueError(f"Initial population must have shape {shape} (got {array.shape})")
    return array
