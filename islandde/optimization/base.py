# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import logging
import numpy as np
import islandde.common.typing as tp
from islandde.common import errors as errors
from .differentialevolution import BestCandidate, DEConfig


logger = logging.getLogger(__name__)
X = tp.TypeVar("X", bound="Engine")
Y = tp.TypeVar("Y")
_EngineCallBack = tp.Callable[["Engine"], None]


class Engine:
    """Differential evolution framework with 2 main functions:

    - :code:`evolve_one_generation()` which applies mutation, crossover and selection to each candidate
      of the population.
    - :code:`best_candidate_overall()` which provides the best current candidate and its error.

    Typically, one would call :code:`evolve_generations(n)` with the number of generations which fits
    their budget, then call :code:`best_candidate_overall()`. There is no stopping criterion, it is up
    to the user to decide when to stop.

    If a user callback fails, the engine is faulted: the error is raised as an :code:`EngineFaultedError`
    and any further operation raises again, the only remaining option is to close the engine.

    This class is abstract, :code:`_internal_evolve_one_generation` and :code:`_internal_best_candidate`
    must be overridden.

    Parameters
    ----------
    config: DEConfig
        the configuration (dimension, CR, F and user callbacks)
    population_size: int
        total number of candidates
    """

    def __init__(self, config: DEConfig, population_size: int) -> None:
        if int(population_size) != population_size or population_size < 1:
            raise errors.IslandDEValueError(f"population_size must be a positive integer (got {population_size})")
        self.config = config
        self.population_size = int(population_size)
        self.name = self.__class__.__name__  # printed name in repr
        self._num_generations = 0
        self._fault: tp.Optional[BaseException] = None
        self._closed = False
        self._callbacks: tp.Dict[str, tp.List[_EngineCallBack]] = {}

    @property
    def dimension(self) -> int:
        """int: dimension of the candidates"""
        return self.config.dimension

    @property
    def num_generations(self) -> int:
        """int: number of completed generations"""
        return self._num_generations

    @property
    def faulted(self) -> bool:
        return self._fault is not None

    def __repr__(self) -> str:
        return (
            f"Instance of {self.name}(dimension={self.dimension}, population_size={self.population_size}, "
            f"CR={self.config.CR}, F={self.config.F})"
        )

    def register_callback(self, name: str, callback: _EngineCallBack) -> None:
        """Add a callback method called after each generation.

        Parameters
        ----------
        name: str
            name of the method to register the callback for (only "generation" is available)
        callback: callable
            a callable taking the engine as parameter, called after the migration step
        """
        if name not in ["generation"]:
            raise KeyError(f'Unknown callback method "{name}", only "generation" is available')
        self._callbacks.setdefault(name, []).append(callback)

    def remove_all_callbacks(self) -> None:
        """Removes all registered callables"""
        self._callbacks = {}

    def _check_usable(self) -> None:
        if self._closed:
            raise errors.IslandDERuntimeError(f"{self.name} is closed")
        if self._fault is not None:
            raise errors.EngineFaultedError(f"{self.name} is faulted and cannot be used anymore") from self._fault

    def _set_fault(self, error: BaseException) -> None:
        if self._fault is None:
            logger.warning("%s is faulted: %r", self.name, error)
            self._fault = error

    def _guarded(self, func: tp.Callable[[], Y]) -> Y:
        """Runs a function calling user callbacks on the current thread, and faults the engine
        if it raises
        """
        try:
            return func()
        except errors.EngineFaultedError:
            raise
        except Exception as e:
            self._set_fault(e)
            raise errors.EngineFaultedError(f"{self.name} failed with {e!r}") from e

    def evolve_one_generation(self) -> None:
        """Runs one full generation (mutation, crossover and selection of every candidate).
        This is a blocking operation.
        """
        self._check_usable()
        self._internal_evolve_one_generation()
        self._num_generations += 1
        for callback in self._callbacks.get("generation", []):
            callback(self)

    def evolve_generations(self, num_generations: int) -> None:
        """Runs num_generations generations, sequentially"""
        if num_generations < 0:
            raise errors.IslandDEValueError(f"num_generations must be non-negative (got {num_generations})")
        for _ in range(num_generations):
            self.evolve_one_generation()

    def best_candidate_overall(self) -> BestCandidate:
        """Returns the error and a copy of the best candidate of the whole population,
        according to the comparator (first found wins ties)
        """
        self._check_usable()
        return self._internal_best_candidate()

    @property
    def population(self) -> np.ndarray:
        """Copy of the whole population, as an array of shape (population_size, dimension)"""
        self._check_usable()
        return self._internal_population()[0]

    @property
    def errors(self) -> tp.List[tp.ErrorValue]:
        """Copy of the errors of the whole population, in the same order as the population"""
        self._check_usable()
        return self._internal_population()[1]

    def close(self) -> None:
        self._closed = True

    def __enter__(self: X) -> X:
        return self

    def __exit__(self, *exc: tp.Any) -> None:
        self.close()

    # Internal methods which can be overloaded (or must be, in the case of _internal_evolve_one_generation)

    def _internal_evolve_one_generation(self) -> None:
        raise NotImplementedError("You should define your engine!")

    def _internal_best_candidate(self) -> BestCandidate:
        raise NotImplementedError("You should define your engine!")

    def _internal_population(self) -> tp.Tuple[np.ndarray, tp.List[tp.ErrorValue]]:
        raise NotImplementedError("You should define your engine!")
