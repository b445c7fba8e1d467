# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import os
import time
import logging
import warnings
import numpy as np
import islandde.common.typing as tp
from islandde.common import errors
from . import base
from .differentialevolution import BestCandidate, DEConfig, best_index, check_population
from .islands import IslandWorker
from .randomstreams import RandomStreams


logger = logging.getLogger(__name__)


class ThreadsDE(base.Engine):
    """Multi-threaded island model of differential evolution (DE/rand/1/bin).
    The population is split into :code:`num_workers` islands of :code:`population_size / num_workers`
    candidates, each one evolved on its own thread. After each generation, each island sends with
    probability :code:`migration_probability` a copy of its best candidate to a random slot of the
    next island in the ring.

    Parameters
    ----------
    dimension: int
        number of components of each candidate
    num_workers: int
        number of islands, hence of threads
    migration_probability: float
        probability for each island to migrate its best candidate at each generation, in [0, 1]
    population_size: int
        total number of candidates. It must be divisible by num_workers, and each island requires
        at least 3 candidates.
    CR: float
        crossover rate in [0, 1]
    F: float
        differential weight
    generator: callable
        function without arguments returning one component of a candidate, called from the island threads
    evaluator: callable
        function computing the error of a candidate, called concurrently from the island threads
    comparator: callable
        comparator(a, b) returns True if error a should be preferred over error b
    seed: int/None
        seed of all the random streams (coordinator and islands), for reproducible runs
    initial_population: np.ndarray/None
        array of shape (population_size, dimension) used instead of the generator. It is split
        into consecutive blocks, one per island.
    recompute_migrated_errors: bool
        whether to evaluate the migrated candidate in its new island (otherwise the error
        of the source island is copied along with the candidate)
    timeout: float/None
        maximum number of seconds to wait for all islands at each synchronization. The engine
        is faulted if it expires. None waits indefinitely.

    Note
    ----
    Populations are never accessed concurrently: migration happens while all islands are idle.
    """

    # pylint: disable=too-many-arguments,too-many-instance-attributes

    def __init__(
        self,
        dimension: int,
        num_workers: int,
        migration_probability: float,
        population_size: int,
        CR: float,
        F: float,
        generator: tp.PopulationGenerator,
        evaluator: tp.ErrorEvaluator,
        comparator: tp.ErrorComparator[tp.Any],
        *,
        seed: tp.Optional[int] = None,
        initial_population: tp.Optional[np.ndarray] = None,
        recompute_migrated_errors: bool = False,
        timeout: tp.Optional[float] = None,
    ) -> None:
        super().__init__(DEConfig(dimension, CR, F, generator, evaluator, comparator), population_size)
        self._islands: tp.List[IslandWorker] = []  # first, so that close works in any case
        if int(num_workers) != num_workers or num_workers < 1:
            raise errors.IslandDEValueError(f"num_workers must be a positive integer (got {num_workers})")
        if not 0 <= migration_probability <= 1:
            raise errors.IslandDEValueError(
                f"migration_probability must be in [0, 1] (got {migration_probability})"
            )
        if population_size % num_workers:
            raise errors.IslandDEValueError(
                f"population_size ({population_size}) must be divisible by num_workers ({num_workers})"
            )
        if population_size // num_workers < 3:
            raise errors.IslandDEValueError(
                f"Each island requires at least 3 candidates (got {population_size // num_workers})"
            )
        if timeout is not None and timeout <= 0:
            raise errors.IslandDEValueError(f"timeout must be positive or None (got {timeout})")
        cpus = os.cpu_count()
        if cpus is not None and num_workers > cpus:
            warnings.warn(
                f"num_workers = {num_workers} > {cpus} CPUs is suboptimal",
                errors.InefficientSettingsWarning,
            )
        self.num_workers = int(num_workers)
        self.migration_probability = float(migration_probability)
        self.local_size = self.population_size // self.num_workers
        self.recompute_migrated_errors = recompute_migrated_errors
        self.timeout = timeout
        self._streams = RandomStreams(("migration", "slot"), seed=seed)
        self.num_migrations = 0
        blocks: tp.List[tp.Optional[np.ndarray]] = [None] * self.num_workers
        if initial_population is not None:
            array = check_population(initial_population, (self.population_size, self.dimension))
            blocks = list(array.reshape(self.num_workers, self.local_size, self.dimension))
        for rank, island_seed in enumerate(self._streams.spawn(self.num_workers)):
            self._islands.append(
                IslandWorker(
                    rank,
                    self.config,
                    self.local_size,
                    seed=island_seed if seed is not None else None,
                    initial_population=blocks[rank],
                )
            )
        try:
            self._barrier()
        except errors.EngineFaultedError:
            self.close()
            raise

    @property
    def islands(self) -> tp.Tuple[IslandWorker, ...]:
        return tuple(self._islands)

    def __repr__(self) -> str:
        return (
            f"Instance of {self.name}(dimension={self.dimension}, num_workers={self.num_workers}, "
            f"population_size={self.population_size}, migration_probability={self.migration_probability}, "
            f"CR={self.config.CR}, F={self.config.F})"
        )

    def _barrier(self) -> None:
        """Waits for the completion of all islands. The timeout applies to the whole barrier.
        The engine is faulted if any island failed or if the deadline expired.
        """
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        failures: tp.List[errors.EngineFaultedError] = []
        for island in self._islands:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                island.await_completion(remaining)
            except errors.CompletionTimeoutError as e:
                self._set_fault(e)
                raise
            except errors.EngineFaultedError as e:
                failures.append(e)
        if failures:
            self._set_fault(failures[0].__cause__ or failures[0])
            raise failures[0]

    def _internal_evolve_one_generation(self) -> None:
        for island in self._islands:
            island.request_generation()
        self._barrier()
        self.migrate()

    def _collect_best_candidates(self) -> tp.List[BestCandidate]:
        for island in self._islands:
            island.request_best_candidate()
        self._barrier()
        return [island.best_candidate for island in self._islands]  # type: ignore

    def migrate(self) -> None:
        """Sends, with probability migration_probability, the best candidate of each island
        into a random slot of the next island in the ring.
        The best candidates are all computed before any write, so a migrated candidate is never
        sent further during the same migration step.
        """
        self._check_usable()
        bests = self._collect_best_candidates()
        for rank, best in enumerate(bests):
            if self._streams.uniform("migration") < self.migration_probability:
                target = self._islands[(rank + 1) % self.num_workers]
                slot = self._streams.randint("slot", self.local_size)
                error = best.error
                if self.recompute_migrated_errors:
                    candidate = np.array(best.candidate, copy=True)
                    error = self._guarded(lambda: self.config.evaluator(candidate))
                target.replace_slot(slot, best.candidate, error)
                self.num_migrations += 1
                logger.debug("Migrated best candidate of island %s to slot %s of island %s", rank, slot, target.rank)

    def _internal_best_candidate(self) -> BestCandidate:
        bests = self._collect_best_candidates()
        return self._guarded(lambda: bests[best_index([b.error for b in bests], self.config.comparator)])

    def _internal_population(self) -> tp.Tuple[np.ndarray, tp.List[tp.ErrorValue]]:
        population = np.concatenate([island.population for island in self._islands], axis=0)
        errors_ = [e for island in self._islands for e in island.errors]
        return population, errors_

    def close(self) -> None:
        """Stops all island threads"""
        super().close()
        for island in self._islands:
            island.close(timeout=self.timeout)

    def __del__(self) -> None:
        # no join: a thread stuck in a user callback stops once the callback returns
        for island in getattr(self, "_islands", []):  # may not exist if init failed
            island.stop()
