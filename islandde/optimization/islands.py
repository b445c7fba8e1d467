# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""
Islands of the multi-threaded differential evolution.
Each island owns a partition of the population and evolves it on a dedicated
background thread. The main thread drives it through a one-slot rendezvous:
it requests some work, then awaits its completion before requesting anything else.
While the island is idle, the main thread may read and write its population
(this is how migration is performed).
"""

import time
import logging
import threading
import numpy as np
import islandde.common.typing as tp
from islandde.common import errors
from .differentialevolution import BestCandidate, DEConfig, Partition


logger = logging.getLogger(__name__)

GENERATION = "generation"
BEST_CANDIDATE = "best_candidate"


class _IslandThread(threading.Thread):
    """Thread owning a partition and processing one work item at a time.
    A single condition guards the state: the island is busy from the request
    of a work item until its completion (including the initialization at startup).

    Note
    ----
    This thread must be overlaid into an IslandWorker because the destructor of
    a thread is not a reliable way to stop it.
    """

    # pylint: disable=too-many-instance-attributes
    def __init__(self, rank: int, partition: Partition) -> None:
        super().__init__(name=f"island-{rank}", daemon=True)
        self.rank = rank
        self.partition = partition
        self.condition = threading.Condition()
        self.busy = True  # until the initial population is ready
        self.work: tp.Optional[str] = None
        self.finish = False
        self.error: tp.Optional[Exception] = None
        self.best_candidate: tp.Optional[BestCandidate] = None
        self.num_replacements = 0

    def run(self) -> None:
        """Initializes the partition, then processes work items until told to finish."""
        try:
            self.partition.initialize()
        except Exception as e:  # pylint: disable=broad-except
            self.error = e
        self._complete()
        while True:
            with self.condition:
                self.condition.wait_for(lambda: self.work is not None or self.finish)
                if self.finish:
                    return
                work = self.work
            try:
                if work == GENERATION:
                    self.num_replacements = self.partition.evolve()
                elif work == BEST_CANDIDATE:
                    self.best_candidate = self.partition.best_candidate()
                else:
                    raise errors.IslandDEValueError(f'Unknown work "{work}"')
            except Exception as e:  # pylint: disable=broad-except
                self.error = e
            self._complete()

    def _complete(self) -> None:
        with self.condition:
            self.work = None
            self.busy = False
            self.condition.notify_all()

    def request(self, work: str) -> None:
        with self.condition:
            if self.busy:
                raise errors.IslandBusyError(f"Island {self.rank} is busy, await its completion first")
            if self.finish:
                raise errors.IslandDERuntimeError(f"Island {self.rank} is closed")
            self.busy = True
            self.work = work
            self.condition.notify_all()

    def stop(self) -> None:
        """Notifies the thread that it must stop"""
        with self.condition:
            self.finish = True
            self.condition.notify_all()


class IslandWorker:
    """Island of the multi-threaded differential evolution, running on its own thread.
    The initial population is generated on that thread as soon as the island is created.

    Parameters
    ----------
    rank: int
        index of the island in the ring of islands
    config: DEConfig
        the shared configuration
    size: int
        number of candidates of the island
    seed: int/None
        seed of the random streams of the island
    initial_population: np.ndarray/None
        array of shape (size, dimension) to start from, instead of calling the generator

    Note
    ----
    Only one work item can be pending at once: each request must be followed by
    :code:`await_completion` before the next request.
    """

    def __init__(
        self,
        rank: int,
        config: DEConfig,
        size: int,
        seed: tp.Optional[int] = None,
        initial_population: tp.Optional[np.ndarray] = None,
    ) -> None:
        self.rank = rank
        self.size = size
        partition = Partition(config, size, seed=seed, initial_population=initial_population)
        self._thread = _IslandThread(rank, partition)
        self._thread.start()
        logger.debug("Started island %s with %s candidates", rank, size)

    @property
    def busy(self) -> bool:
        with self._thread.condition:
            return self._thread.busy

    @property
    def error(self) -> tp.Optional[Exception]:
        return self._thread.error

    def request_generation(self) -> None:
        """Schedules a generation (mutation and selection of each candidate) without blocking"""
        self._thread.request(GENERATION)

    def request_best_candidate(self) -> None:
        """Schedules the computation of the best candidate without blocking"""
        self._thread.request(BEST_CANDIDATE)

    def await_completion(self, timeout: tp.Optional[float] = None) -> None:
        """Blocks until the pending work item is finished

        Parameters
        ----------
        timeout: float/None
            maximum number of seconds to wait for, or None for waiting indefinitely

        Raises
        ------
        CompletionTimeoutError
            if the work did not finish in time
        EngineFaultedError
            if a user callback raised while processing the work (available as __cause__)
        """
        thread = self._thread
        with thread.condition:
            done = thread.condition.wait_for(lambda: not thread.busy, timeout=timeout)
        if not done:
            raise errors.CompletionTimeoutError(f"Island {self.rank} did not complete its work within {timeout}s")
        if thread.error is not None:
            raise errors.EngineFaultedError(
                f"Island {self.rank} failed with {thread.error!r}"
            ) from thread.error

    @property
    def best_candidate(self) -> tp.Optional[BestCandidate]:
        """Last computed best candidate (stale if not preceded by request_best_candidate
        and await_completion)
        """
        return self._thread.best_candidate

    @property
    def num_replacements(self) -> int:
        """Number of candidates replaced during the last generation"""
        return self._thread.num_replacements

    def _idle_partition(self) -> Partition:
        with self._thread.condition:
            if self._thread.busy:
                raise errors.IslandBusyError(f"Island {self.rank} is busy, its population cannot be accessed")
            return self._thread.partition

    def population_slot(self, index: int) -> np.ndarray:
        """Copy of the candidate at the given index"""
        return np.array(self._idle_partition().population[index], copy=True)

    def error_slot(self, index: int) -> tp.ErrorValue:
        return self._idle_partition().errors[index]

    def replace_slot(self, index: int, candidate: tp.ArrayLike, error: tp.ErrorValue) -> None:
        """Overwrites the candidate at the given index, as well as its paired error"""
        self._idle_partition().replace(index, candidate, error)

    @property
    def population(self) -> np.ndarray:
        return np.array(self._idle_partition().population, copy=True)

    @property
    def errors(self) -> tp.List[tp.ErrorValue]:
        return list(self._idle_partition().errors)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def stop(self) -> None:
        """Tells the thread to stop once its pending work is done, without waiting for it"""
        self._thread.stop()

    def close(self, timeout: tp.Optional[float] = None) -> None:
        """Stops the thread and waits for it (up to timeout seconds).
        A thread stuck in a user callback cannot be interrupted, it will stop after the callback returns.
        """
        self.stop()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            start = time.monotonic()
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Island %s did not stop after %.3fs", self.rank, time.monotonic() - start)
            else:
                logger.debug("Stopped island %s", self.rank)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rank={self.rank}, size={self.size}, busy={self.busy})"

    def __del__(self) -> None:
        thread = getattr(self, "_thread", None)  # may not exist if init failed
        if thread is not None:
            thread.stop()  # del method of the thread class does not work
