# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import time
import logging
from . import base

global_logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------------------

class GenerationPrinter:
    """Printer to register as "generation" callback in an engine, for printing
    best candidate regularly.

    Parameters
    ----------
    print_interval_generations: int
        max number of generations before performing another print
    print_interval_seconds: float
        max number of seconds before performing another print
    """

    def __init__(self, print_interval_generations: int = 1, print_interval_seconds: float = 60.0) -> None:
        assert print_interval_generations > 0
        assert print_interval_seconds > 0
        self._print_interval_generations = int(print_interval_generations)
        self._print_interval_seconds = print_interval_seconds
        self._next_generation = self._print_interval_generations
        self._next_time = time.time() + print_interval_seconds

    def __call__(self, engine: base.Engine) -> None:
        if time.time() >= self._next_time or engine.num_generations >= self._next_generation:
            self._next_time = time.time() + self._print_interval_seconds
            self._next_generation = engine.num_generations + self._print_interval_generations
            best = engine.best_candidate_overall()
            print(f"After {engine.num_generations} generations, best candidate is {best.candidate} (error: {best.error})")

# -------------------------------------------------------------------------------------

class GenerationLogger:
    """Logger to register as "generation" callback in an engine, for Logging
    best candidate regularly.

    Parameters
    ----------
    logger:
        given logger that callback will use to log
    log_level:
        log level that logger will write to
    log_interval_generations: int
        max number of generations before performing another log
    log_interval_seconds:
        max number of seconds before performing another log
    """

    def __init__(
        self,
        *,
        logger: logging.Logger = global_logger,
        log_level: int = logging.INFO,
        log_interval_generations: int = 1,
        log_interval_seconds: float = 60.0,
    ) -> None:
        assert log_interval_generations > 0
        assert log_interval_seconds > 0
        self._logger = logger
        self._log_level = log_level
        self._log_interval_generations = int(log_interval_generations)
        self._log_interval_seconds = log_interval_seconds
        self._next_generation = self._log_interval_generations
        self._next_time = time.time() + log_interval_seconds

    def __call__(self, engine: base.Engine) -> None:
        if time.time() >= self._next_time or engine.num_generations >= self._next_generation:
            self._next_time = time.time() + self._log_interval_seconds
            self._next_generation = engine.num_generations + self._log_interval_generations
            best = engine.best_candidate_overall()
            self._logger.log(
                self._log_level,
                "After %s generations, best candidate is %s (error: %s)",
                engine.num_generations,
                best.candidate,
                best.error,
            )
