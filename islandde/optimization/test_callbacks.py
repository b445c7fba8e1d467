# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import time
import logging
import operator
import numpy as np
import islandde.common.typing as tp
from islandde.functions import sphere
from .sequential import SequentialDE
from . import callbacks


def make_engine() -> SequentialDE:
    initial = np.random.RandomState(12).normal(size=(6, 2))
    return SequentialDE(2, 6, 0.5, 0.5, np.random.normal, sphere, operator.lt, seed=12, initial_population=initial)


def test_generation_printer(capsys: tp.Any) -> None:
    engine = make_engine()
    engine.register_callback("generation", callbacks.GenerationPrinter(print_interval_generations=3))
    engine.evolve_generations(7)
    lines = capsys.readouterr().out.splitlines()
    assert [line.split(",")[0] for line in lines] == ["After 3 generations", "After 6 generations"]
    assert all("best candidate is [" in line and "(error: " in line for line in lines)


def test_generation_printer_time_interval(capsys: tp.Any) -> None:
    engine = make_engine()
    printer = callbacks.GenerationPrinter(print_interval_generations=1000, print_interval_seconds=0.5)
    engine.register_callback("generation", printer)
    engine.evolve_one_generation()
    assert not capsys.readouterr().out
    time.sleep(0.6)
    engine.evolve_one_generation()
    assert capsys.readouterr().out.startswith("After 2 generations, best candidate is")


def test_generation_logger(caplog: tp.Any) -> None:
    engine = make_engine()
    logger = logging.getLogger(__name__)
    engine.register_callback("generation", callbacks.GenerationLogger(logger=logger, log_level=logging.WARNING))
    with caplog.at_level(logging.WARNING):
        engine.evolve_generations(2)
    records = [r for r in caplog.records if r.name == __name__]
    assert len(records) == 2
    assert all(r.levelno == logging.WARNING for r in records)
    assert records[1].getMessage().startswith("After 2 generations, best candidate is")


def test_generation_logger_default(caplog: tp.Any) -> None:
    engine = make_engine()
    engine.register_callback("generation", callbacks.GenerationLogger(log_interval_generations=2))
    with caplog.at_level(logging.INFO, logger=callbacks.global_logger.name):
        engine.evolve_generations(4)
    messages = [r.getMessage() for r in caplog.records if r.name == callbacks.global_logger.name]
    assert len(messages) == 2
    assert messages[0].startswith("After 2 generations")
