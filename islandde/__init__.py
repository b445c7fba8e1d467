# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .common import typing as typing
from .common import errors as errors
from .optimization import ThreadsDE as ThreadsDE
from .optimization import SequentialDE as SequentialDE
from .optimization import BestCandidate as BestCandidate
from .optimization import callbacks as callbacks
from . import functions as functions


__all__ = ["ThreadsDE", "SequentialDE", "BestCandidate", "callbacks", "functions", "errors", "typing"]


__version__ = "0.1.0"
