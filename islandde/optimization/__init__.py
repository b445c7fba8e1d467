# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .base import Engine  # abstract class, for type checking
from .differentialevolution import BestCandidate
from .differentialevolution import DEConfig
from .threadsde import ThreadsDE
from .sequential import SequentialDE
from .callbacks import GenerationPrinter
from .callbacks import GenerationLogger
