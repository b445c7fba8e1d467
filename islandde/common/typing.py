# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Definitions of some convenient types.
If you know better practices, feel free to submit it ;)
"""
# pylint: disable=unused-import
# structures
from typing import Any as Any
from typing import Generic as Generic
from typing import Type as Type
from typing import TypeVar as TypeVar
from typing import Optional as Optional
from typing import Union as Union

# containers
from typing import Dict as Dict
from typing import Tuple as Tuple
from typing import List as List
from typing import Sequence as Sequence
from typing import NamedTuple as NamedTuple

# iterables
from typing import Iterator as Iterator
from typing import Iterable as Iterable

# others
from typing import Callable as Callable
from typing_extensions import Protocol

#
import numpy as _np


ArrayLike = Union[Tuple[float, ...], List[float], _np.ndarray]
Candidate = _np.ndarray  # 1d array of size dimension
ErrorValue = Any  # opaque, only compared through an ErrorComparator


# %% Protocol definitions for the user-provided callbacks

E = TypeVar("E", contravariant=True)


class PopulationGenerator(Protocol):
    # pylint: disable=pointless-statement

    def __call__(self) -> float:
        ...


class ErrorEvaluator(Protocol):
    # pylint: disable=pointless-statement, unused-argument

    def __call__(self, candidate: _np.ndarray) -> Any:
        ...


class ErrorComparator(Protocol[E]):
    # pylint: disable=pointless-statement, unused-argument

    def __call__(self, first: E, second: E) -> bool:
        ...
