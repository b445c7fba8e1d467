# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.


# base classes


class IslandDEError(Exception):
    """Base class for error raised by islandde"""


class IslandDEWarning(Warning):
    pass


# errors
# pylint: disable=too-many-ancestors


class IslandDERuntimeError(RuntimeError, IslandDEError):
    """Runtime error raised by islandde"""


class IslandDETypeError(TypeError, IslandDEError):
    """Type error raised by islandde"""


class IslandDEValueError(ValueError, IslandDEError):
    """Value error raised by islandde, mostly for invalid settings"""


class IslandBusyError(IslandDERuntimeError):
    """Raised when an island is asked for work or for its population while it is still busy"""


class EngineFaultedError(IslandDERuntimeError):
    """Raised when a user callback failed inside the engine, or when using an engine which
    previously failed. The original error is available as __cause__.
    """


class CompletionTimeoutError(EngineFaultedError):
    """Raised when an island did not complete its work before the deadline"""


# warnings


class IslandDERuntimeWarning(RuntimeWarning, IslandDEWarning):
    """Runtime warning raise by islandde"""


class InefficientSettingsWarning(IslandDERuntimeWarning):
    """Optimization settings are not optimal for the optimizer"""
