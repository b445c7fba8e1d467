# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .corefuncs import BENCHMARKS as BENCHMARKS
from .corefuncs import PointFitting as PointFitting
from .corefuncs import sphere as sphere
from .corefuncs import rastrigin as rastrigin
