# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import islandde.common.typing as tp


def sphere(x: np.ndarray) -> float:
    """Sum of squares, the error of the simplest benchmark (minimum 0 at the origin)"""
    assert x.ndim == 1
    return float(x.dot(x))


def ellipsoid(x: np.ndarray) -> float:
    """Weighted sum of squares, with weights from 1 to 1e6 along the dimensions (ill-conditioned)"""
    dim = x.size
    weights = 10 ** (6 * (np.arange(dim) / float(dim - 1))) if dim != 1 else [1.0]
    return float(np.array(weights).dot(np.square(x)))


def rastrigin(x: np.ndarray) -> float:
    """Multimodal benchmark with a local minimum near each point of the integer grid"""
    cosi = float(np.sum(np.cos(2 * np.pi * x)))
    return float(10.0 * (len(x) - cosi) + sphere(x))


# name: (error function, value of each component at the minimum)
BENCHMARKS: tp.Dict[str, tp.Tuple[tp.Callable[[np.ndarray], float], float]] = {
    "sphere": (sphere, 0.0),
    "ellipsoid": (ellipsoid, 0.0),
    "rastrigin": (rastrigin, 0.0),
}


class PointFitting:
    """Fitting a polynomial to noisy points sampled from a reference polynomial.
    The candidate holds the coefficients of the polynomial (in increasing degree order),
    and its error is the sum of squared residuals.

    Parameters
    ----------
    coefficients: sequence of float
        coefficients of the reference polynomial, in increasing degree order.
        The dimension of the problem is the number of coefficients.
    num_points: int
        number of points, regularly spaced on [-1, 1]
    noise: float
        standard deviation of the gaussian noise added to the points
    seed: int/None
        seed of the noise

    Note
    ----
    Calls are read-only, so that the function can be evaluated concurrently from several threads.
    """

    def __init__(
        self,
        coefficients: tp.Sequence[float],
        num_points: int = 20,
        noise: float = 0.0,
        seed: tp.Optional[int] = None,
    ) -> None:
        if num_points < len(coefficients):
            raise ValueError(f"At least {len(coefficients)} points are required (got {num_points})")
        self.coefficients = np.array(coefficients, dtype=float)
        self.x = np.linspace(-1.0, 1.0, num_points)
        self.y = np.polynomial.polynomial.polyval(self.x, self.coefficients)
        if noise:
            self.y = self.y + noise * np.random.RandomState(seed).normal(size=num_points)

    @property
    def dimension(self) -> int:
        return self.coefficients.size

    def __call__(self, candidate: np.ndarray) -> float:
        residuals = np.polynomial.polynomial.polyval(self.x, candidate) - self.y
        return float(residuals.dot(residuals))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(coefficients={self.coefficients.tolist()}, num_points={self.x.size})"
