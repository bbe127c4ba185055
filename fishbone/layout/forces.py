"""
Generic 2D force simulation.

A small velocity-Verlet style engine: every tick cools the energy ``alpha``
toward ``alpha_target``, lets each registered force adjust body velocities,
then integrates positions with velocity decay. Pinned bodies (finite entries
in the ``pinned`` array) are held in place with zero velocity.

The engine knows nothing about fishbones; callers supply per-link distances
and per-body charges.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Optional, Protocol, Sequence, Tuple

import numpy as np

_INITIAL_RADIUS = 10.0
_INITIAL_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


class Force(Protocol):
    def apply(self, simulation: "ForceSimulation", alpha: float) -> None:
        ...


def log_scale(
    domain: Tuple[float, float], output_range: Tuple[float, float]
) -> Callable[[float], float]:
    """Return ``f`` mapping ``domain`` logarithmically onto ``output_range`` (unclamped)."""

    d0, d1 = (math.log(value) for value in domain)
    r0, r1 = output_range

    def scale(value):
        return r0 + (np.log(value) - d0) * (r1 - r0) / (d1 - d0)

    return scale


class LinkForce:
    """Spring force pulling linked bodies toward a target distance."""

    def __init__(
        self,
        links: Sequence[Tuple[int, int]],
        distances: Sequence[float],
        *,
        iterations: int = 1,
    ) -> None:
        self.sources = np.array([link[0] for link in links], dtype=int)
        self.targets = np.array([link[1] for link in links], dtype=int)
        self.distances = np.asarray(distances, dtype=float)
        self.iterations = iterations
        self.strengths = np.zeros(len(links), dtype=float)
        self.bias = np.zeros(len(links), dtype=float)

    def initialize(self, body_count: int) -> None:
        degree = np.bincount(
            np.concatenate([self.sources, self.targets]), minlength=body_count
        ).astype(float)
        if not len(self.sources):
            return
        src = degree[self.sources]
        tgt = degree[self.targets]
        # Weaker springs on busy bodies keep hubs from being yanked around.
        self.strengths = 1.0 / np.minimum(src, tgt)
        self.bias = src / (src + tgt)

    def apply(self, simulation: "ForceSimulation", alpha: float) -> None:
        if not len(self.sources):
            return
        pos = simulation.positions
        vel = simulation.velocities
        for _ in range(self.iterations):
            delta = (pos[self.targets] + vel[self.targets]) - (
                pos[self.sources] + vel[self.sources]
            )
            zero = delta == 0.0
            if np.any(zero):
                delta[zero] = simulation.jiggle(int(zero.sum()))
            length = np.hypot(delta[:, 0], delta[:, 1])
            factor = (length - self.distances) / length * alpha * self.strengths
            delta *= factor[:, None]
            np.add.at(vel, self.targets, -delta * self.bias[:, None])
            np.add.at(vel, self.sources, delta * (1.0 - self.bias)[:, None])


class ManyBodyForce:
    """Pairwise inverse-distance force; negative charges repel."""

    def __init__(
        self,
        charges: Sequence[float],
        *,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
    ) -> None:
        self.charges = np.asarray(charges, dtype=float)
        self.distance_min2 = distance_min * distance_min
        self.distance_max2 = distance_max * distance_max

    def apply(self, simulation: "ForceSimulation", alpha: float) -> None:
        pos = simulation.positions
        if len(pos) < 2 or not np.any(self.charges):
            return
        delta = pos[None, :, :] - pos[:, None, :]
        count = len(pos)
        off_diagonal = ~np.eye(count, dtype=bool)
        coincident = np.all(delta == 0.0, axis=2) & off_diagonal
        if np.any(coincident):
            pairs = int(coincident.sum())
            delta[coincident] = simulation.jiggle(2 * pairs).reshape(pairs, 2)
        dist2 = np.einsum("ijk,ijk->ij", delta, delta)
        close = dist2 < self.distance_min2
        dist2 = np.where(close, np.sqrt(self.distance_min2 * dist2), dist2)
        np.fill_diagonal(dist2, np.inf)
        weights = self.charges[None, :] * alpha / dist2
        weights[dist2 >= self.distance_max2] = 0.0
        simulation.velocities += np.einsum("ij,ijk->ik", weights, delta)


class ForceSimulation:
    """Holds body state and advances it one tick at a time."""

    def __init__(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        pinned: np.ndarray,
        *,
        alpha: float = 1.0,
        alpha_min: float = 0.001,
        alpha_decay: Optional[float] = None,
        alpha_target: float = 0.0,
        velocity_decay: float = 0.4,
        seed: Optional[int] = None,
    ) -> None:
        self.positions = positions
        self.velocities = velocities
        self.pinned = pinned
        self.alpha = alpha
        self.alpha_min = alpha_min
        self.alpha_decay = (
            alpha_decay if alpha_decay is not None else 1.0 - alpha_min ** (1.0 / 300.0)
        )
        self.alpha_target = alpha_target
        self.velocity_decay = velocity_decay
        self.forces: Dict[str, Force] = {}
        self._rng = np.random.default_rng(seed)
        self._place_unpositioned()

    @property
    def body_count(self) -> int:
        return len(self.positions)

    @property
    def active(self) -> bool:
        return self.alpha >= self.alpha_min

    def add_force(self, name: str, force: Force) -> "ForceSimulation":
        initialize = getattr(force, "initialize", None)
        if initialize is not None:
            initialize(self.body_count)
        self.forces[name] = force
        return self

    def restart(self, alpha: float = 1.0) -> None:
        self.alpha = alpha

    def jiggle(self, count: int) -> np.ndarray:
        return (self._rng.random(count) - 0.5) * 1e-6

    def tick(self) -> float:
        self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay
        for force in self.forces.values():
            force.apply(self, self.alpha)

        free = ~np.all(np.isfinite(self.pinned), axis=1)
        self.velocities[free] *= 1.0 - self.velocity_decay
        self.positions[free] += self.velocities[free]
        self.positions[~free] = self.pinned[~free]
        self.velocities[~free] = 0.0
        return self.alpha

    def _place_unpositioned(self) -> None:
        # Phyllotaxis spiral for bodies without a starting position.
        missing = np.flatnonzero(~np.all(np.isfinite(self.positions), axis=1))
        if not len(missing):
            return
        radius = _INITIAL_RADIUS * np.sqrt(0.5 + missing)
        angle = missing * _INITIAL_ANGLE
        self.positions[missing, 0] = radius * np.cos(angle)
        self.positions[missing, 1] = radius * np.sin(angle)
        self.velocities[missing] = 0.0
