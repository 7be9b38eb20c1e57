"""
Derivative-free local refinement by Nelder-Mead simplex descent.

The simplex is a triangle in (intercept, slope) space. Each iteration replaces
the worst vertex by reflecting, expanding or contracting it through the
centroid of the other two, and shrinks the whole simplex toward the best
vertex when none of those moves helps.

States: SEEDED -> REFINING -> CONVERGED | EXHAUSTED | DIVERGED
"""

import logging
from typing import Callable

import numpy as np

from pylinefit.analysis.loss import rms_loss_vector
from pylinefit.errors import EmptyInputError, NumericDivergenceError
from pylinefit.types.fitting import FitResult, ModelParams, RefinerState, Sample

logger = logging.getLogger(__name__)

IterationCallback = Callable[[int, ModelParams, float], None]


class SimplexRefiner:
    """Nelder-Mead refiner for a two-parameter line.

    Holds only settings; every call to `refine` builds its own simplex, so a
    single instance may be shared between threads.
    """

    def __init__(
        self,
        max_iterations: int = 200,
        tolerance: float = 1e-6,
        patience: int = 5,
        initial_step: float = 0.1,
        reflection: float = 1.0,
        expansion: float = 2.0,
        contraction: float = 0.5,
        shrink: float = 0.5,
    ) -> None:
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1 (got {max_iterations})")
        if tolerance < 0:
            raise ValueError(f"tolerance must be >= 0 (got {tolerance})")
        if patience < 1:
            raise ValueError(f"patience must be >= 1 (got {patience})")
        if initial_step <= 0:
            raise ValueError(f"initial_step must be > 0 (got {initial_step})")
        self.max_iterations = int(max_iterations)
        self.tolerance = float(tolerance)
        self.patience = int(patience)
        self.initial_step = float(initial_step)
        self.reflection = reflection
        self.expansion = expansion
        self.contraction = contraction
        self.shrink = shrink

    def refine(
        self,
        seed: ModelParams,
        sample: Sample,
        callback: IterationCallback | None = None,
    ) -> FitResult:
        """Minimize the RMS loss starting from `seed`.

        Args:
            seed: Starting intercept and slope
            sample: Non-empty sample to fit
            callback: Optional callable(iteration, best_params, best_loss)
                invoked after every iteration

        Returns:
            FitResult; `converged` is True only when the CONVERGED state is
            reached. On divergence the best finite point is returned with the
            NumericDivergenceError attached as `error`.

        Raises:
            EmptyInputError: If the sample has no points
        """
        if len(sample) == 0:
            raise EmptyInputError("Cannot refine against an empty sample")

        best_point = seed.to_array()
        best_loss = np.inf
        iteration = 0

        def evaluate(point: np.ndarray) -> float:
            nonlocal best_point, best_loss
            loss = rms_loss_vector(point, sample)
            if not np.isfinite(loss):
                raise NumericDivergenceError(
                    f"Non-finite loss at intercept={point[0]:.6g}, slope={point[1]:.6g}",
                    iteration=iteration,
                    params=ModelParams.from_array(point),
                )
            if loss < best_loss:
                best_point, best_loss = point.copy(), loss
            return loss

        state = RefinerState.SEEDED
        try:
            simplex, losses = self._initial_simplex(best_point, evaluate)
            state = RefinerState.REFINING
            stalled = 0

            for iteration in range(1, self.max_iterations + 1):
                previous_best = best_loss
                simplex, losses = self._step(simplex, losses, evaluate)

                improvement = previous_best - best_loss
                spread = float(losses.max() - losses.min())
                if improvement < self.tolerance and spread <= self.tolerance:
                    stalled += 1
                else:
                    stalled = 0

                if callback is not None:
                    callback(iteration, ModelParams.from_array(best_point), best_loss)

                if stalled >= self.patience:
                    state = RefinerState.CONVERGED
                    break
            else:
                state = RefinerState.EXHAUSTED

        except NumericDivergenceError as exc:
            logger.warning(
                "Refinement diverged at iteration %d (%s); keeping best loss %.6g",
                exc.iteration,
                exc,
                best_loss,
            )
            return FitResult(
                params=ModelParams.from_array(best_point),
                loss=float(best_loss),
                iterations=exc.iteration,
                converged=False,
                state=RefinerState.DIVERGED,
                error=exc,
            )

        logger.debug(
            "Refinement %s after %d iterations (loss=%.6g)",
            state.value,
            iteration,
            best_loss,
        )
        return FitResult(
            params=ModelParams.from_array(best_point),
            loss=float(best_loss),
            iterations=iteration,
            converged=state is RefinerState.CONVERGED,
            state=state,
        )

    def _initial_simplex(
        self, seed: np.ndarray, evaluate: Callable[[np.ndarray], float]
    ) -> tuple[np.ndarray, np.ndarray]:
        vertices = [seed.copy()]
        for axis in range(seed.size):
            vertex = seed.copy()
            vertex[axis] += self.initial_step * max(abs(seed[axis]), 1.0)
            vertices.append(vertex)
        simplex = np.array(vertices)
        losses = np.array([evaluate(vertex) for vertex in simplex])
        return simplex, losses

    def _step(
        self,
        simplex: np.ndarray,
        losses: np.ndarray,
        evaluate: Callable[[np.ndarray], float],
    ) -> tuple[np.ndarray, np.ndarray]:
        order = np.argsort(losses, kind="stable")
        simplex, losses = simplex[order], losses[order]

        centroid = simplex[:-1].mean(axis=0)
        worst = simplex[-1]

        reflected = centroid + self.reflection * (centroid - worst)
        f_reflected = evaluate(reflected)

        if f_reflected < losses[0]:
            expanded = centroid + self.expansion * (reflected - centroid)
            f_expanded = evaluate(expanded)
            if f_expanded < f_reflected:
                return self._replace_worst(simplex, losses, expanded, f_expanded)
            return self._replace_worst(simplex, losses, reflected, f_reflected)

        if f_reflected < losses[-2]:
            return self._replace_worst(simplex, losses, reflected, f_reflected)

        if f_reflected < losses[-1]:
            contracted = centroid + self.contraction * (reflected - centroid)
            f_contracted = evaluate(contracted)
            if f_contracted <= f_reflected:
                return self._replace_worst(simplex, losses, contracted, f_contracted)
        else:
            contracted = centroid + self.contraction * (worst - centroid)
            f_contracted = evaluate(contracted)
            if f_contracted < losses[-1]:
                return self._replace_worst(simplex, losses, contracted, f_contracted)

        best = simplex[0]
        shrunk = best + self.shrink * (simplex - best)
        shrunk[0] = best
        shrunk_losses = losses.copy()
        for idx in range(1, len(shrunk)):
            shrunk_losses[idx] = evaluate(shrunk[idx])
        return shrunk, shrunk_losses

    @staticmethod
    def _replace_worst(
        simplex: np.ndarray, losses: np.ndarray, point: np.ndarray, loss: float
    ) -> tuple[np.ndarray, np.ndarray]:
        simplex = simplex.copy()
        losses = losses.copy()
        simplex[-1] = point
        losses[-1] = loss
        return simplex, losses


def refine(
    seed: ModelParams,
    sample: Sample,
    max_iterations: int = 200,
    tolerance: float = 1e-6,
    patience: int = 5,
    initial_step: float = 0.1,
    callback: IterationCallback | None = None,
) -> FitResult:
    """Functional wrapper around `SimplexRefiner.refine`."""
    refiner = SimplexRefiner(
        max_iterations=max_iterations,
        tolerance=tolerance,
        patience=patience,
        initial_step=initial_step,
    )
    return refiner.refine(seed, sample, callback=callback)
