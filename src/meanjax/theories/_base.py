"""Common interface of the mean element theories.

A theory maps *mean* (averaged) elements to the *osculating* elements
they stand for at the same epoch.  Converters invert that map and
propagators add the secular drift in between.  Three types are shared by
all theories:

- :class:`AveragedElements`: six mean elements tagged with their
  parameterization.
- :class:`MeanOrbit`: averaged elements together with the epoch, frame
  and theory they belong to.
- :class:`MeanTheory`: the abstract strategy; :class:`AnalyticalTheory`
  specializes it for theories written as pure JAX kernels, which are
  JIT-compiled once per theory instance and differentiated with
  ``jax.jacfwd`` by the least-squares converter.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import NamedTuple

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from meanjax.config import get_dtype
from meanjax.epoch import Epoch
from meanjax.errors import OrbitValidityError
from meanjax.orbit import Orbit, OrbitType, convert_elements


class AveragedElements(NamedTuple):
    """Six mean elements in a given parameterization.

    Attributes:
        elements: Element vector, shape ``(6,)``. Units: *m*, *rad*.
        orbit_type: Parameterization of ``elements`` (never ``CARTESIAN``
            for the theories shipped with meanjax).
    """

    elements: Array
    orbit_type: OrbitType

    @classmethod
    def from_orbit(cls, orbit: Orbit) -> AveragedElements:
        """Read the elements of *orbit* as mean elements."""
        return cls(orbit.elements, orbit.orbit_type)

    def to_type(self, orbit_type: OrbitType, gm: float) -> AveragedElements:
        """Re-express the elements in another parameterization."""
        if orbit_type is self.orbit_type:
            return self
        return AveragedElements(
            convert_elements(self.elements, self.orbit_type, orbit_type, gm), orbit_type
        )


@dataclass(frozen=True, eq=False)
class MeanOrbit:
    """Averaged elements bound to an epoch, a frame and a theory.

    Produced by the converters and the analytical propagators; the
    osculating orbit it stands for is rebuilt by
    :meth:`to_osculating_orbit`.

    Args:
        averaged: Mean elements.
        epoch: Epoch of the elements.
        theory: Theory that gives the elements their meaning.
        frame: Inertial frame label.
        iterations: Converter iterations spent to obtain the elements
            (0 when they were given directly).
    """

    averaged: AveragedElements
    epoch: Epoch
    theory: MeanTheory
    frame: str = "GCRF"
    iterations: int = 0

    def __post_init__(self) -> None:
        elements = jnp.asarray(self.averaged.elements, dtype=get_dtype())
        if elements.shape != (6,):
            raise ValueError(f"Mean elements must have shape (6,), got {elements.shape}")
        object.__setattr__(self, "averaged", AveragedElements(elements, self.averaged.orbit_type))

    @property
    def elements(self) -> Array:
        return self.averaged.elements

    @property
    def orbit_type(self) -> OrbitType:
        return self.averaged.orbit_type

    def to_orbit(self) -> Orbit:
        """The mean elements packed as an :class:`Orbit` (a mean orbit,
        not a physical state)."""
        return Orbit(self.elements, self.orbit_type, self.epoch, self.frame, self.theory.mu)

    def to_osculating_orbit(self) -> Orbit:
        """Expand the mean elements into the osculating orbit at the epoch."""
        return self.theory.osculating_from_averaged(self.averaged, self.epoch, self.frame)

    def __repr__(self) -> str:
        values = ", ".join(f"{float(v):.6g}" for v in self.elements)
        return (f"MeanOrbit({self.theory.name}, {self.orbit_type.name}, [{values}], "
                f"epoch={self.epoch}, iterations={self.iterations})")


class MeanTheory(abc.ABC):
    """Abstract mean element theory.

    Subclasses set :attr:`name`, :attr:`element_type` and implement
    :meth:`mean_to_osculating`.  The hooks :meth:`pre_check`,
    :meth:`check_elements` and :meth:`post_check` let a theory reject
    orbits outside its validity domain with :class:`OrbitValidityError`.

    Args:
        reference_radius: Radius of the central body sphere. Units: *m*
        mu: Central attraction coefficient. Units: *m^3/s^2*
    """

    name: str = "mean theory"
    element_type: OrbitType = OrbitType.EQUINOCTIAL
    differentiable: bool = False

    def __init__(self, reference_radius: float, mu: float) -> None:
        if reference_radius < 0.0:
            raise ValueError(f"Reference radius must be non-negative, got {reference_radius}")
        if mu <= 0.0:
            raise ValueError(f"Central attraction coefficient must be positive, got {mu}")
        self._reference_radius = float(reference_radius)
        self._mu = float(mu)

    @property
    def reference_radius(self) -> float:
        return self._reference_radius

    @property
    def mu(self) -> float:
        return self._mu

    @property
    def osculating_type(self) -> OrbitType:
        """Parameterization returned by :meth:`mean_to_osculating`."""
        return self.element_type

    # Validity hooks

    def pre_check(self, orbit: Orbit) -> None:
        """Reject an osculating orbit the theory cannot handle.

        Raises:
            OrbitValidityError: If the orbit is not elliptic or lies
                inside the Brillouin sphere of the central body.
        """
        a = float(orbit.a)
        e = float(orbit.e)
        if a <= 0.0 or e >= 1.0:
            raise OrbitValidityError(
                self.name, f"non-elliptic trajectory (a = {a:.3f} m, e = {e:.6f})"
            )
        if a < self.reference_radius:
            raise OrbitValidityError(
                self.name,
                f"trajectory inside the Brillouin sphere (a = {a:.3f} m < {self.reference_radius:.3f} m)",
            )

    def check_elements(self, mean: Array) -> None:
        """Validate mean elements before they are expanded. No-op by default."""

    def post_check(self, mean: Array) -> None:
        """Validate converged mean elements. No-op by default."""

    # Conversion support

    def preprocessing(self, orbit: Orbit) -> Orbit:
        """Express *orbit* with the theory's central attraction coefficient."""
        if orbit.gm == self.mu:
            return orbit
        return orbit.with_gm(self.mu)

    def initialize(self, osculating: Orbit) -> Array:
        """First guess of the mean elements: the osculating elements."""
        return osculating.to_type(self.element_type).elements

    @abc.abstractmethod
    def mean_to_osculating(self, mean: ArrayLike, epoch: Epoch) -> Array:
        """Map mean elements in :attr:`element_type` to osculating elements
        in :attr:`osculating_type` at the same epoch."""

    def osculating_equinoctial(self, mean_eq: ArrayLike, epoch: Epoch) -> Array:
        """Equinoctial mean elements to equinoctial osculating elements."""
        mean = convert_elements(mean_eq, OrbitType.EQUINOCTIAL, self.element_type, self.mu)
        osc = self.mean_to_osculating(mean, epoch)
        return convert_elements(osc, self.osculating_type, OrbitType.EQUINOCTIAL, self.mu)

    def osculating_equinoctial_jacobian(self, mean_eq: ArrayLike, epoch: Epoch) -> Array:
        """Jacobian of :meth:`osculating_equinoctial` with respect to the
        mean elements.

        Raises:
            NotImplementedError: If the theory is not differentiable.
        """
        raise NotImplementedError(f"{self.name} theory is not differentiable")

    def osculating_from_averaged(
        self,
        averaged: AveragedElements,
        epoch: Epoch,
        frame: str = "GCRF",
    ) -> Orbit:
        """Build the osculating orbit described by mean elements.

        Args:
            averaged: Mean elements, in any parameterization.
            epoch: Epoch of the elements.
            frame: Inertial frame label of the result.

        Returns:
            Orbit: Osculating orbit in :attr:`osculating_type`.
        """
        mean = averaged.to_type(self.element_type, self.mu).elements
        self.check_elements(mean)
        osc = self.mean_to_osculating(mean, epoch)
        return Orbit(osc, self.osculating_type, epoch, frame, self.mu)

    def _parameters(self) -> tuple:
        """Values that, together with the class, define the theory."""
        return (self.reference_radius, self.mu)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._parameters() == other._parameters()

    def __hash__(self):
        return hash((type(self), self._parameters()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(reference_radius={self.reference_radius}, mu={self.mu})"


class AnalyticalTheory(MeanTheory):
    """Theory whose mean-to-osculating map is a pure JAX kernel.

    Subclasses implement :meth:`kernel`.  The kernel and the equinoctial
    map built on it are JIT-compiled lazily, on first use, and the
    Jacobian comes from ``jax.jacfwd``.
    """

    differentiable = True

    def __init__(self, reference_radius: float, mu: float) -> None:
        super().__init__(reference_radius, mu)
        self._kernel = jax.jit(self.kernel)
        self._osc_eq = jax.jit(self._osculating_equinoctial)
        self._osc_eq_jac = jax.jit(jax.jacfwd(self._osculating_equinoctial))

    @abc.abstractmethod
    def kernel(self, mean: Array) -> Array:
        """Pure mean-to-osculating map, traceable by JAX."""

    def mean_to_osculating(self, mean: ArrayLike, epoch: Epoch | None = None) -> Array:
        return self._kernel(jnp.asarray(mean, dtype=get_dtype()))

    def _osculating_equinoctial(self, mean_eq: Array) -> Array:
        mean = convert_elements(mean_eq, OrbitType.EQUINOCTIAL, self.element_type, self.mu)
        osc = self.kernel(mean)
        return convert_elements(osc, self.osculating_type, OrbitType.EQUINOCTIAL, self.mu)

    def osculating_equinoctial(self, mean_eq: ArrayLike, epoch: Epoch | None = None) -> Array:
        return self._osc_eq(jnp.asarray(mean_eq, dtype=get_dtype()))

    def osculating_equinoctial_jacobian(self, mean_eq: ArrayLike, epoch: Epoch | None = None) -> Array:
        return self._osc_eq_jac(jnp.asarray(mean_eq, dtype=get_dtype()))
