"""
Coordinate system plug-ins used by the tests.

Concrete systems are not part of the library; these are the kind a user
would write. All conversions are written with jax.numpy so that both the
finite-difference and the autodiff Jacobians are available.

- Cartesian2D <-> Polar:       (x, y) <-> (r, θ)
- Cartesian3D <-> Spherical:   (x, y, z) <-> (r, θ, φ)
- Cartesian2D <-> Skewed:      a constant linear map with a non-symmetric
                               matrix, whose central-difference Jacobian is
                               exact up to rounding
"""
import jax.numpy as jnp
import numpy as np

from diffgeom import CoordinateSystem, Conversion


class Cartesian2D(CoordinateSystem):
    dimension = 2


class Polar(CoordinateSystem):
    dimension = 2

    @classmethod
    def small(cls, point):
        # scale the step to the radius so the angle stays well resolved
        return 1e-4 * max(1.0, abs(point[0]))


class Skewed(CoordinateSystem):
    dimension = 2


class Cartesian3D(CoordinateSystem):
    dimension = 3


class Spherical(CoordinateSystem):
    dimension = 3


class CartesianToPolar(Conversion):
    source = Cartesian2D
    target = Polar

    def convert_coords(self, x):
        return jnp.array([jnp.hypot(x[0], x[1]), jnp.arctan2(x[1], x[0])])


class PolarToCartesian(Conversion):
    source = Polar
    target = Cartesian2D

    def convert_coords(self, q):
        r, theta = q[0], q[1]
        return jnp.array([r * jnp.cos(theta), r * jnp.sin(theta)])


SKEW = np.array([[2.0, 1.0], [0.5, 3.0]])


class CartesianToSkewed(Conversion):
    source = Cartesian2D
    target = Skewed

    def convert_coords(self, x):
        return jnp.asarray(SKEW) @ x


class SkewedToCartesian(Conversion):
    source = Skewed
    target = Cartesian2D

    def convert_coords(self, y):
        return jnp.linalg.solve(jnp.asarray(SKEW), y)


class CartesianToSpherical(Conversion):
    source = Cartesian3D
    target = Spherical

    def convert_coords(self, x):
        r = jnp.sqrt(x[0] ** 2 + x[1] ** 2 + x[2] ** 2)
        theta = jnp.arccos(x[2] / r)
        phi = jnp.arctan2(x[1], x[0])
        return jnp.array([r, theta, phi])


class SphericalToCartesian(Conversion):
    source = Spherical
    target = Cartesian3D

    def convert_coords(self, q):
        r, theta, phi = q[0], q[1], q[2]
        return jnp.array([
            r * jnp.sin(theta) * jnp.cos(phi),
            r * jnp.sin(theta) * jnp.sin(phi),
            r * jnp.cos(theta),
        ])
