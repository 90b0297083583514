"""Tests for varifoldlib.operators.curvature.

On a sphere of radius rho the estimator returns, to leading order in
radius / rho, the outward normal times E_w[t] / rho, where E_w[t] is the
kernel-weighted mean of the normalised distance over a disc:
2/3 (flat disc), 1/2 (cone) and 8/15 (half sphere).
"""

import logging

import numpy as np
import numpy.testing as npt
import pytest

from varifoldlib import DegenerateNeighborhoodError, DistributionType
from varifoldlib.operators.curvature import (
    CurvatureField,
    LocalCurvatureEstimator,
    projection,
)
from varifoldlib.operators.neighborhood import make_neighborhood
from varifoldlib.operators.normals import SampleSet, TrivialNormalSource
from varifoldlib.shapes import make_plane, make_sphere

SPHERE_CONSTANTS = {
    DistributionType.FLAT_DISC: 2.0 / 3.0,
    DistributionType.CONE: 0.5,
    DistributionType.HALF_SPHERE: 8.0 / 15.0,
}


def fibonacci_sphere(n, radius=1.0):
    """Near-uniform samples on a sphere with exact outward unit normals."""
    i = np.arange(n) + 0.5
    z = 1.0 - 2.0 * i / n
    phi = np.pi * (1.0 + np.sqrt(5.0)) * i
    rxy = np.sqrt(1.0 - z * z)
    normals = np.column_stack([rxy * np.cos(phi), rxy * np.sin(phi), z])
    return SampleSet(radius * normals, normals, np.arange(n))


def lattice_samples(n=10, spacing=0.1, normal=(0.0, 0.0, 2.0)):
    """Square lattice in z = 0 with (2n+1)^2 points; index of the centre."""
    t = spacing * np.arange(-n, n + 1)
    X, Y = np.meshgrid(t, t, indexing="ij")
    positions = np.column_stack([X.ravel(), Y.ravel(), np.zeros(X.size)])
    normals = np.tile(normal, (len(positions), 1))
    center = (2 * n + 1) * n + n
    return SampleSet(positions, normals, np.arange(len(positions))), center


class TestProjection:
    def test_orthogonal_to_normal(self):
        rng = np.random.default_rng(0)
        v = rng.normal(size=(20, 3))
        n = rng.normal(size=(20, 3))
        p = projection(v, n)
        npt.assert_allclose(np.sum(p * n, axis=1), 0.0, atol=1e-12)
        npt.assert_allclose(projection(p, n), p, atol=1e-12)

    def test_normal_length_irrelevant(self):
        v = np.array([1.0, 2.0, 3.0])
        npt.assert_allclose(projection(v, [0, 0, 1.0]), [1.0, 2.0, 0.0])
        npt.assert_allclose(projection(v, [0, 0, -7.0]), [1.0, 2.0, 0.0])

    def test_zero_normal(self):
        v = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        n = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        npt.assert_allclose(projection(v, n), [[1.0, 2.0, 3.0], [0.0, 5.0, 6.0]])


class TestFlatPatch:
    @pytest.mark.parametrize("distribution", list(DistributionType))
    def test_symmetric_lattice(self, distribution):
        samples, center = lattice_samples()
        est = LocalCurvatureEstimator(samples, 0.35, distribution)
        npt.assert_allclose(est.estimate(center), 0.0, atol=1e-12)

    @pytest.mark.parametrize("distribution", list(DistributionType))
    def test_quad_plane_interior(self, distribution):
        mesh = make_plane(2.0, 20)
        samples = TrivialNormalSource()(mesh)
        field = LocalCurvatureEstimator(samples, 0.35, distribution).estimate_all()
        c = samples.positions
        interior = (np.abs(c[:, 0]) < 0.7) & (np.abs(c[:, 1]) < 0.7)
        assert interior.sum() == 196
        assert np.all(np.linalg.norm(field.vectors[interior], axis=1) < 1e-9)
        # The curvature vector of a flat patch always lies in the plane
        npt.assert_allclose(field.vectors[:, 2], 0.0, atol=1e-12)

    def test_border_vector_points_inward(self):
        samples, _ = lattice_samples()
        est = LocalCurvatureEstimator(samples, 0.35, "hs")
        # Corner at (-1, -1): every neighbour lies towards +x, +y
        k = est.estimate(0)
        assert k[0] < 0 and k[1] < 0
        npt.assert_allclose(k[0], k[1])


class TestSphere:
    @pytest.mark.parametrize("distribution", list(DistributionType))
    def test_uniform_samples(self, distribution):
        samples = fibonacci_sphere(4000)
        field = LocalCurvatureEstimator(samples, 0.3, distribution,
                                        neighborhood="kdtree").estimate_all()
        assert field.valid.all()
        k = field.vectors
        normal_part = np.sum(k * samples.normals, axis=1)
        npt.assert_allclose(normal_part.mean(), SPHERE_CONSTANTS[distribution],
                            rtol=0.1)
        cos = normal_part / np.linalg.norm(k, axis=1)
        assert cos.min() > 0.9

    @pytest.mark.parametrize("distribution", list(DistributionType))
    def test_icosphere_faces(self, distribution):
        mesh = make_sphere(1.0, subdivisions=4)
        samples = TrivialNormalSource()(mesh)
        field = LocalCurvatureEstimator(samples, 0.3, distribution,
                                        neighborhood="kdtree").estimate_all()
        exact = samples.positions / np.linalg.norm(samples.positions, axis=1,
                                                    keepdims=True)
        normal_part = np.sum(field.vectors * exact, axis=1)
        assert np.all(normal_part > 0)
        npt.assert_allclose(normal_part.mean(), SPHERE_CONSTANTS[distribution],
                            rtol=0.15)

    @pytest.mark.parametrize("scale", [0.5, 2.0])
    def test_scaling(self, scale):
        samples = fibonacci_sphere(1000)
        scaled = SampleSet(scale * samples.positions, samples.normals,
                           samples.indices)
        k = LocalCurvatureEstimator(samples, 0.5, "c").estimate_all().vectors
        ks = LocalCurvatureEstimator(scaled, 0.5 * scale, "c").estimate_all().vectors
        npt.assert_allclose(ks, k / scale, rtol=1e-12, atol=1e-14)

    def test_normal_length_irrelevant(self):
        samples = fibonacci_sphere(500)
        longer = SampleSet(samples.positions, 3.0 * samples.normals,
                           samples.indices)
        k = LocalCurvatureEstimator(samples, 0.5).estimate(17)
        npt.assert_allclose(LocalCurvatureEstimator(longer, 0.5).estimate(17), k,
                            rtol=1e-12, atol=1e-14)


class TestDegenerate:
    def test_isolated_samples(self, caplog):
        samples = SampleSet([[0, 0, 0], [10, 0, 0]], [[0, 0, 1]] * 2, [0, 1])
        est = LocalCurvatureEstimator(samples, 1.0)
        with pytest.raises(DegenerateNeighborhoodError) as info:
            est.estimate(0)
        assert info.value.index == 0
        assert info.value.radius == 1.0

        with caplog.at_level(logging.WARNING):
            field = est.estimate_all()
        assert isinstance(field, CurvatureField)
        assert field.n_failed == 2
        assert list(field.failures) == [0, 1]
        assert not field.valid.any()
        assert np.all(np.isnan(field.vectors))
        assert "no weighted neighbour" in caplog.text

    def test_partial_failure(self):
        samples = SampleSet([[0, 0, 0], [0.1, 0, 0], [5, 0, 0]],
                            [[0, 0, 1]] * 3, [0, 1, 2])
        field = LocalCurvatureEstimator(samples, 1.0, "fd").estimate_all()
        npt.assert_array_equal(field.valid, [True, True, False])
        assert list(field.failures) == [2]
        # A single neighbour at +x pulls the vector towards -x
        npt.assert_allclose(field.vectors[0], [-1.0, 0.0, 0.0])
        npt.assert_allclose(field.vectors[1], [1.0, 0.0, 0.0])

    def test_coincident_samples(self):
        samples = SampleSet([[1, 1, 1], [1, 1, 1]], [[0, 0, 1]] * 2, [0, 1])
        with pytest.raises(DegenerateNeighborhoodError):
            LocalCurvatureEstimator(samples, 1.0).estimate(1)

    def test_tiny_radius(self):
        samples = TrivialNormalSource()(make_plane(1.0, 4))
        field = LocalCurvatureEstimator(samples, 1e-3).estimate_all()
        assert field.n_failed == len(samples)


class TestBatch:
    @pytest.fixture(scope="class")
    def samples(self):
        return TrivialNormalSource()(make_sphere(1.0, subdivisions=2))

    def test_workers_match_serial(self, samples):
        est = LocalCurvatureEstimator(samples, 0.5, "c")
        serial = est.estimate_all()
        threaded = est.estimate_all(workers=4)
        npt.assert_array_equal(threaded.vectors, serial.vectors)
        npt.assert_array_equal(threaded.valid, serial.valid)

    def test_backends_agree(self, samples):
        brute = LocalCurvatureEstimator(samples, 0.5, neighborhood="brute-force")
        tree = LocalCurvatureEstimator(samples, 0.5, neighborhood="kdtree")
        npt.assert_allclose(tree.estimate_all().vectors,
                            brute.estimate_all().vectors, rtol=1e-12)

    def test_estimate_all_matches_estimate(self, samples):
        est = LocalCurvatureEstimator(samples, 0.5)
        field = est.estimate_all()
        for f in (0, 7, len(samples) - 1):
            npt.assert_allclose(field.vectors[f], est.estimate(f))

    def test_prebuilt_neighborhood(self, samples):
        nq = make_neighborhood(samples.positions, "kdtree")
        est = LocalCurvatureEstimator(samples, 0.5, neighborhood=nq)
        assert est.neighborhood is nq
        assert len(est) == len(samples)
        with pytest.raises(ValueError):
            LocalCurvatureEstimator(samples, 0.5,
                                    neighborhood=make_neighborhood(np.zeros((3, 3))))

    def test_invalid_arguments(self, samples):
        with pytest.raises(ValueError):
            LocalCurvatureEstimator(samples, -1.0)
        with pytest.raises(ValueError):
            LocalCurvatureEstimator(samples, 0.5, distribution="gauss")
