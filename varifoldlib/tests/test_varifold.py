"""Tests for varifoldlib.varifold: assembly, signed norms and the sign pass."""

import numpy as np
import numpy.testing as npt
import pytest

from varifoldlib import (
    ConfigurationError,
    UnimplementedMethodError,
    UpstreamDataError,
    Varifold,
    VarifoldConfig,
    VarifoldSet,
    compute_signed_curvatures,
    compute_varifolds,
    sign_consistency_pass,
    signed_norms,
)
from varifoldlib.mesh import SurfaceMesh
from varifoldlib.operators.curvature import CurvatureField
from varifoldlib.operators.normals import SampleSet
from varifoldlib.shapes import make_plane, make_sphere, sphere_normals


@pytest.fixture(scope="module")
def sphere():
    return make_sphere(1.0, subdivisions=1)


@pytest.fixture
def strip():
    positions = [[x, y, 0.0] for y in (0.0, 1.0) for x in range(4)]
    faces = [(0, 1, 5, 4), (1, 2, 6, 5), (2, 3, 7, 6)]
    return SurfaceMesh(positions, faces)


class TestComputeVarifolds:
    @pytest.mark.parametrize("method, element", [("tnfc", "faces"),
                                                 ("dnfc", "vertices")])
    def test_lengths(self, sphere, method, element):
        varifolds = compute_varifolds(sphere, VarifoldConfig(0.7, method=method))
        assert isinstance(varifolds, VarifoldSet)
        assert varifolds.element == element
        assert len(varifolds) == sphere.n_elements(element)
        assert varifolds.curvatures.shape == (len(varifolds), 3)
        assert varifolds.valid.all()
        assert varifolds.failures == {}

    def test_dual_vertex_without_faces(self):
        plane = make_plane(2.0, 10)
        positions = np.vstack([plane.positions, [0.05, 0.05, 0.05]])
        mesh = SurfaceMesh(positions, plane.faces)
        with pytest.raises(UpstreamDataError):
            compute_varifolds(mesh, VarifoldConfig(0.35, method="dnfc"))
        # The clean plane stays flat at interior vertex 60
        varifolds = compute_varifolds(plane, VarifoldConfig(0.35, method="dnfc"))
        npt.assert_allclose(varifolds.curvatures[60], 0.0, atol=1e-12)

    def test_corrected(self, sphere):
        normals = sphere_normals(sphere.face_centroids())
        varifolds = compute_varifolds(sphere, VarifoldConfig(0.7, method="cnfc"),
                                      corrected_normals=normals)
        assert len(varifolds) == sphere.n_faces
        npt.assert_allclose(varifolds.normals, normals)

    def test_corrected_without_normals(self, sphere):
        with pytest.raises(ConfigurationError):
            compute_varifolds(sphere, VarifoldConfig(0.7, method="cnfc"))

    @pytest.mark.parametrize("method", ["pot", "vi"])
    def test_unimplemented(self, sphere, method):
        with pytest.raises(UnimplementedMethodError):
            compute_varifolds(sphere, VarifoldConfig(0.7, method=method))

    def test_items(self, sphere):
        varifolds = compute_varifolds(sphere, VarifoldConfig(0.7))
        v = varifolds[3]
        assert isinstance(v, Varifold)
        npt.assert_array_equal(v.position, sphere.face_centroid(3))
        npt.assert_array_equal(v.curvature, varifolds.curvatures[3])
        assert len(list(varifolds)) == sphere.n_faces
        with pytest.raises(ValueError):
            varifolds.curvatures[0, 0] = 1.0
        with pytest.raises(ValueError):
            varifolds.valid[0] = False

    def test_workers(self, sphere):
        serial = compute_varifolds(sphere, VarifoldConfig(0.7))
        threaded = compute_varifolds(sphere, VarifoldConfig(0.7, workers=3))
        npt.assert_array_equal(threaded.curvatures, serial.curvatures)


class TestSignedNorms:
    def test_sign_from_normal(self):
        samples = SampleSet(np.zeros((4, 3)), [[0, 0, 1]] * 4, range(4))
        vectors = np.array([[0, 0, 2.0], [0, 0, -3.0], [1.0, 0, 0],
                            [np.nan, np.nan, np.nan]])
        field = CurvatureField(vectors, np.array([True, True, True, False]))
        H = signed_norms(VarifoldSet(samples, field))
        npt.assert_array_equal(H[:3], [2.0, -3.0, -1.0])
        assert np.isnan(H[3])

    def test_sphere_is_positive(self, sphere):
        config = VarifoldConfig(0.6, distribution="c")
        varifolds = compute_varifolds(sphere, config)
        H = compute_signed_curvatures(varifolds, sphere, config.radius)
        assert np.all(H > 0)
        npt.assert_allclose(H, np.linalg.norm(varifolds.curvatures, axis=1))


class TestSignConsistencyPass:
    def test_whole_ring(self, strip):
        out = sign_consistency_pass([1.0, -1.0, 0.5], strip)
        npt.assert_array_equal(out, [-1.0, 1.0, -0.5])

    def test_radius_limits_ring(self, strip):
        # At radius 0.5 no neighbouring face has a vertex inside the ball
        out = sign_consistency_pass([1.0, -1.0, 0.5], strip, radius=0.5)
        npt.assert_array_equal(out, [1.0, 1.0, 0.5])
        out = sign_consistency_pass([1.0, -1.0, 0.5], strip, radius=1.0)
        npt.assert_array_equal(out, [-1.0, 1.0, -0.5])

    def test_vertices(self, strip):
        values = np.ones(8)
        values[1] = -2.0
        out = sign_consistency_pass(values, strip, element="vertices")
        npt.assert_array_equal(out[1], 2.0)
        npt.assert_array_equal(np.abs(out), np.abs(values))

    def test_isolated_flips(self, sphere):
        rng = np.random.default_rng(1)
        magnitudes = rng.uniform(0.9, 1.1, sphere.n_faces)
        c = sphere.face_centroids()
        far = int(np.argmax(np.linalg.norm(c - c[0], axis=1)))
        values = magnitudes.copy()
        values[[0, far]] *= -1.0
        out = sign_consistency_pass(values, sphere)
        npt.assert_array_equal(out, magnitudes)
        npt.assert_array_equal(sign_consistency_pass(out, sphere), out)

    def test_input_untouched(self, strip):
        values = np.array([1.0, -1.0, 0.5])
        sign_consistency_pass(values, strip)
        npt.assert_array_equal(values, [1.0, -1.0, 0.5])

    def test_nan_neighbours_skipped(self, strip):
        out = sign_consistency_pass([1.0, np.nan, -0.5], strip)
        npt.assert_array_equal(out[[0, 2]], [1.0, 0.5])
        assert np.isnan(out[1])

    def test_length_mismatch(self, strip):
        with pytest.raises(ValueError):
            sign_consistency_pass([1.0, 2.0], strip)
