"""Tests for configuration parsing and the error taxonomy."""

import pytest

from varifoldlib import (
    ConfigurationError,
    DegenerateNeighborhoodError,
    DistributionType,
    Method,
    UnimplementedMethodError,
    UpstreamDataError,
    VarifoldConfig,
    VarifoldError,
    parse_distribution,
    parse_method,
)


class TestParseDistribution:
    @pytest.mark.parametrize("token, expected", [
        ("fd", DistributionType.FLAT_DISC),
        ("c", DistributionType.CONE),
        ("hs", DistributionType.HALF_SPHERE),
        ("FLAT_DISC", DistributionType.FLAT_DISC),
        ("half_sphere", DistributionType.HALF_SPHERE),
        (DistributionType.CONE, DistributionType.CONE),
    ])
    def test_known_tokens(self, token, expected):
        assert parse_distribution(token) is expected

    @pytest.mark.parametrize("token", ["", "l", "exp", "sphere", None, 3])
    def test_unknown_tokens_raise(self, token):
        # No silent fallback to the half sphere
        with pytest.raises(ConfigurationError, match="distribution"):
            parse_distribution(token)


class TestParseMethod:
    @pytest.mark.parametrize("token, expected", [
        ("tnfc", Method.TRIVIAL_NORMAL_FACE_CENTROID),
        ("dnfc", Method.DUAL_NORMAL_FACE_CENTROID),
        ("cnfc", Method.CORRECTED_NORMAL_FACE_CENTROID),
        ("pot", Method.PROBABILISTIC_OF_TRIVIALS),
        ("vi", Method.VERTEX_INTERPOLATION),
        ("vertex_interpolation", Method.VERTEX_INTERPOLATION),
    ])
    def test_known_tokens(self, token, expected):
        assert parse_method(token) is expected

    @pytest.mark.parametrize("token", ["", "trivial", "nfc", None])
    def test_unknown_tokens_raise(self, token):
        with pytest.raises(ConfigurationError, match="method"):
            parse_method(token)

    def test_elements(self):
        assert Method.TRIVIAL_NORMAL_FACE_CENTROID.element == "faces"
        assert Method.CORRECTED_NORMAL_FACE_CENTROID.element == "faces"
        assert Method.DUAL_NORMAL_FACE_CENTROID.element == "vertices"

    def test_str_is_token(self):
        assert str(Method.DUAL_NORMAL_FACE_CENTROID) == "dnfc"
        assert str(DistributionType.CONE) == "c"


class TestVarifoldConfig:
    def test_defaults(self):
        config = VarifoldConfig()
        assert config.radius == 1.0
        assert config.distribution is DistributionType.HALF_SPHERE
        assert config.method is Method.TRIVIAL_NORMAL_FACE_CENTROID
        assert config.neighborhood == "brute-force"
        assert config.workers is None

    def test_tokens_are_parsed(self):
        config = VarifoldConfig(radius="0.25", distribution="fd", method="cnfc",
                                neighborhood="kdtree", workers=2)
        assert config.radius == 0.25
        assert config.distribution is DistributionType.FLAT_DISC
        assert config.method is Method.CORRECTED_NORMAL_FACE_CENTROID

    @pytest.mark.parametrize("radius", [0, -0.5, float("nan"), float("inf"), "abc"])
    def test_bad_radius(self, radius):
        with pytest.raises(ConfigurationError, match="Radius"):
            VarifoldConfig(radius=radius)

    def test_bad_backend(self):
        with pytest.raises(ConfigurationError, match="neighborhood"):
            VarifoldConfig(neighborhood="octree")

    def test_bad_workers(self):
        with pytest.raises(ConfigurationError, match="workers"):
            VarifoldConfig(workers=0)


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(ConfigurationError, VarifoldError)
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(UpstreamDataError, RuntimeError)
        assert issubclass(DegenerateNeighborhoodError, ArithmeticError)
        assert issubclass(UnimplementedMethodError, NotImplementedError)

    def test_degenerate_context(self):
        e = DegenerateNeighborhoodError(12, 0.5, Method.TRIVIAL_NORMAL_FACE_CENTROID)
        assert e.index == 12
        assert e.radius == 0.5
        assert "element 12" in str(e)
        assert "radius=0.5" in str(e)
        assert "tnfc" in str(e)

    def test_unimplemented_context(self):
        e = UnimplementedMethodError(Method.PROBABILISTIC_OF_TRIVIALS)
        assert e.method is Method.PROBABILISTIC_OF_TRIVIALS
        assert "pot" in str(e)
