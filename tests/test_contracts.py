"""Tests for configuration and contract types."""
import numpy as np
import pytest

from hull_overlap import (
    ConfigurationError,
    DegenerateGeometryError,
    HullMethod,
    HullOverlapError,
    LineSelector,
    OverlapConfig,
    ProjectionPlane,
    RetentionPolicy,
)


class TestHullMethod:
    """Parsing of hull method selectors."""

    @pytest.mark.parametrize("label, expected", [
        ("convex_chain", HullMethod.CONVEX_CHAIN),
        ("CONCAVE", HullMethod.CONCAVE),
        ("Andrew's", HullMethod.CONVEX_CHAIN),
        ("PCL ConcaveHull", HullMethod.CONCAVE),
        (HullMethod.CONCAVE, HullMethod.CONCAVE),
    ])
    def test_known_labels(self, label, expected):
        assert HullMethod.parse(label) is expected

    @pytest.mark.parametrize("label", ["graham", "", None, 3])
    def test_unknown_labels(self, label):
        with pytest.raises(ConfigurationError):
            HullMethod.parse(label)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            HullMethod.parse("graham")
        assert issubclass(ConfigurationError, HullOverlapError)


class TestOverlapConfig:
    """Validation in OverlapConfig.__post_init__."""

    def test_defaults(self):
        config = OverlapConfig()
        assert config.hull_method is HullMethod.CONVEX_CHAIN
        assert config.retention is RetentionPolicy.FULL
        assert config.parallel is False

    def test_string_fields_are_parsed(self):
        config = OverlapConfig(hull_method="concave", retention="minimal")
        assert config.hull_method is HullMethod.CONCAVE
        assert config.retention is RetentionPolicy.MINIMAL

    def test_unknown_method_rejected(self):
        with pytest.raises(ConfigurationError):
            OverlapConfig(hull_method="alpha_shape")

    def test_negative_alpha_rejected_for_concave(self):
        with pytest.raises(ConfigurationError):
            OverlapConfig(hull_method=HullMethod.CONCAVE, alpha_b=-0.1)
        with pytest.raises(ConfigurationError):
            OverlapConfig(hull_method=HullMethod.CONCAVE, alpha_a=float("nan"))

    def test_alpha_above_one_accepted_for_concave(self):
        config = OverlapConfig(hull_method=HullMethod.CONCAVE, alpha_a=1.5)
        assert config.alpha_for(LineSelector.A) == pytest.approx(1.5)

    def test_no_boundary_margin_by_default(self):
        assert OverlapConfig().boundary_tolerance == 0.0

    def test_alpha_ignored_for_convex(self):
        config = OverlapConfig(alpha_a=5.0)
        assert config.alpha_for(LineSelector.A) == pytest.approx(5.0)

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ConfigurationError):
            OverlapConfig(boundary_tolerance=-1.0)

    def test_alpha_per_line(self):
        config = OverlapConfig(hull_method="concave", alpha_a=0.2, alpha_b=0.7)
        assert config.alpha_for(LineSelector.A) == pytest.approx(0.2)
        assert config.alpha_for(LineSelector.B) == pytest.approx(0.7)


class TestRetentionPolicy:
    def test_from_bool(self):
        assert RetentionPolicy.parse(True) is RetentionPolicy.FULL
        assert RetentionPolicy.parse(False) is RetentionPolicy.MINIMAL

    def test_unknown(self):
        with pytest.raises(ConfigurationError):
            RetentionPolicy.parse("some")


class TestProjectionPlane:
    """Plane coefficient validation."""

    def test_normal(self):
        plane = ProjectionPlane(1, 2, 3, 4)
        np.testing.assert_allclose(plane.normal, [1.0, 2.0, 3.0])
        assert plane.coefficients == (1.0, 2.0, 3.0, 4.0)

    def test_zero_normal_rejected(self):
        with pytest.raises(DegenerateGeometryError):
            ProjectionPlane(0.0, 0.0, 0.0, 1.0)

    def test_non_finite_rejected(self):
        with pytest.raises(DegenerateGeometryError):
            ProjectionPlane(0.0, 0.0, float("nan"), 1.0)

    def test_from_sequence(self):
        plane = ProjectionPlane.from_coefficients((0, 0, 1, -2))
        assert plane.d == pytest.approx(-2.0)
        assert ProjectionPlane.from_coefficients(plane) is plane

    def test_wrong_coefficient_count(self):
        with pytest.raises(DegenerateGeometryError):
            ProjectionPlane.from_coefficients((0, 0, 1))


class TestLineSelector:
    @pytest.mark.parametrize("value, expected", [
        (0, LineSelector.A),
        (1, LineSelector.B),
        (np.int64(1), LineSelector.B),
        (LineSelector.A, LineSelector.A),
    ])
    def test_valid(self, value, expected):
        assert LineSelector.coerce(value) is expected

    @pytest.mark.parametrize("value", [2, -1, True, "A", None, 0.0])
    def test_invalid(self, value):
        assert LineSelector.coerce(value) is None
