import numpy as np
import pytest

import coils
from coils import (CM_TO_M, coil_current, coil_voltage, helmholtz_centers, helmholtz_field,
                   gradient_step, coil_field_with_grad, compute_helmholtz_field,
                   compute_single_coil_field, helmholtz_field_map, single_coil_field_map,
                   helmholtz_uniformity)
from inputs import ValidationError
from magnetics import MU_0, DomainError, loop_field


class TestHelmholtzAssembly:

    def test_centers_are_one_radius_apart(self):
        left, right = helmholtz_centers(0.1)
        assert left == pytest.approx(-0.05)
        assert right == pytest.approx(0.05)
        assert right - left == pytest.approx(0.1)

    @pytest.mark.parametrize("point", [
        (0.0, 0.0, 0.0),
        (0.02, 0.03, -0.01),
        (-0.12, 0.0, 0.08),
        (0.3, 0.2, 0.1),
    ])
    def test_superposition_is_exact(self, point):
        R, I, N = 0.1, 1.5, 40
        B = helmholtz_field(point, R, I, N)
        expected = loop_field(point, R, I, N, -R / 2) + loop_field(point, R, I, N, R / 2)
        np.testing.assert_allclose(B, expected, rtol=1e-15, atol=0)

    def test_center_matches_helmholtz_formula(self):
        # R=10 cm, N=100, V=10, Omega=10 -> I=1 A
        B = compute_helmholtz_field(0, 0, 0, 10, 10, 10, 100)
        expected = MU_0 * 100 * 1.0 * (4 / 5)**1.5 / 0.1
        assert expected == pytest.approx(9.0e-4, rel=0.01)
        assert B[0] == pytest.approx(expected, rel=0.01)
        assert B[0] == pytest.approx(expected, rel=1e-12)
        assert B[1] == 0.0
        assert B[2] == 0.0

    def test_doubling_voltage_doubles_field(self):
        B1 = compute_helmholtz_field(2, 3, 1, 10, 10, 10, 100)
        B2 = compute_helmholtz_field(2, 3, 1, 10, 20, 10, 100)
        assert np.linalg.norm(B2) == pytest.approx(2 * np.linalg.norm(B1), rel=1e-12)
        np.testing.assert_allclose(B2, 2 * B1, rtol=1e-12)

    def test_field_scales_with_turns(self):
        B1 = compute_helmholtz_field(-3, 1, 4, 8, 5, 2, 10)
        B3 = compute_helmholtz_field(-3, 1, 4, 8, 5, 2, 30)
        assert np.linalg.norm(B3) == pytest.approx(3 * np.linalg.norm(B1), rel=1e-12)

    def test_halving_resistance_doubles_field(self):
        B1 = compute_helmholtz_field(1, 1, 1, 10, 10, 10, 100)
        B2 = compute_helmholtz_field(1, 1, 1, 10, 10, 5, 100)
        np.testing.assert_allclose(B2, 2 * B1, rtol=1e-12)

    def test_units_are_centimeters(self):
        B = compute_helmholtz_field(2, 3, 0, 10, 10, 10, 100)
        expected = helmholtz_field((0.02, 0.03, 0.0), 0.1, 1.0, 100)
        np.testing.assert_allclose(B, expected, rtol=1e-12)

    def test_point_on_winding(self):
        R = 0.1
        with pytest.raises(DomainError):
            helmholtz_field((R / 2, R, 0.0), R, 1.0, 1)


class TestGradientEstimator:

    def test_step_size(self):
        assert gradient_step(0.0) == 1e-5
        assert gradient_step(0.05) == 1e-5
        assert gradient_step(1.0) == pytest.approx(1e-4)

    def test_result_keys(self):
        result = coil_field_with_grad((0.01, 0.02, 0.0), 0.05, 1.0, 10)
        assert set(result) == {"B", "B_mag", "grad"}
        assert result["B"].shape == (3,)
        assert result["grad"].shape == (3,)
        assert result["B_mag"] == pytest.approx(np.linalg.norm(result["B"]))

    def test_on_axis_gradient_matches_derivative(self):
        R, I, N, x = 0.05, 1.0, 20, 0.03
        result = coil_field_with_grad((x, 0.0, 0.0), R, I, N)
        expected = -3 * MU_0 * I * N * R**2 * x / (2 * (R**2 + x**2)**2.5)
        assert result["grad"][0] == pytest.approx(expected, rel=1e-6)
        assert result["grad"][1] == pytest.approx(0.0, abs=1e-12)
        assert result["grad"][2] == pytest.approx(0.0, abs=1e-12)

    def test_gradient_changes_sign_across_center(self):
        before = compute_single_coil_field(-2, 0, 0, 5, 1.0, 50)
        at_center = compute_single_coil_field(0, 0, 0, 5, 1.0, 50)
        after = compute_single_coil_field(2, 0, 0, 5, 1.0, 50)
        assert before["grad"][0] > 0
        assert after["grad"][0] < 0
        assert abs(at_center["grad"][0]) < 1e-9 * abs(before["grad"][0])

    def test_gradient_approaches_zero_near_center(self):
        grads = [abs(compute_single_coil_field(x, 0, 0, 5, 1.0, 50)["grad"][0])
                 for x in (2.0, 1.0, 0.5, 0.1)]
        assert grads == sorted(grads, reverse=True)

    def test_off_axis_gradient_against_wide_difference(self):
        R, I, N = 0.1, 2.0, 30
        point = np.array([0.02, 0.04, 0.03])
        result = coil_field_with_grad(point, R, I, N)
        h = 1e-6
        for k in range(3):
            step = np.zeros(3)
            step[k] = h
            plus = np.linalg.norm(loop_field(point + step, R, I, N))
            minus = np.linalg.norm(loop_field(point - step, R, I, N))
            assert result["grad"][k] == pytest.approx((plus - minus) / (2 * h), rel=1e-4, abs=1e-10)

    def test_stencil_on_winding_gives_non_finite_component(self):
        # h = 1e-5 for R = 5 cm, so x - h lands exactly on the wire
        result = coil_field_with_grad((1e-5, 0.05, 0.0), 0.05, 1.0, 10)
        assert np.all(np.isfinite(result["B"]))
        assert not np.isfinite(result["grad"][0])
        assert np.isfinite(result["grad"][1])

    @pytest.mark.parametrize("x_cm, y_cm, axis", [
        (0.001, 5, 0),  # one step from the wire along the axis
        (0, 4.999, 1),  # one step inside the wire radially
    ])
    def test_single_coil_one_step_from_winding(self, x_cm, y_cm, axis):
        result = compute_single_coil_field(x_cm, y_cm, 0, 5, 1.0, 10)
        assert np.all(np.isfinite(result["B"]))
        assert np.isfinite(result["B_mag"])
        assert not np.isfinite(result["grad"][axis])
        assert np.isfinite(result["grad"][2])

    def test_single_coil_linear_in_current(self):
        r1 = compute_single_coil_field(1, 2, 3, 5, 1.0, 10)
        r2 = compute_single_coil_field(1, 2, 3, 5, 2.0, 10)
        assert r2["B_mag"] == pytest.approx(2 * r1["B_mag"], rel=1e-12)
        np.testing.assert_allclose(r2["grad"], 2 * r1["grad"], rtol=1e-9)

    def test_single_coil_linear_in_turns(self):
        r1 = compute_single_coil_field(1, 2, 3, 5, 1.0, 10)
        r4 = compute_single_coil_field(1, 2, 3, 5, 1.0, 40)
        assert r4["B_mag"] == pytest.approx(4 * r1["B_mag"], rel=1e-12)


class TestValidation:

    @pytest.mark.parametrize("R_cm, V, Omega, N", [
        (0, 10, 10, 100),
        (-5, 10, 10, 100),
        (10, 10, 0, 100),
        (10, 10, -1, 100),
        (10, 10, 10, 0),
        (10, 10, 10, -1),
        (10, 10, 10, 2.5),
        ("abc", 10, 10, 100),
        (10, "ten", 10, 100),
        (10, 10, 10, None),
        (float("nan"), 10, 10, 100),
        (10, float("inf"), 10, 100),
    ])
    def test_helmholtz_rejects_before_computing(self, monkeypatch, R_cm, V, Omega, N):
        def fail(*args, **kwargs):
            raise AssertionError("field computed for invalid input")

        monkeypatch.setattr(coils, "loop_field", fail)
        with pytest.raises(ValidationError):
            compute_helmholtz_field(0, 0, 0, R_cm, V, Omega, N)

    @pytest.mark.parametrize("R_cm, I, N", [
        (0, 1, 10),
        (-1, 1, 10),
        (5, 1, 0),
        (5, 1, -1),
        (5, "", 10),
        ("x", 1, 10),
    ])
    def test_single_coil_rejects_before_computing(self, monkeypatch, R_cm, I, N):
        def fail(*args, **kwargs):
            raise AssertionError("field computed for invalid input")

        monkeypatch.setattr(coils, "loop_field", fail)
        with pytest.raises(ValidationError):
            compute_single_coil_field(0, 0, 0, R_cm, I, N)

    def test_non_numeric_position_rejected(self):
        with pytest.raises(ValidationError):
            compute_single_coil_field("left", 0, 0, 5, 1, 10)

    def test_point_on_single_coil_winding_rejected(self):
        with pytest.raises(ValidationError):
            compute_single_coil_field(0, 10, 0, 10, 1.0, 5)

    def test_string_inputs_accepted(self):
        B = compute_helmholtz_field("0", "0", "0", "10", "10", "10", "100")
        np.testing.assert_allclose(B, compute_helmholtz_field(0, 0, 0, 10, 10, 10, 100))


class TestDerivedQuantities:

    def test_ohms_law(self):
        assert coil_current(10.0, 4.0) == pytest.approx(2.5)
        assert coil_voltage(2.5, 4.0) == pytest.approx(10.0)

    def test_cm_conversion(self):
        assert CM_TO_M == 1e-2

    def test_helmholtz_map(self):
        field_map = helmholtz_field_map(10, 10, 10, 100, num_points=9)
        assert field_map["B_mag"].shape == (9, 9)
        assert field_map["x_grid"][-1] == pytest.approx(0.15)
        assert np.nanmax(field_map["B_mag"]) > 0

    def test_single_coil_map(self):
        field_map = single_coil_field_map(5, 1.0, 10, extent=2.0, num_points=6)
        assert field_map["rho_grid"][-1] == pytest.approx(0.1)
        assert field_map["B_axial"].shape == (6, 6)

    def test_map_validates_inputs(self):
        with pytest.raises(ValidationError):
            helmholtz_field_map(-10, 10, 10, 100)

    def test_helmholtz_center_is_uniform(self):
        ripple = helmholtz_uniformity(10, 10, 10, 100)
        assert 0 < ripple < 0.01
        assert helmholtz_uniformity(10, 10, 10, 100, span_fraction=0.6) > ripple
