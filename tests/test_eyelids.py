import json

import numpy as np
import pytest

from hough import eyelids
from hough.eyelids import DualParabolaEyelidsLocation, find_eyelids
from hough.settings import AxisGrid, EyelidFinderConfig, HoughSettings

IRIS_CENTER = (100.0, 100.0)
IRIS_RADIUS = 40.0
# [a, h, k, theta]
TRUE_UPPER = (0.4 / IRIS_RADIUS, 100.0, 100.0 - 0.6 * IRIS_RADIUS, 0.0)
TRUE_LOWER = (-0.3 / IRIS_RADIUS, 100.0, 100.0 + 0.8 * IRIS_RADIUS, 0.0)


def synthetic_eye(height=200, width=200, skin=200, eye=60):
    """Dark eye opening between two eyelid parabolas on bright skin."""
    ys, xs = np.mgrid[0:height, 0:width].astype(float)
    a_u, h_u, k_u, _ = TRUE_UPPER
    a_l, h_l, k_l, _ = TRUE_LOWER
    upper = a_u * (xs - h_u) ** 2 + k_u
    lower = a_l * (xs - h_l) ** 2 + k_l
    opening = (ys > upper) & (ys < lower)
    return np.where(opening, eye, skin).astype(np.uint8)


def small_settings(**kwargs):
    config = EyelidFinderConfig(
        curvature=AxisGrid(min=1, step=1, count=8, scale=0.1),
        vertex_x=AxisGrid(min=-2, step=1, count=5, scale=0.1),
        vertex_y=AxisGrid(min=2, step=1, count=11, scale=0.1),
        rotation=AxisGrid(min=-1, step=1, count=3, scale=np.pi / 36),
    )
    return HoughSettings(eyelid_finder=config, **kwargs)


class TestDualParabolaEyelidsLocation:
    def test_json_round_trip(self):
        location = DualParabolaEyelidsLocation(upper=TRUE_UPPER, lower=TRUE_LOWER)
        data = json.loads(json.dumps(location.to_dict()))
        assert data["type"] == "dual_parabola"
        assert DualParabolaEyelidsLocation.from_dict(data) == location

    def test_rejects_other_types(self):
        with pytest.raises(ValueError):
            DualParabolaEyelidsLocation.from_dict(
                {"type": "ellipse", "upper_eyelid": [], "lower_eyelid": []}
            )

    def test_rejects_wrong_parameter_count(self):
        with pytest.raises(ValueError):
            DualParabolaEyelidsLocation.from_dict(
                {
                    "type": "dual_parabola",
                    "upper_eyelid": [1.0, 2.0, 3.0],
                    "lower_eyelid": list(TRUE_LOWER),
                }
            )

    def test_boundary_points(self):
        location = DualParabolaEyelidsLocation(upper=TRUE_UPPER, lower=TRUE_LOWER)
        points = location.upper_points([90.0, 100.0, 110.0])
        assert points.shape == (3, 2)
        assert points[1, 0] == pytest.approx(100.0)
        assert points[1, 1] == pytest.approx(TRUE_UPPER[2])
        lower = location.lower_points([100.0])
        assert lower[0, 1] == pytest.approx(TRUE_LOWER[2])


class TestSearchSetup:
    def test_t_range_is_clipped_to_image(self):
        t_range = eyelids.eyelid_t_range(10.0, 20.0, num_cols=50, t_extent=1.5)
        assert t_range[0] == 0.0
        assert t_range[-1] == 40.0

    def test_masks_split_at_iris_center(self):
        upper = eyelids.eyelid_search_mask(200, 150, 100.0, eyelids.UPPER)
        lower = eyelids.eyelid_search_mask(200, 150, 100.0, eyelids.LOWER)
        assert upper.can_vote(10, 99)
        assert not upper.can_vote(10, 100)
        assert not lower.can_vote(10, 100)
        assert lower.can_vote(10, 101)
        assert not lower.can_vote(150, 150)

    def test_curvature_sign(self):
        settings = small_settings()
        upper = eyelids.configure_eyelid_transform(
            IRIS_CENTER, IRIS_RADIUS, eyelids.UPPER, settings
        )
        lower = eyelids.configure_eyelid_transform(
            IRIS_CENTER, IRIS_RADIUS, eyelids.LOWER, settings
        )
        assert np.all(upper.param_ranges[eyelids.INDEX_A] > 0)
        assert np.all(lower.param_ranges[eyelids.INDEX_A] < 0)
        assert np.all(upper.param_ranges[eyelids.INDEX_K] < IRIS_CENTER[1])
        assert np.all(lower.param_ranges[eyelids.INDEX_K] > IRIS_CENTER[1])
        assert upper.num_params == eyelids.eyelid_shape().num_params

    def test_engine_flags_follow_settings(self):
        settings = small_settings(
            max_candidates=5, normalized=True, debug=True, debug_dir="/tmp/eyelids"
        )
        transform = eyelids.configure_eyelid_transform(
            IRIS_CENTER, IRIS_RADIUS, eyelids.UPPER, settings
        )
        assert transform.normalized
        assert transform.debug
        assert transform.debug_dir == "/tmp/eyelids"
        assert transform.max_candidates == 1
        assert settings.max_candidates == 5


class TestFindEyelids:
    def test_recovers_synthetic_eyelids(self):
        image = synthetic_eye()
        location = find_eyelids(
            image, IRIS_CENTER, IRIS_RADIUS, settings=small_settings()
        )

        steps = (0.1 / IRIS_RADIUS, 0.1 * IRIS_RADIUS, 0.1 * IRIS_RADIUS, np.pi / 36)
        for found, true_params in (
            (location.upper, TRUE_UPPER),
            (location.lower, TRUE_LOWER),
        ):
            for value, true_value, step in zip(found, true_params, steps):
                assert abs(value - true_value) <= step + 1e-9

    def test_writes_debug_images(self, tmp_path):
        image = synthetic_eye()
        config = EyelidFinderConfig(
            curvature=AxisGrid(min=3, step=1, count=2, scale=0.1),
            vertex_x=AxisGrid(min=0, step=1, count=1, scale=0.1),
            vertex_y=AxisGrid(min=6, step=1, count=3, scale=0.1),
            rotation=AxisGrid(min=0, step=1, count=1, scale=0.1),
        )
        find_eyelids(
            image,
            IRIS_CENTER,
            IRIS_RADIUS,
            settings=HoughSettings(eyelid_finder=config, debug_dir=str(tmp_path)),
        )
        assert (tmp_path / "eyelids.png").exists()
        assert (tmp_path / "upper" / "accumulator.png").exists()
        assert (tmp_path / "lower" / "candidates.json").exists()

    def test_rejects_non_positive_radius(self):
        with pytest.raises(ValueError):
            find_eyelids(synthetic_eye(), IRIS_CENTER, 0.0)
