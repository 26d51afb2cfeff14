"""
End-to-end detection of parabolas drawn into synthetic images.
"""

import cv2
import numpy as np
import pytest
from PIL import Image

from hough import images, param_range
from hough.engine import HoughTransform
from hough.shapes import RotatedShape, StandardFormParabola, VertexFormParabola


def draw_curve(shape, params, t_range, height, width):
    image = np.zeros((height, width), np.uint8)
    image = images.render_curve(image, shape, params, t_range, color=255)
    return cv2.GaussianBlur(image, (5, 5), 1.0)


def assert_within_one_step(found, expected, steps):
    for value, true_value, step in zip(found, expected, steps):
        assert abs(value - true_value) <= step + 1e-9


class TestSyntheticParabolas:
    def test_standard_form_parabola(self):
        true_params = (0.01, 0.0, 50.0)
        shape = StandardFormParabola()
        width = 100
        image = draw_curve(
            shape, true_params, np.arange(width, dtype=float), 160, width
        )

        transform = HoughTransform()
        transform.add_param_range(param_range.scaled_incremental(6, 1, 9, 0.001))
        transform.add_param_range(param_range.scaled_incremental(-4, 1, 9, 0.05))
        transform.add_param_range(param_range.steps(44, 2, 7))
        best = transform.compute_best(image, shape)

        assert_within_one_step(best, true_params, (0.001, 0.05, 2.0))

    def test_standard_form_parabola_from_pil_image(self):
        true_params = (0.01, 0.0, 50.0)
        shape = StandardFormParabola()
        image = draw_curve(shape, true_params, np.arange(100, dtype=float), 160, 100)
        pil_image = Image.fromarray(image).convert("RGB")

        transform = HoughTransform(max_candidates=3)
        transform.add_param_range(param_range.scaled_incremental(8, 1, 5, 0.001))
        transform.add_param_range([0.0])
        transform.add_param_range(param_range.steps(46, 2, 5))
        candidates = transform.compute(pil_image, shape)

        assert len(candidates) == 3
        assert_within_one_step(candidates[0], true_params, (0.001, 0.0, 2.0))

    def test_rotated_vertex_form_parabola(self):
        true_params = (0.02, 50.0, 40.0, 0.2)
        shape = RotatedShape(VertexFormParabola(), theta_index=3)
        t_range = np.arange(20.0, 81.0)
        image = draw_curve(shape, true_params, t_range, 120, 120)

        transform = HoughTransform()
        transform.add_param_range(param_range.scaled_incremental(2, 1, 5, 0.005))
        transform.add_param_range(param_range.steps(44, 3, 5))
        transform.add_param_range(param_range.steps(34, 3, 5))
        transform.add_param_range(param_range.scaled_incremental(-2, 1, 7, 0.1))
        best = transform.compute_best(image, shape, t_range)

        assert_within_one_step(best, true_params, (0.005, 3.0, 3.0, 0.1))

    @pytest.mark.parametrize("normalized", [False, True])
    def test_scores_are_descending(self, normalized):
        shape = StandardFormParabola()
        image = draw_curve(shape, (0.01, 0.0, 50.0), np.arange(100.0), 160, 100)
        transform = HoughTransform(max_candidates=10, normalized=normalized)
        transform.add_param_range(param_range.scaled_incremental(8, 1, 5, 0.001))
        transform.add_param_range([0.0])
        transform.add_param_range(param_range.steps(40, 2, 11))
        transform.accumulate(image, shape, np.arange(100.0))
        scores = [c.score for c in transform.gather_scored_candidates()]
        assert len(scores) == 10
        assert all(s1 >= s2 for s1, s2 in zip(scores, scores[1:]))
