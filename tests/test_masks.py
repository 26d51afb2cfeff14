import numpy as np
import pytest

from hough.masks import ArrayMask, DefaultMask, RegionMask


class TestDefaultMask:
    def test_half_open_bounds(self):
        mask = DefaultMask(num_rows=4, num_cols=6)
        assert mask.can_vote(0, 0)
        assert mask.can_vote(5, 3)
        assert not mask.can_vote(6, 0)
        assert not mask.can_vote(0, 4)
        assert not mask.can_vote(-1, 2)
        assert not mask.can_vote(2, -1)

    def test_for_image(self):
        mask = DefaultMask.for_image(np.zeros((7, 3)))
        assert mask.num_rows == 7
        assert mask.num_cols == 3

    def test_vectorized_matches_scalar(self):
        mask = DefaultMask(num_rows=4, num_cols=6)
        xs = np.array([-1, 0, 3, 5, 6, 2])
        ys = np.array([0, 0, 3, 4, 1, -2])
        expected = [mask.can_vote(int(x), int(y)) for x, y in zip(xs, ys)]
        assert mask.can_vote_many(xs, ys).tolist() == expected


class TestRegionMask:
    def test_intersect(self):
        region = RegionMask(left=2, top=-5, right=20, bottom=3)
        clipped = DefaultMask(num_rows=10, num_cols=10).intersect(region)
        assert (clipped.left, clipped.top, clipped.right, clipped.bottom) == (
            2,
            0,
            10,
            3,
        )
        assert clipped.can_vote(9, 2)
        assert not clipped.can_vote(1, 2)
        assert not clipped.can_vote(5, 3)


class TestArrayMask:
    def test_nonzero_pixels_vote(self):
        pixels = np.zeros((3, 4), dtype=np.uint8)
        pixels[1, 2] = 255
        mask = ArrayMask(pixels)
        assert mask.can_vote(2, 1)
        assert not mask.can_vote(1, 2)
        assert not mask.can_vote(10, 1)

    def test_vectorized_matches_scalar(self):
        pixels = np.eye(4)
        mask = ArrayMask(pixels)
        xs = np.array([0, 1, 2, 3, 0, -1, 4])
        ys = np.array([0, 1, 1, 3, 3, 0, 4])
        expected = [mask.can_vote(int(x), int(y)) for x, y in zip(xs, ys)]
        assert mask.can_vote_many(xs, ys).tolist() == expected

    def test_rejects_non_2d(self):
        with pytest.raises(ValueError):
            ArrayMask(np.zeros((2, 2, 3)))
