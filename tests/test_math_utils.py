"""Тесты математических утилит."""

import numpy as np
import pytest

from utils.math_utils import euler_to_quaternion, quaternions_equal, vectors_equal


def test_vectors_equal_threshold():
    assert vectors_equal([1.0, 2.0, 3.0], [1.0, 2.0, 3.0 + 1e-6])
    assert not vectors_equal([1.0, 2.0, 3.0], [1.0, 2.0, 3.0 + 1e-4])


def test_quaternions_equal_componentwise():
    q = np.array([0.0, 0.0, 0.0, 1.0])
    assert quaternions_equal(q, q)
    assert quaternions_equal(q, q + 1e-7)
    assert not quaternions_equal(q, -q)
    assert not quaternions_equal(q, euler_to_quaternion([0.0, 0.0, 1.0]))


def test_non_unit_change_is_detected():
    # dot([0, 0, 0, 1], [0.3, 0, 0, 1]) == 1
    assert not quaternions_equal([0.0, 0.0, 0.0, 1.0], [0.3, 0.0, 0.0, 1.0])


def test_euler_to_quaternion_is_unit():
    q = euler_to_quaternion([10.0, 20.0, 30.0])
    assert np.linalg.norm(q) == pytest.approx(1.0)


def test_z_rotation_layout():
    # [x, y, z, w]
    q = euler_to_quaternion([0.0, 0.0, 90.0])
    assert q == pytest.approx([0.0, 0.0, np.sqrt(0.5), np.sqrt(0.5)])
