"""
Математические утилиты для Hierarchy Recorder
"""

import numpy as np
from typing import Sequence, Union
import transforms3d as tf3d

# Порог сравнения векторов и кватернионов (как в движке-хосте)
VECTOR_EPSILON = 1e-5
QUATERNION_EPSILON = 1e-6

ArrayLike = Union[np.ndarray, Sequence[float]]


# ========== СРАВНЕНИЕ ==========

def vectors_equal(a: ArrayLike, b: ArrayLike) -> bool:
    """
    Приближенное равенство векторов.

    Векторы равны, если квадрат расстояния между ними меньше VECTOR_EPSILON².
    """
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.dot(diff, diff)) < VECTOR_EPSILON * VECTOR_EPSILON


def quaternions_equal(q1: ArrayLike, q2: ArrayLike) -> bool:
    """
    Покомпонентное равенство кватернионов [x, y, z, w].

    Кватернионы равны, если каждая компонента отличается не более чем на
    QUATERNION_EPSILON. q и -q считаются разными.
    """
    return bool(np.allclose(np.asarray(q1, dtype=np.float64), np.asarray(q2, dtype=np.float64),
                            rtol=0.0, atol=QUATERNION_EPSILON))


# ========== ОПЕРАЦИИ С КВАРТЕРНИОНАМИ ==========

def euler_to_quaternion(euler_degrees: ArrayLike, order: str = 'sxyz') -> np.ndarray:
    """
    Конвертирует углы Эйлера в кватернион.

    Args:
        euler_degrees: Углы Эйлера в градусах
        order: Порядок осей в нотации transforms3d

    Returns:
        np.ndarray: Кватернион [x, y, z, w]
    """
    ai, aj, ak = np.radians(np.asarray(euler_degrees, dtype=np.float64))
    w, x, y, z = tf3d.euler.euler2quat(ai, aj, ak, order)
    return np.array([x, y, z, w])
