from .math_utils import *

__all__ = ['vectors_equal', 'quaternions_equal', 'euler_to_quaternion']
