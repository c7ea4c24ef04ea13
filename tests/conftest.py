"""Общие фикстуры тестов."""

import sys
from pathlib import Path

import pytest

# Импорт пакетов прямо из дерева исходников
_ROOT = Path(__file__).parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from core.channels import PoseSample  # noqa: E402
from core.scene import SceneNode  # noqa: E402


@pytest.fixture
def root():
    """Корень с двумя дочерними узлами"""
    node = SceneNode("Root")
    SceneNode("A", parent=node)
    SceneNode("B", parent=node)
    return node


@pytest.fixture
def make_series():
    """Фабрика серий одинаковых сэмплов"""

    def factory(count=5, dt=0.1):
        return [PoseSample(time=i * dt,
                           enabled=True,
                           position=[1.0, 2.0, 3.0],
                           rotation=[0.0, 0.0, 0.0, 1.0],
                           scale=[1.0, 1.0, 1.0]) for i in range(count)]

    return factory
