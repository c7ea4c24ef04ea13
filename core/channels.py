"""
Кодек каналов трансформации

Фиксированная раскладка из 11 каналов:
    0-2   позиция (x, y, z)
    3-6   вращение (x, y, z, w)
    7-9   масштаб (x, y, z)
    10    активность (1.0 / 0.0)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

import numpy as np

CURVE_COUNT = 11


class ChannelGroup(Enum):
    """Группа каналов с общим решением о константности"""
    POSITION = "position"
    ROTATION = "rotation"
    SCALE = "scale"
    ACTIVITY = "activity"


_GROUP_LAYOUT = (
    (ChannelGroup.POSITION, 0, "m_LocalPosition.", "xyz"),
    (ChannelGroup.ROTATION, 3, "m_LocalRotation.", "xyzw"),
    (ChannelGroup.SCALE, 7, "m_LocalScale.", "xyz"),
)
ACTIVITY_PROPERTY = "m_IsActive"
ACTIVITY_INDEX = 10


@dataclass
class PoseSample:
    """Один сэмпл позы узла"""
    time: float
    enabled: bool = True
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotation: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 0.0, 1.0]))  # quat x,y,z,w
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))

    def __post_init__(self):
        self.position = np.array(self.position, dtype=np.float64)
        self.rotation = np.array(self.rotation, dtype=np.float64)
        self.scale = np.array(self.scale, dtype=np.float64)


def _check_index(index: int):
    if not 0 <= index < CURVE_COUNT:
        raise ValueError(f"Некорректный индекс канала: {index}")


def channel_group(index: int) -> ChannelGroup:
    """Группа канала по индексу"""
    _check_index(index)
    if index == ACTIVITY_INDEX:
        return ChannelGroup.ACTIVITY
    for group, start, _, axes in _GROUP_LAYOUT:
        if start <= index < start + len(axes):
            return group
    raise ValueError(f"Некорректный индекс канала: {index}")


def channel_name(index: int) -> str:
    """Имя свойства, к которому привязан канал"""
    _check_index(index)
    if index == ACTIVITY_INDEX:
        return ACTIVITY_PROPERTY
    for _, start, prefix, axes in _GROUP_LAYOUT:
        if start <= index < start + len(axes):
            return prefix + axes[index - start]
    raise ValueError(f"Некорректный индекс канала: {index}")


def group_channels(group: ChannelGroup) -> List[int]:
    """Индексы каналов группы"""
    return [i for i in range(CURVE_COUNT) if channel_group(i) is group]


def decode(sample: PoseSample, index: int) -> float:
    """Значение канала index из сэмпла"""
    _check_index(index)
    if index < 3:
        return float(sample.position[index])
    if index < 7:
        return float(sample.rotation[index - 3])
    if index < 10:
        return float(sample.scale[index - 7])
    return 1.0 if sample.enabled else 0.0


def encode(sample: PoseSample, index: int, value: float):
    """Запись значения канала index в сэмпл"""
    _check_index(index)
    if index < 3:
        sample.position[index] = value
    elif index < 7:
        sample.rotation[index - 3] = value
    elif index < 10:
        sample.scale[index - 7] = value
    else:
        sample.enabled = value > 0.5
