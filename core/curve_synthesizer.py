"""
Синтез кривых из серий поз узлов
"""

import logging
from typing import Callable, Dict, List

from core import channels
from core.bindings import Binding, TRANSFORM_TYPE_NAME
from core.channels import ChannelGroup, PoseSample
from core.curves import Curve, CurveArena
from utils.math_utils import quaternions_equal, vectors_equal

logger = logging.getLogger(__name__)

# Сравнение полей группы двух сэмплов
_GROUP_EQUALS: Dict[ChannelGroup, Callable[[PoseSample, PoseSample], bool]] = {
    ChannelGroup.POSITION: lambda a, b: vectors_equal(a.position, b.position),
    ChannelGroup.ROTATION: lambda a, b: quaternions_equal(a.rotation, b.rotation),
    ChannelGroup.SCALE: lambda a, b: vectors_equal(a.scale, b.scale),
    ChannelGroup.ACTIVITY: lambda a, b: a.enabled == b.enabled,
}


def is_group_constant(series: List[PoseSample], group: ChannelGroup) -> bool:
    """Все сэмплы серии совпадают с первым по полям группы"""
    if not series:
        return True
    equals = _GROUP_EQUALS[group]
    first = series[0]
    return all(equals(sample, first) for sample in series[1:])


def channel_binding(node_path: str, index: int) -> Binding:
    """Привязка канала трансформации узла"""
    name = channels.channel_name(index)
    if channels.channel_group(index) is ChannelGroup.ACTIVITY:
        return Binding.node(node_path, name)
    return Binding.behavior(node_path, TRANSFORM_TYPE_NAME, name)


def synthesize(node_path: str, series: List[PoseSample], arena: CurveArena) -> List[Binding]:
    """
    Конвертация серии поз узла в кривые.

    Константная группа (позиция, вращение, масштаб, активность) не дает
    ни одной кривой. Для неконстантной группы создается кривая на каждый
    канал группы.

    Args:
        node_path: Путь узла относительно корня
        series: Серия поз узла, упорядоченная по времени
        arena: Рабочий набор кривых, куда добавляются новые кривые

    Returns:
        Привязки добавленных кривых
    """
    added: List[Binding] = []
    if not series:
        return added

    for group in ChannelGroup:
        if is_group_constant(series, group):
            continue

        for index in channels.group_channels(group):
            curve = Curve()
            for sample in series:
                curve.add_key(sample.time, channels.decode(sample, index))

            binding = channel_binding(node_path, index)
            if arena.add(binding, curve) is None:
                logger.error(f"Повторный синтез для узла '{node_path}': {binding.property_name}")
                continue
            added.append(binding)

    return added
