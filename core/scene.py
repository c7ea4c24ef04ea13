"""
Модель сцены: узлы иерархии, компоненты, материалы
Поиск узлов по пути и разрешение привязок
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Any

import numpy as np

from core.bindings import Binding, TargetKind, TRANSFORM_TYPE_NAME
from core import channels

logger = logging.getLogger(__name__)

_instance_ids = itertools.count(1)

_COMPONENT_AXES = {'x': 0, 'y': 1, 'z': 2, 'w': 3, 'r': 0, 'g': 1, 'b': 2, 'a': 3}


class Behavior:
    """Базовый компонент узла сцены"""

    type_name = "Behavior"

    def __init__(self):
        self.node: Optional['SceneNode'] = None

    def get_float(self, property_name: str) -> Optional[float]:
        """
        Текущее значение свойства как float.

        Поддерживает скалярные атрибуты и компоненты векторов
        ('color.r', 'offset.y'). None если значение недоступно.
        """
        attr, _, component = property_name.partition('.')
        value = getattr(self, attr, None)
        if value is None:
            return None
        if component:
            idx = _COMPONENT_AXES.get(component)
            if idx is None:
                return None
            try:
                value = value[idx]
            except (TypeError, IndexError, KeyError):
                return None
        if isinstance(value, (bool, int, float, np.floating, np.integer)):
            return float(value)
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type_name}


@dataclass
class Material:
    """Материал: имя, шейдер и признак основного ассета на диске"""
    name: str
    shader: str
    is_main_asset: bool = False


class Renderer(Behavior):
    """Рендерер со слотами материалов"""

    type_name = "Renderer"

    def __init__(self, materials: Optional[List[Material]] = None):
        super().__init__()
        self.shared_materials: List[Material] = list(materials or [])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type_name,
            'materials': [{'name': m.name, 'shader': m.shader, 'asset': m.is_main_asset}
                          for m in self.shared_materials]
        }


class AudioSource(Behavior):
    """Источник звука"""

    type_name = "AudioSource"

    def __init__(self, clip: str = "", volume: float = 1.0):
        super().__init__()
        self.clip = clip
        self.volume = volume

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type_name, 'clip': self.clip, 'volume': self.volume}


class SceneNode:
    """Узел иерархии сцены с локальной трансформацией"""

    def __init__(self,
                 name: str,
                 parent: Optional['SceneNode'] = None,
                 position=None,
                 rotation=None,
                 scale=None,
                 active: bool = True,
                 instance_id: Optional[int] = None):
        self.name = name
        self.instance_id = instance_id if instance_id is not None else -next(_instance_ids)
        self.parent: Optional['SceneNode'] = None
        self.children: List['SceneNode'] = []
        self.behaviors: List[Behavior] = []
        self.active_self = active

        self.local_position = np.array(position if position is not None else np.zeros(3), dtype=np.float64)
        self.local_rotation = np.array(rotation if rotation is not None else [0.0, 0.0, 0.0, 1.0],
                                       dtype=np.float64)
        self.local_scale = np.array(scale if scale is not None else np.ones(3), dtype=np.float64)

        if parent is not None:
            parent.add_child(self)

    # ==================== ИЕРАРХИЯ ====================

    def add_child(self, child: 'SceneNode') -> 'SceneNode':
        if child.parent is not None:
            child.parent.remove_child(child)
        self.children.append(child)
        child.parent = self
        return child

    def remove_child(self, child: 'SceneNode'):
        if child in self.children:
            self.children.remove(child)
            child.parent = None

    def find_child(self, name: str) -> Optional['SceneNode']:
        """Первый дочерний узел с указанным именем"""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def iter_subtree(self) -> Iterator['SceneNode']:
        """Обход поддерева в прямом порядке, включая сам узел"""
        yield self
        for child in list(self.children):
            yield from child.iter_subtree()

    @property
    def active_in_hierarchy(self) -> bool:
        node = self
        while node is not None:
            if not node.active_self:
                return False
            node = node.parent
        return True

    # ==================== КОМПОНЕНТЫ ====================

    def add_behavior(self, behavior: Behavior) -> Behavior:
        behavior.node = self
        self.behaviors.append(behavior)
        return behavior

    def remove_behavior(self, behavior: Behavior):
        if behavior in self.behaviors:
            self.behaviors.remove(behavior)
            behavior.node = None

    def get_behavior(self, type_name: str) -> Optional[Behavior]:
        for behavior in self.behaviors:
            if behavior.type_name == type_name:
                return behavior
        return None

    def behaviors_in_subtree(self, behavior_type: type) -> List[Behavior]:
        """Все компоненты указанного класса в поддереве (включая неактивные узлы)"""
        return [b for node in self.iter_subtree() for b in node.behaviors
                if isinstance(b, behavior_type)]

    def get_transform_float(self, property_name: str) -> Optional[float]:
        """Значение канала трансформации по имени свойства"""
        for index in range(channels.CURVE_COUNT):
            if channels.channel_name(index) == property_name and index != channels.ACTIVITY_INDEX:
                sample = channels.PoseSample(0.0, self.active_self, self.local_position,
                                             self.local_rotation, self.local_scale)
                return channels.decode(sample, index)
        return None

    def __repr__(self):
        return f"SceneNode({self.name!r})"


# ==================== ПУТИ И ПРИВЯЗКИ ====================

def calculate_path(node: SceneNode, root: SceneNode) -> Optional[str]:
    """
    Путь узла относительно корня ('' для самого корня).

    Returns:
        Путь вида 'Arm/Hand' или None, если узел не в поддереве корня
    """
    names = []
    current = node
    while current is not None and current is not root:
        names.append(current.name)
        current = current.parent
    if current is None:
        return None
    return "/".join(reversed(names))


def find_by_path(root: SceneNode, path: str) -> Optional[SceneNode]:
    """Поиск узла по пути относительно корня"""
    node = root
    if not path:
        return node
    for name in path.split("/"):
        node = node.find_child(name)
        if node is None:
            return None
    return node


def resolve_target_node(root: SceneNode, binding: Binding) -> Optional[SceneNode]:
    """
    Узел, которому принадлежит цель привязки.

    Для компонентной привязки компонент указанного типа должен
    существовать на узле.
    """
    node = find_by_path(root, binding.path)
    if node is None:
        return None
    if binding.kind is TargetKind.NODE or binding.type_name == TRANSFORM_TYPE_NAME:
        return node
    if node.get_behavior(binding.type_name) is None:
        return None
    return node


def get_float_value(root: SceneNode, binding: Binding) -> Optional[float]:
    """Текущее значение канала привязки; None если прочитать нельзя"""
    node = find_by_path(root, binding.path)
    if node is None:
        return None
    if binding.kind is TargetKind.NODE:
        if binding.property_name == channels.ACTIVITY_PROPERTY:
            return 1.0 if node.active_self else 0.0
        return None
    if binding.type_name == TRANSFORM_TYPE_NAME:
        return node.get_transform_float(binding.property_name)
    behavior = node.get_behavior(binding.type_name)
    if behavior is None:
        return None
    return behavior.get_float(binding.property_name)


def disambiguate_sibling_names(root: SceneNode) -> int:
    """
    Делает имена дочерних узлов уникальными в пределах родителя.

    Узел, имя которого уже занято предыдущим соседом, получает суффикс
    ' <|instance_id|>'. Если и такое имя занято, суффикс повторяется,
    пока имя не станет свободным.

    Returns:
        Количество переименованных узлов
    """
    renamed = 0
    for node in root.iter_subtree():
        taken = set()
        for child in node.children:
            if child.name in taken:
                suffix = f" {abs(child.instance_id)}"
                new_name = child.name + suffix
                while new_name in taken:
                    new_name += suffix
                logger.debug(f"Переименование '{child.name}' -> '{new_name}'")
                child.name = new_name
                renamed += 1
            taken.add(child.name)
    return renamed
