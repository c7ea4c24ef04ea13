"""
Компоненты записи: адаптеры захвата свойств, записанный звук,
агрегаты кривых для воспроизведения, маркер постобработки
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from core.bindings import Binding
from core.curves import Curve
from core.scene import AudioSource, Behavior, SceneNode, calculate_path


class PropertyRecorder(Behavior):
    """
    Адаптер захвата пользовательских свойств.

    Каждый тик сообщает набор привязок, которые нужно сэмплировать.
    Удаляется с узла при завершении записи.
    """

    type_name = "PropertyRecorder"

    def get_bindings(self, root: SceneNode) -> Iterable[Binding]:
        return []


class BehaviorPropertyRecorder(PropertyRecorder):
    """Записывает перечисленные свойства компонента type_name на своем узле"""

    def __init__(self, type_name: str, property_names: Iterable[str]):
        super().__init__()
        self.target_type = type_name
        self.property_names = list(property_names)

    def get_bindings(self, root: SceneNode) -> List[Binding]:
        if self.node is None:
            return []
        path = calculate_path(self.node, root)
        if path is None:
            return []
        return [Binding.behavior(path, self.target_type, name) for name in self.property_names]


class RecordedAudio(Behavior):
    """Запись о звуковом источнике, обнаруженном во время записи"""

    type_name = "RecordedAudio"

    def __init__(self, source: AudioSource, recording_start_time: float):
        super().__init__()
        self.target = source
        self.recording_start_time = recording_start_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type_name,
            'clip': self.target.clip,
            'recording_start_time': self.recording_start_time
        }


@dataclass
class CurveBindingData:
    """Кривая вместе с описанием привязки для воспроизведения"""
    path: str
    property_name: str
    type_name: str
    curve: Curve

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'property': self.property_name,
            'type': self.type_name,
            'curve': self.curve.to_dict()
        }


class RecordedData(Behavior):
    """Агрегат воспроизведения: все финальные кривые, адресованные узлу"""

    type_name = "RecordedData"

    def __init__(self):
        super().__init__()
        self.data: List[CurveBindingData] = []

    @classmethod
    def ensure(cls, node: SceneNode) -> 'RecordedData':
        """Агрегат узла; создается при первом обращении"""
        existing = node.get_behavior(cls.type_name)
        if existing is None:
            existing = node.add_behavior(cls())
        return existing

    def find(self, property_name: str) -> Optional[CurveBindingData]:
        for entry in self.data:
            if entry.property_name == property_name:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type_name, 'data': [entry.to_dict() for entry in self.data]}


class HierarchyPostProcess(Behavior):
    """Маркер запеченной записи на корне иерархии"""

    type_name = "HierarchyPostProcess"

    def __init__(self, recording_name: str = "", curve_count: int = 0):
        super().__init__()
        self.recording_name = recording_name
        self.curve_count = curve_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type_name,
            'recording_name': self.recording_name,
            'curve_count': self.curve_count
        }
