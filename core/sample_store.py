"""
Хранилище сэмплов записи

Буферы только на добавление: серия поз на каждый узел, кривая на каждую
привязку пользовательского свойства, запись на каждый звуковой источник.
"""

import logging
from typing import Dict, List

from core.channels import PoseSample
from core.components import RecordedAudio
from core.curves import Curve, CurveArena
from core.bindings import Binding
from core.scene import AudioSource, SceneNode

logger = logging.getLogger(__name__)


class SampleStore:
    """Буферы одной сессии записи"""

    def __init__(self):
        self.pose_series: Dict[SceneNode, List[PoseSample]] = {}
        self.property_curves = CurveArena()
        self.audio: Dict[AudioSource, RecordedAudio] = {}

    def track_node(self, node: SceneNode) -> List[PoseSample]:
        """Серия поз узла; пустая серия для нового узла"""
        series = self.pose_series.get(node)
        if series is None:
            series = []
            self.pose_series[node] = series
        return series

    def track_property(self, binding: Binding) -> bool:
        """Начинает отслеживание привязки. False если она уже отслеживается"""
        if binding in self.property_curves:
            return False
        self.property_curves.add(binding, Curve())
        return True

    def track_audio(self, source: AudioSource, elapsed: float) -> bool:
        """Создает запись для нового звукового источника (не более одной на источник)"""
        if source in self.audio:
            return False
        entry = RecordedAudio(source, elapsed)
        if source.node is not None:
            source.node.add_behavior(entry)
        self.audio[source] = entry
        logger.debug(f"Обнаружен звуковой источник '{source.clip}' @ {elapsed:.3f}с")
        return True

    def append_pose(self, node: SceneNode, sample: PoseSample):
        self.track_node(node).append(sample)

    @property
    def node_count(self) -> int:
        return len(self.pose_series)

    @property
    def sample_count(self) -> int:
        return sum(len(series) for series in self.pose_series.values())
