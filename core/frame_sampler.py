"""
Покадровый сэмплер записи
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Dict, List, Any

from core.channels import PoseSample
from core.components import PropertyRecorder
from core.sample_store import SampleStore
from core.scene import AudioSource, SceneNode, get_float_value

logger = logging.getLogger(__name__)


class FrameSampler:
    """
    Один шаг захвата на тик.

    Порядок тика:
    1. Оповещение слушателей перед сэмплированием
    2. Обновление набора узлов, адаптеров свойств и звуковых источников
    3. Записи для новых звуковых источников
    4. Пустые кривые для новых привязок свойств
    5. Значения всех привязок свойств
    6. Поза каждого отслеживаемого узла
    """

    def __init__(self,
                 root: SceneNode,
                 store: SampleStore,
                 start_time: float,
                 listeners: List[Callable[[], Any]],
                 isolate_listener_errors: bool = False):
        self.root = root
        self.store = store
        self.start_time = start_time
        self.listeners = listeners
        self.isolate_listener_errors = isolate_listener_errors
        self.last_elapsed = 0.0

        self.stats: Dict[str, float] = {'ticks': 0}

    @contextmanager
    def _phase(self, name: str):
        started = time.perf_counter()
        try:
            yield
        finally:
            self.stats[name] = self.stats.get(name, 0.0) + time.perf_counter() - started

    def tick(self, now: float):
        """Запись одного кадра"""
        elapsed = now - self.start_time
        if elapsed < self.last_elapsed:
            raise ValueError(f"Время тика идет назад: {elapsed:.6f} < {self.last_elapsed:.6f}")
        self.last_elapsed = elapsed

        with self._phase('dispatch_pre_record'):
            self._dispatch_pre_record()

        with self._phase('get_references'):
            nodes = list(self.root.iter_subtree())
            recorders = self.root.behaviors_in_subtree(PropertyRecorder)
            sources = self.root.behaviors_in_subtree(AudioSource)

        with self._phase('discover_audio'):
            for source in sources:
                self.store.track_audio(source, elapsed)

        with self._phase('discover_properties'):
            for recorder in recorders:
                for binding in recorder.get_bindings(self.root):
                    self.store.track_property(binding)

        with self._phase('record_properties'):
            for binding, curve in self.store.property_curves.items():
                value = get_float_value(self.root, binding)
                if value is None:
                    logger.debug(f"Нет значения для {binding} @ {elapsed:.3f}с")
                    continue
                curve.add_key(elapsed, value)

        with self._phase('discover_transforms'):
            for node in nodes:
                self.store.track_node(node)

        with self._phase('record_transforms'):
            for node in nodes:
                self.store.append_pose(node, PoseSample(
                    time=elapsed,
                    enabled=node.active_in_hierarchy,
                    position=node.local_position,
                    rotation=node.local_rotation,
                    scale=node.local_scale
                ))

        self.stats['ticks'] += 1

    def _dispatch_pre_record(self):
        """Слушатели вызываются в порядке регистрации"""
        for listener in list(self.listeners):
            if not self.isolate_listener_errors:
                listener()
                continue
            try:
                listener()
            except Exception:
                logger.exception(f"Ошибка слушателя перед записью кадра: {listener!r}")
