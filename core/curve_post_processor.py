"""
Постобработка кривых: устранение константных групп, сжатие,
перепривязка прокси-типов и раздача кривых агрегатам узлов
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from core.bindings import Binding, ProxyRegistry
from core.components import CurveBindingData, RecordedData
from core.curves import DEFAULT_COMPRESSION_TOLERANCE, Curve, CurveArena, compress_curve
from core.progress import NullProgress, ProgressSink
from core.scene import SceneNode, find_by_path, resolve_target_node

logger = logging.getLogger(__name__)

Compressor = Callable[[Curve, float], Curve]


class UnresolvableTargetError(LookupError):
    """Цель привязки не найдена в иерархии"""

    def __init__(self, binding: Binding):
        super().__init__(f"Не удалось найти цель привязки: {binding}")
        self.binding = binding


@dataclass
class PostProcessResult:
    """Итоги постобработки"""
    retained: int = 0
    dropped_constant: int = 0
    remapped: int = 0
    aggregates: List[RecordedData] = field(default_factory=list)


class CurvePostProcessor:
    """
    Постобработка рабочего набора кривых.

    Решение о константности принимается для всей группы каналов сразу:
    кривая удаляется только если все кривые ее группы константны.
    Группы берутся из бокового индекса набора, поэтому результат не
    зависит от порядка обхода.
    """

    def __init__(self,
                 root: SceneNode,
                 proxy_registry: Optional[ProxyRegistry] = None,
                 compressor: Compressor = compress_curve,
                 tolerance: float = DEFAULT_COMPRESSION_TOLERANCE,
                 constant_tolerance: float = 0.0):
        self.root = root
        self.proxy_registry = proxy_registry or ProxyRegistry()
        self.compressor = compressor
        self.tolerance = tolerance
        self.constant_tolerance = constant_tolerance

    def process(self, arena: CurveArena, progress: Optional[ProgressSink] = None) -> PostProcessResult:
        progress = progress or NullProgress()
        result = PostProcessResult()

        # Константность до сжатия
        constant = {i: arena.curve(i).is_constant(self.constant_tolerance) for i in arena.ids()}
        survivors = [i for i in arena.ids() if not self._group_constant(arena, i, constant)]

        compressed: Dict[int, Curve] = {i: self.compressor(arena.curve(i), self.tolerance) for i in survivors}

        # Сжатие может сделать кривую константной
        constant_after = {i: curve.is_constant(self.constant_tolerance) for i, curve in compressed.items()}
        kept = [i for i in survivors if not self._group_constant(arena, i, constant_after)]

        result.dropped_constant = len(arena) - len(kept)

        aggregates: Dict[int, RecordedData] = {}

        def body():
            for binding_id in kept:
                binding = arena.binding(binding_id)
                progress.step(binding.property_name)

                binding = self._remap_proxy(binding, result)
                target = resolve_target_node(self.root, binding)
                if target is None:
                    logger.error(f"Цель привязки не найдена: {binding}")
                    raise UnresolvableTargetError(binding)

                recorded = RecordedData.ensure(target)
                aggregates.setdefault(id(recorded), recorded)
                recorded.data.append(CurveBindingData(
                    path=binding.path,
                    property_name=binding.property_name,
                    type_name=binding.type_name,
                    curve=compressed[binding_id]
                ))
                result.retained += 1

        progress.begin(len(kept), "", "Compressing Data: ", body)

        result.aggregates = list(aggregates.values())
        logger.info(f"Кривых сохранено: {result.retained}, удалено константных: {result.dropped_constant}")
        return result

    @staticmethod
    def _group_constant(arena: CurveArena, binding_id: int, constant: Dict[int, bool]) -> bool:
        """Все кривые группы константны (отсутствующие в словаре считаются константными)"""
        if not constant.get(binding_id, True):
            return False
        return all(constant.get(j, True) for j in arena.group_ids(binding_id))

    def _remap_proxy(self, binding: Binding, result: PostProcessResult) -> Binding:
        """Замена прокси-типа на тип плеера; компонент плеера создается один раз"""
        if not self.proxy_registry.is_proxy(binding.type_name):
            return binding

        node = find_by_path(self.root, binding.path)
        if node is None:
            raise UnresolvableTargetError(binding)

        playback_type = self.proxy_registry.playback_type(binding.type_name)
        if node.get_behavior(playback_type) is None:
            playback = self.proxy_registry.create_playback(binding.type_name)
            if playback.type_name != playback_type:
                raise ValueError(f"Фабрика прокси '{binding.type_name}' создала '{playback.type_name}', "
                                 f"ожидался '{playback_type}'")
            node.add_behavior(playback)
            logger.debug(f"Добавлен компонент плеера {playback_type} на '{node.name}'")

        result.remapped += 1
        return binding.with_type(playback_type)
