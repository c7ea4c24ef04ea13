"""
Контроллер сессии записи иерархии

Состояния: IDLE -> RECORDING -> FINALIZING -> RETIRED.
После финализации сессия выводится из работы; для новой записи
нужен новый рекордер.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from core.components import HierarchyPostProcess, PropertyRecorder
from core.curve_post_processor import CurvePostProcessor, PostProcessResult
from core.curve_synthesizer import synthesize
from core.curves import DEFAULT_COMPRESSION_TOLERANCE, CurveArena, compress_curve
from core.bindings import ProxyRegistry
from core.frame_sampler import FrameSampler
from core.material_reconciler import collect_main_assets, reconcile
from core.progress import LoggingProgress, ProgressSink
from core.sample_store import SampleStore
from core.scene import Material, Renderer, SceneNode, calculate_path, disambiguate_sibling_names

logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    RECORDING = "recording"
    FINALIZING = "finalizing"
    RETIRED = "retired"


@dataclass
class FinalizeContext:
    """Общее состояние этапов финализации"""
    recorder: 'HierarchyRecorder'
    root: SceneNode
    store: SampleStore
    arena: CurveArena
    materials_replaced: int = 0
    synthesized: int = 0
    post_result: Optional[PostProcessResult] = None
    artifact_path: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


Stage = Callable[[FinalizeContext, ProgressSink], None]


# ==================== ЭТАПЫ ФИНАЛИЗАЦИИ ====================

def remove_capture_adapters(ctx: FinalizeContext, progress: ProgressSink):
    """Удаление адаптеров захвата свойств"""
    recorders = ctx.root.behaviors_in_subtree(PropertyRecorder)
    for recorder in recorders:
        recorder.node.remove_behavior(recorder)
    logger.debug(f"Удалено адаптеров захвата: {len(recorders)}")
    progress.step("Removing Capture Adapters")


def patch_materials(ctx: FinalizeContext, progress: ProgressSink):
    """Замена копий материалов на общие ассеты"""
    candidates = collect_main_assets(ctx.recorder.material_library)
    renderers = ctx.root.behaviors_in_subtree(Renderer)

    def body():
        ctx.materials_replaced = reconcile(renderers, candidates, progress)

    progress.begin(1, "", "Patching Materials: ", body)


def convert_transform_data(ctx: FinalizeContext, progress: ProgressSink):
    """Синтез кривых трансформаций для всех отслеживаемых узлов"""

    def body():
        for node, series in ctx.store.pose_series.items():
            progress.step(node.name)
            path = calculate_path(node, ctx.root)
            if path is None:
                logger.warning(f"Узел '{node.name}' больше не в иерархии записи, пропуск")
                continue
            ctx.synthesized += len(synthesize(path, series, ctx.arena))

    progress.begin(ctx.store.node_count, "", "Converting Transform Data: ", body)
    logger.info(f"Синтезировано кривых трансформаций: {ctx.synthesized}")


def compress_curves(ctx: FinalizeContext, progress: ProgressSink):
    """Постобработка всего набора кривых"""
    recorder = ctx.recorder
    processor = CurvePostProcessor(
        ctx.root,
        proxy_registry=recorder.proxy_registry,
        compressor=recorder.compressor,
        tolerance=recorder.compression_tolerance,
        constant_tolerance=recorder.constant_tolerance
    )
    ctx.post_result = processor.process(ctx.arena, progress)


def attach_marker(ctx: FinalizeContext, progress: ProgressSink):
    """Маркер запеченной записи на корне"""
    progress.step("Finalizing Prefab...")
    retained = ctx.post_result.retained if ctx.post_result is not None else 0
    ctx.root.add_behavior(HierarchyPostProcess(ctx.recorder.recording_name, retained))


def persist_artifact(ctx: FinalizeContext, progress: ProgressSink):
    """Сохранение иерархии как артефакта записи"""
    progress.step("Saving Artifact")
    sink = ctx.recorder.artifact_sink
    if sink is None:
        logger.info("Приемник артефакта не задан, сохранение пропущено")
        return
    ctx.artifact_path = sink(ctx.root)
    logger.info(f"Артефакт записи сохранен: {ctx.artifact_path}")


FINALIZE_STAGES: List[Stage] = [
    remove_capture_adapters,
    patch_materials,
    convert_transform_data,
    compress_curves,
    attach_marker,
    persist_artifact,
]


# ==================== КОНТРОЛЛЕР ====================

class HierarchyRecorder:
    """
    Рекордер иерархии сцены.

    begin() начинает запись, tick() вызывается каждый кадр,
    finish() конвертирует записанные сэмплы в кривые, раздает их
    агрегатам узлов и сохраняет артефакт.
    """

    def __init__(self,
                 root: SceneNode,
                 settings: Optional[Dict[str, Any]] = None,
                 proxy_registry: Optional[ProxyRegistry] = None,
                 compressor: Callable = compress_curve,
                 material_library: Optional[Iterable[Material]] = None,
                 artifact_sink: Optional[Callable[[SceneNode], Optional[str]]] = None,
                 recording_name: str = "RawRecording"):
        settings = settings or {}
        self.root = root
        self.proxy_registry = proxy_registry or ProxyRegistry()
        self.compressor = compressor
        self.material_library: List[Material] = list(material_library or [])
        self.artifact_sink = artifact_sink
        self.recording_name = recording_name

        self.begin_key = str(settings.get("recording.begin_key", "F5"))
        self.finish_key = str(settings.get("recording.finish_key", "F6"))
        tolerance = settings.get("recording.compression_tolerance")
        self.compression_tolerance = DEFAULT_COMPRESSION_TOLERANCE if tolerance is None else float(tolerance)
        self.constant_tolerance = float(settings.get("recording.constant_tolerance", 0.0))
        self.isolate_listener_errors = bool(settings.get("recording.isolate_listener_errors", False))

        self.state = SessionState.IDLE
        self.start_time = 0.0
        self.store: Optional[SampleStore] = None
        self.sampler: Optional[FrameSampler] = None
        self.last_context: Optional[FinalizeContext] = None

        self._pre_record_listeners: List[Callable[[], Any]] = []

    # ==================== СЛУШАТЕЛИ ====================

    def add_pre_record_listener(self, listener: Callable[[], Any]):
        """Слушатель, вызываемый перед сэмплированием каждого кадра"""
        self._pre_record_listeners.append(listener)

    def remove_pre_record_listener(self, listener: Callable[[], Any]):
        if listener in self._pre_record_listeners:
            self._pre_record_listeners.remove(listener)

    # ==================== ЗАПИСЬ ====================

    @property
    def is_recording(self) -> bool:
        return self.state is SessionState.RECORDING

    def begin(self, now: Optional[float] = None):
        """Начало записи; повторный вызов игнорируется"""
        if self.state is not SessionState.IDLE:
            logger.debug(f"begin() в состоянии {self.state.value}, пропуск")
            return

        now = time.monotonic() if now is None else now
        renamed = disambiguate_sibling_names(self.root)
        if renamed:
            logger.info(f"Переименовано узлов с совпадающими именами: {renamed}")

        self.start_time = now
        self.store = SampleStore()
        self.sampler = FrameSampler(self.root, self.store, now, self._pre_record_listeners,
                                    isolate_listener_errors=self.isolate_listener_errors)
        self.state = SessionState.RECORDING

        logger.info(f"Запись иерархии '{self.root.name}' начата")

    def tick(self, now: Optional[float] = None):
        """Запись одного кадра (только в состоянии RECORDING)"""
        if self.state is not SessionState.RECORDING:
            return
        self.sampler.tick(time.monotonic() if now is None else now)

    def finish(self, progress: Optional[ProgressSink] = None) -> Optional[str]:
        """
        Завершение записи и запекание кривых.

        Returns:
            Путь сохраненного артефакта или None
        """
        if self.state is not SessionState.RECORDING:
            logger.debug(f"finish() в состоянии {self.state.value}, пропуск")
            return None

        progress = progress or LoggingProgress()
        self.state = SessionState.FINALIZING
        logger.info(f"Запись остановлена. Узлов: {self.store.node_count}, "
                    f"сэмплов: {self.store.sample_count}, тиков: {self.sampler.stats['ticks']}")

        ctx = FinalizeContext(
            recorder=self,
            root=self.root,
            store=self.store,
            arena=self.store.property_curves
        )
        self.last_context = ctx

        def body():
            for stage in FINALIZE_STAGES:
                stage(ctx, progress)

        progress.begin(len(FINALIZE_STAGES), "Saving Recording", "", body)

        self.store = None
        self.state = SessionState.RETIRED
        return ctx.artifact_path

    # ==================== ИНТЕРФЕЙС ====================

    def handle_key(self, key: str) -> Optional[str]:
        """
        Обработка нажатия клавиши.

        Returns:
            'begin', 'finish' или None
        """
        key = key.upper()
        if key == self.begin_key.upper():
            self.begin()
            return 'begin'
        if key == self.finish_key.upper():
            self.finish(LoggingProgress())
            return 'finish'
        return None

    def status_text(self) -> str:
        if self.state is SessionState.RECORDING:
            return f"Recording. Stop Recording ({self.finish_key})"
        if self.state is SessionState.IDLE:
            return f"Ready to record. Start Recording ({self.begin_key})"
        return self.state.value.capitalize()

    def get_info(self) -> Dict[str, Any]:
        """Информация о текущей сессии"""
        info = {
            'state': self.state.value,
            'root': self.root.name,
            'listeners': len(self._pre_record_listeners),
        }
        if self.store is not None:
            info['nodes'] = self.store.node_count
            info['samples'] = self.store.sample_count
            info['property_curves'] = len(self.store.property_curves)
            info['audio_sources'] = len(self.store.audio)
        if self.sampler is not None:
            info['stats'] = dict(self.sampler.stats)
        return info
