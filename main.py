#!/usr/bin/env python3
"""
Hierarchy Recorder - Запись иерархии сцены в ключевые кривые
Главный модуль приложения

Версия: 1.0.0
Лицензия: MIT
"""

import sys
import logging
from pathlib import Path
from typing import Optional, Dict, Any, List

import numpy as np
from scipy.spatial.transform import Rotation as R, Slerp

from config.default_settings import load_settings, create_default_settings, DEFAULT_SETTINGS_FILE
from core.bindings import ProxyRegistry
from core.components import BehaviorPropertyRecorder
from core.progress import LoggingProgress
from core.scene import AudioSource, Behavior, Material, Renderer, SceneNode
from core.session import HierarchyRecorder
from export.artifact_writer import ArtifactWriter
from utils.math_utils import euler_to_quaternion


# ==================== ДЕМО-СЦЕНА ====================

class Lamp(Behavior):
    """Источник света с записываемой яркостью"""

    type_name = "Lamp"

    def __init__(self, intensity: float = 1.0):
        super().__init__()
        self.intensity = intensity
        self.color = np.array([1.0, 0.9, 0.8])


class BlendShapeProxy(Behavior):
    """Прокси веса блендшейпа: пишется при захвате, воспроизводится плеером"""

    type_name = "BlendShapeProxy"

    def __init__(self):
        super().__init__()
        self.weight = 0.0


class BlendShapePlayback(Behavior):
    type_name = "BlendShapePlayback"


def build_demo_scene() -> Dict[str, Any]:
    """Небольшая иерархия с движением, звуком, материалами и прокси"""
    root = SceneNode("Rig")
    arm = SceneNode("Arm", parent=root, position=[0.0, 1.0, 0.0])
    SceneNode("Hand", parent=arm, position=[0.0, 0.5, 0.0])
    # Второй узел с тем же именем
    SceneNode("Arm", parent=root, position=[0.0, 1.0, 0.5])

    light = SceneNode("Light", parent=root, position=[1.0, 2.0, 0.0])
    lamp = light.add_behavior(Lamp(intensity=0.5))
    light.add_behavior(BehaviorPropertyRecorder(Lamp.type_name, ["intensity", "color.r"]))

    glow_asset = Material("Glow", "Standard", is_main_asset=True)
    light.add_behavior(Renderer([Material("Glow (Instance)", "Standard")]))

    speaker = SceneNode("Speaker", parent=root)
    speaker.add_behavior(AudioSource(clip="voice.wav"))

    face = SceneNode("Face", parent=root)
    smile = face.add_behavior(BlendShapeProxy())
    face.add_behavior(BehaviorPropertyRecorder(BlendShapeProxy.type_name, ["weight"]))

    blink = SceneNode("Blink", parent=root)

    registry = ProxyRegistry()
    registry.register(BlendShapeProxy.type_name, BlendShapePlayback.type_name, BlendShapePlayback)

    return {
        'root': root,
        'arm': arm,
        'lamp': lamp,
        'smile': smile,
        'blink': blink,
        'materials': [Material("Glow", "Unlit", is_main_asset=True), glow_asset],
        'registry': registry,
    }


def animate_demo_scene(scene: Dict[str, Any], t: float, duration: float):
    """Состояние демо-сцены в момент t"""
    key_rotations = R.from_quat([euler_to_quaternion([0.0, 0.0, 0.0]),
                                 euler_to_quaternion([0.0, 0.0, 90.0])])
    slerp = Slerp([0.0, duration], key_rotations)
    scene['arm'].local_rotation = slerp([min(t, duration)]).as_quat()[0]

    scene['lamp'].intensity = 0.5 + 0.5 * np.sin(2.0 * np.pi * t / duration)
    scene['smile'].weight = min(t / duration, 1.0)
    scene['blink'].active_self = int(t * 4.0) % 2 == 0


# ==================== ПРИЛОЖЕНИЕ ====================

class HierarchyRecorderApplication:
    """Основной класс приложения Hierarchy Recorder"""

    def __init__(self, settings_file: Optional[Path] = None, log_level: Optional[str] = None):
        self.settings_file = Path(settings_file) if settings_file else DEFAULT_SETTINGS_FILE
        self.log_level = log_level
        self.settings: Dict[str, Any] = {}
        self.logger = logging.getLogger(__name__)
        self.app_dir = Path(__file__).parent
        self.log_dir = self.app_dir / "logs"

    def load_settings(self):
        """Загружает настройки приложения"""
        self.settings = load_settings(self.settings_file) if self.settings_file.exists() \
            else create_default_settings()
        if self.log_level:
            self.settings["logging.log_level"] = self.log_level

    def setup_logging(self):
        """Настраивает систему логирования"""
        log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        log_level = getattr(logging, str(self.settings.get("logging.log_level", "INFO")).upper(), logging.INFO)

        handlers: List[logging.Handler] = []

        # Консольный handler
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(log_format))
        console_handler.setLevel(log_level)
        handlers.append(console_handler)

        # Файловый handler
        if self.settings.get("logging.log_to_file"):
            self.log_dir.mkdir(exist_ok=True)
            file_handler = logging.FileHandler(self.log_dir / "hierarchy_recorder.log", encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(log_format))
            file_handler.setLevel(log_level)
            handlers.append(file_handler)

        logging.basicConfig(level=log_level, handlers=handlers, force=True)

        self.logger = logging.getLogger("HierarchyRecorder")
        self.logger.info("=" * 60)
        self.logger.info("Hierarchy Recorder Starting")
        self.logger.info("=" * 60)

    def record_demo(self, output: Optional[str] = None,
                    duration: Optional[float] = None,
                    fps: Optional[int] = None) -> Optional[str]:
        """
        Запись демо-сцены.

        Returns:
            Путь сохраненного артефакта
        """
        duration = float(duration or self.settings.get("recording.demo_duration", 2.0))
        fps = int(fps or self.settings.get("recording.demo_fps", 30))
        output = output or self.settings.get("recording.artifact_path", "recordings/RawRecording.json")

        scene = build_demo_scene()
        recorder = HierarchyRecorder(
            scene['root'],
            settings=self.settings,
            proxy_registry=scene['registry'],
            material_library=scene['materials'],
            artifact_sink=ArtifactWriter(output),
            recording_name=Path(output).stem
        )

        recorder.begin(now=0.0)
        frame_count = int(round(duration * fps)) + 1
        for frame in range(frame_count):
            t = frame / fps
            animate_demo_scene(scene, t, duration)
            recorder.tick(t)

        self.logger.info(recorder.status_text())
        return recorder.finish(LoggingProgress(self.logger))

    def run(self, output: Optional[str] = None,
            duration: Optional[float] = None,
            fps: Optional[int] = None) -> int:
        """Запускает приложение"""
        self.load_settings()
        self.setup_logging()
        artifact = self.record_demo(output, duration, fps)
        if artifact:
            print(f"Recording saved: {artifact}")
        return 0


def run_cli(argv: Optional[List[str]] = None) -> int:
    """Запуск в режиме командной строки"""
    import argparse

    parser = argparse.ArgumentParser(description="Hierarchy Recorder - scene hierarchy to keyframe curves")

    parser.add_argument(
        "--version", "-v",
        action="version",
        version="Hierarchy Recorder 1.0.0"
    )

    parser.add_argument(
        "--settings", "-s",
        help="Путь к файлу настроек"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Уровень детализации логов"
    )

    parser.add_argument(
        "--output", "-o",
        help="Путь для сохранения записи"
    )

    parser.add_argument(
        "--duration",
        type=float,
        help="Длительность демо-записи в секундах"
    )

    parser.add_argument(
        "--fps",
        type=int,
        help="Частота сэмплирования демо-записи"
    )

    args = parser.parse_args(argv)

    app = HierarchyRecorderApplication(args.settings, args.log_level)
    return app.run(args.output, args.duration, args.fps)


if __name__ == "__main__":
    sys.exit(run_cli())
