"""
Восстановление ссылок на общие материалы

Рендереры во время записи могут держать копии материалов. Перед
сохранением каждая копия заменяется на основной ассет с тем же
шейдером, имя которого входит в имя копии.
"""

import logging
from typing import Iterable, List, Optional

from core.progress import NullProgress, ProgressSink
from core.scene import Material, Renderer

logger = logging.getLogger(__name__)


def collect_main_assets(materials: Iterable[Material]) -> List[Material]:
    """Материалы, являющиеся основными ассетами, в исходном порядке"""
    return [m for m in materials if m.is_main_asset]


def find_shared_material(instance: Material, candidates: List[Material]) -> Optional[Material]:
    """Первый кандидат с подходящим именем и тем же шейдером"""
    for candidate in candidates:
        if candidate.name in instance.name and candidate.shader == instance.shader:
            return candidate
    return None


def reconcile(renderers: Iterable[Renderer],
              candidates: List[Material],
              progress: Optional[ProgressSink] = None) -> int:
    """
    Замена копий материалов на общие ассеты.

    Args:
        renderers: Рендереры иерархии
        candidates: Основные ассеты материалов (порядок задает приоритет)
        progress: Приемник прогресса

    Returns:
        Количество замененных слотов
    """
    renderers = list(renderers)
    progress = progress or NullProgress()
    replaced = 0

    def body():
        nonlocal replaced
        for renderer in renderers:
            progress.step(renderer.node.name if renderer.node is not None else renderer.type_name)

            materials = list(renderer.shared_materials)
            for i, material in enumerate(materials):
                if material is None or material.is_main_asset:
                    continue
                match = find_shared_material(material, candidates)
                if match is not None:
                    logger.debug(f"Материал '{material.name}' -> '{match.name}'")
                    materials[i] = match
                    replaced += 1
            renderer.shared_materials = materials

    progress.begin(len(renderers), "", "", body)

    logger.info(f"Материалов заменено: {replaced}")
    return replaced
