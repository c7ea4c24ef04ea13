"""
Модуль: Artifact Writer (Сохранение записи)

Сохраняет финализированную иерархию (узлы, трансформации, компоненты,
агрегаты кривых и маркер постобработки) в JSON шаблон.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from core.components import CurveBindingData, HierarchyPostProcess, RecordedData
from core.curves import Curve
from core.scene import Behavior, SceneNode

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def node_to_dict(node: SceneNode) -> Dict[str, Any]:
    """Рекурсивная сериализация узла"""
    return {
        'name': node.name,
        'active': node.active_self,
        'position': node.local_position.tolist(),
        'rotation': node.local_rotation.tolist(),
        'scale': node.local_scale.tolist(),
        'behaviors': [b.to_dict() for b in node.behaviors],
        'children': [node_to_dict(child) for child in node.children]
    }


class ArtifactWriter:
    """Запись артефакта записи в JSON"""

    def __init__(self, output_path: Union[str, Path], indent: Optional[int] = 2):
        self.output_path = Path(output_path)
        self.indent = indent

    def write(self, root: SceneNode) -> str:
        """
        Сохраняет иерархию.

        Args:
            root: Корень финализированной иерархии

        Returns:
            str: Путь сохраненного файла
        """
        marker = root.get_behavior(HierarchyPostProcess.type_name)
        if marker is None:
            logger.warning(f"Иерархия '{root.name}' не содержит маркера постобработки")

        export_data = {
            'metadata': {
                'format_version': FORMAT_VERSION,
                'root': root.name,
                'baked': marker is not None
            },
            'hierarchy': node_to_dict(root)
        }

        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.output_path, 'w', encoding='utf-8') as f:
            json.dump(export_data, f, indent=self.indent, ensure_ascii=False)

        logger.info(f"JSON экспорт завершен: {self.output_path}")
        return str(self.output_path)

    __call__ = write


def load_artifact(filepath: Union[str, Path]) -> SceneNode:
    """
    Загрузка сохраненной иерархии.

    Агрегаты кривых и маркер восстанавливаются как компоненты;
    остальные компоненты восстанавливаются как базовые.
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return _node_from_dict(data['hierarchy'], None)


def _node_from_dict(data: Dict[str, Any], parent: Optional[SceneNode]) -> SceneNode:
    node = SceneNode(data['name'], parent=parent,
                     position=data.get('position'),
                     rotation=data.get('rotation'),
                     scale=data.get('scale'),
                     active=data.get('active', True))
    for behavior_data in data.get('behaviors', []):
        node.add_behavior(_behavior_from_dict(behavior_data))
    for child in data.get('children', []):
        _node_from_dict(child, node)
    return node


def _behavior_from_dict(data: Dict[str, Any]) -> Behavior:
    type_name = data.get('type')
    if type_name == RecordedData.type_name:
        recorded = RecordedData()
        for entry in data.get('data', []):
            recorded.data.append(CurveBindingData(
                path=entry['path'],
                property_name=entry['property'],
                type_name=entry['type'],
                curve=Curve.from_dict(entry['curve'])
            ))
        return recorded
    if type_name == HierarchyPostProcess.type_name:
        return HierarchyPostProcess(data.get('recording_name', ''), data.get('curve_count', 0))

    behavior = Behavior()
    behavior.type_name = type_name
    return behavior
