"""
Привязки анимационных каналов и реестр прокси-типов
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple

logger = logging.getLogger(__name__)

NODE_TYPE_NAME = "Node"
TRANSFORM_TYPE_NAME = "Transform"


class TargetKind(Enum):
    """Вид цели привязки"""
    NODE = "node"  # Сам узел (флаг активности)
    BEHAVIOR = "behavior"  # Компонент на узле


@dataclass(frozen=True)
class Binding:
    """Уникальный идентификатор одного анимационного канала"""
    path: str
    kind: TargetKind
    type_name: str
    property_name: str

    @classmethod
    def node(cls, path: str, property_name: str) -> 'Binding':
        return cls(path, TargetKind.NODE, NODE_TYPE_NAME, property_name)

    @classmethod
    def behavior(cls, path: str, type_name: str, property_name: str) -> 'Binding':
        return cls(path, TargetKind.BEHAVIOR, type_name, property_name)

    @property
    def property_stem(self) -> str:
        """Имя свойства без последнего символа (индекса компоненты)"""
        return self.property_name[:-1]

    @property
    def group_key(self) -> Tuple[str, TargetKind, str, str]:
        """Ключ группы каналов с общим решением о константности"""
        return (self.path, self.kind, self.type_name, self.property_stem)

    def with_type(self, type_name: str) -> 'Binding':
        return Binding(self.path, self.kind, type_name, self.property_name)

    def __str__(self):
        return f"{self.path or '<root>'} : {self.type_name}.{self.property_name}"


class ProxyRegistry:
    """
    Реестр прокси-типов.

    Прокси-тип записывается во время захвата, но при воспроизведении
    должен быть заменен на конкретный тип плеера. Для каждого прокси
    хранится имя типа плеера и фабрика его экземпляров.
    """

    def __init__(self):
        self._playback: Dict[str, Tuple[str, Callable]] = {}

    def register(self, proxy_type_name: str, playback_type_name: str, factory: Callable):
        """Регистрация прокси-типа"""
        if proxy_type_name in self._playback:
            logger.warning(f"Прокси-тип '{proxy_type_name}' уже зарегистрирован, перезапись")
        self._playback[proxy_type_name] = (playback_type_name, factory)
        logger.debug(f"Прокси {proxy_type_name} -> {playback_type_name}")

    def is_proxy(self, type_name: str) -> bool:
        return type_name in self._playback

    def playback_type(self, type_name: str) -> str:
        """Имя типа плеера для прокси-типа"""
        return self._playback[type_name][0]

    def create_playback(self, type_name: str):
        """Создает новый экземпляр компонента плеера"""
        return self._playback[type_name][1]()

    def __len__(self):
        return len(self._playback)
