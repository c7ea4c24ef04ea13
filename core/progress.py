"""
Иерархический синхронный прогресс для этапов финализации
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class _Section:
    total: int
    prefix: str
    label: str
    done: int = 0


class ProgressSink:
    """
    Приемник прогресса.

    begin() открывает вложенную секцию из step_count шагов и сразу
    выполняет body внутри нее. По завершении body секция закрывается
    и засчитывается родителю как один шаг.
    """

    def __init__(self):
        self._stack: List[_Section] = []

    def begin(self, step_count: int, prefix: str, label: str, body: Callable[[], None]):
        section = _Section(max(int(step_count), 1), prefix, label)
        self._stack.append(section)
        self._on_begin(section)
        try:
            body()
        finally:
            self._stack.pop()
            if self._stack:
                self._stack[-1].done += 1

    def step(self, label: str = ""):
        if not self._stack:
            self._report(1.0, label)
            return
        section = self._stack[-1]
        self._report(self.fraction, self._title() + label)
        section.done += 1

    @property
    def fraction(self) -> float:
        """Общая доля выполнения с учетом вложенных секций"""
        value = 0.0
        scale = 1.0
        for section in self._stack:
            value += scale * min(section.done, section.total) / section.total
            scale /= section.total
        return min(value, 1.0)

    @property
    def depth(self) -> int:
        return len(self._stack)

    def _title(self) -> str:
        """'Префикс / Префикс / Метка' текущей секции"""
        prefixes = [s.prefix for s in self._stack if s.prefix]
        label = self._stack[-1].label if self._stack else ""
        if not prefixes:
            return label
        return " / ".join(prefixes) + " / " + label

    def _on_begin(self, section: _Section):
        pass

    def _report(self, fraction: float, text: str):
        pass


class NullProgress(ProgressSink):
    """Прогресс без вывода"""


class LoggingProgress(ProgressSink):
    """Прогресс в лог: секции на INFO, шаги на DEBUG"""

    def __init__(self, log: Optional[logging.Logger] = None):
        super().__init__()
        self.log = log or logger

    def _on_begin(self, section: _Section):
        title = (section.prefix + section.label).strip()
        if title:
            self.log.info(f"{title} ({section.total})")

    def _report(self, fraction: float, text: str):
        self.log.debug(f"[{fraction * 100:5.1f}%] {text}")


class CallbackProgress(ProgressSink):
    """Прогресс для внешнего интерфейса: callback(fraction, text)"""

    def __init__(self, callback: Callable[[float, str], None]):
        super().__init__()
        self.callback = callback

    def _report(self, fraction: float, text: str):
        self.callback(fraction, text)
