"""
Кривые анимации, рабочий набор кривых и сжатие без потерь
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple, Any

import numpy as np

from core.bindings import Binding

logger = logging.getLogger(__name__)

# Допуск сжатия по умолчанию: машинный эпсилон одинарной точности
DEFAULT_COMPRESSION_TOLERANCE = float(np.finfo(np.float32).eps)


@dataclass
class Keyframe:
    """Ключевой кадр кривой"""
    time: float
    value: float


class Curve:
    """Кривая анимации одного канала: упорядоченные по времени ключи"""

    def __init__(self, keyframes: Optional[List[Keyframe]] = None):
        self._times: List[float] = []
        self._values: List[float] = []
        for kf in keyframes or []:
            self.add_key(kf.time, kf.value)

    def add_key(self, time: float, value: float):
        """Добавление ключа в конец кривой"""
        if self._times and time < self._times[-1]:
            raise ValueError(f"Ключ {time} раньше последнего ключа {self._times[-1]}")
        self._times.append(float(time))
        self._values.append(float(value))

    @property
    def keyframes(self) -> List[Keyframe]:
        return [Keyframe(t, v) for t, v in zip(self._times, self._values)]

    @property
    def times(self) -> np.ndarray:
        return np.asarray(self._times, dtype=np.float64)

    @property
    def values(self) -> np.ndarray:
        return np.asarray(self._values, dtype=np.float64)

    def __len__(self):
        return len(self._times)

    def is_constant(self, tolerance: float = 0.0) -> bool:
        """Все значения равны первому в пределах допуска"""
        if len(self._values) <= 1:
            return True
        values = self.values
        return bool(np.all(np.abs(values - values[0]) <= tolerance))

    def evaluate(self, time: float) -> float:
        """Линейная интерполяция значения кривой"""
        if not self._times:
            return 0.0
        return float(np.interp(time, self.times, self.values))

    def copy(self) -> 'Curve':
        curve = Curve()
        curve._times = list(self._times)
        curve._values = list(self._values)
        return curve

    def to_dict(self) -> Dict[str, Any]:
        return {'times': list(self._times), 'values': list(self._values)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Curve':
        curve = cls()
        for t, v in zip(data.get('times', []), data.get('values', [])):
            curve.add_key(t, v)
        return curve

    def __repr__(self):
        return f"Curve(keys={len(self)})"


def compress_curve(curve: Curve, tolerance: float = DEFAULT_COMPRESSION_TOLERANCE) -> Curve:
    """
    Сжатие кривой без потерь.

    Удаляет внутренние ключи, которые воспроизводятся линейной интерполяцией
    между оставленными соседями с точностью tolerance. Первый и последний
    ключи сохраняются всегда. Исходная кривая не изменяется.

    "Без потерь" означает точность хранения движка-хоста: допуск по умолчанию
    равен машинному эпсилону float32 (~1.19e-7) и применяется как абсолютное
    отклонение к значениям float64. Ключи, отличающиеся от интерполяции
    меньше чем на эпсилон, удаляются.

    Args:
        curve: Исходная кривая
        tolerance: Максимальное абсолютное отклонение значения

    Returns:
        Curve: Новая сжатая кривая
    """
    count = len(curve)
    if count <= 2:
        return curve.copy()

    times = curve.times
    values = curve.values

    kept = [0]
    anchor = 0
    for i in range(1, count - 1):
        nxt = i + 1
        t0, t1 = times[anchor], times[nxt]
        if t1 > t0:
            span = slice(anchor + 1, nxt)
            predicted = values[anchor] + (values[nxt] - values[anchor]) * (times[span] - t0) / (t1 - t0)
            if np.all(np.abs(predicted - values[span]) <= tolerance):
                continue
        kept.append(i)
        anchor = i
    kept.append(count - 1)

    result = Curve()
    for idx in kept:
        result.add_key(times[idx], values[idx])
    return result


class CurveArena:
    """
    Рабочий набор кривых.

    Кривые хранятся по целочисленному идентификатору привязки.
    Боковой индекс групп позволяет найти соседей по группе каналов
    за O(размер группы).
    """

    def __init__(self):
        self._bindings: List[Binding] = []
        self._curves: List[Curve] = []
        self._ids: Dict[Binding, int] = {}
        self._groups: Dict[Tuple, List[int]] = defaultdict(list)

    def add(self, binding: Binding, curve: Curve) -> Optional[int]:
        """
        Добавление кривой.

        Returns:
            Идентификатор привязки или None, если привязка уже существует
        """
        if binding in self._ids:
            logger.error(f"Дублирующаяся привязка, кривая отброшена: {binding}")
            return None

        binding_id = len(self._bindings)
        self._bindings.append(binding)
        self._curves.append(curve)
        self._ids[binding] = binding_id
        self._groups[binding.group_key].append(binding_id)
        return binding_id

    def id_of(self, binding: Binding) -> Optional[int]:
        return self._ids.get(binding)

    def binding(self, binding_id: int) -> Binding:
        return self._bindings[binding_id]

    def curve(self, binding_id: int) -> Curve:
        return self._curves[binding_id]

    def group_ids(self, binding_id: int) -> List[int]:
        """Все идентификаторы группы каналов, включая сам binding_id"""
        return list(self._groups[self._bindings[binding_id].group_key])

    def ids(self) -> range:
        return range(len(self._bindings))

    def items(self) -> Iterator[Tuple[Binding, Curve]]:
        return zip(self._bindings, self._curves)

    def __contains__(self, binding: Binding) -> bool:
        return binding in self._ids

    def __len__(self):
        return len(self._bindings)
