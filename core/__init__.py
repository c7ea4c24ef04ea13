from .bindings import Binding, TargetKind, ProxyRegistry
from .curves import Curve, Keyframe, CurveArena, compress_curve
from .scene import SceneNode, Behavior, Renderer, Material, AudioSource
from .components import PropertyRecorder, BehaviorPropertyRecorder, RecordedData, RecordedAudio
from .session import HierarchyRecorder, SessionState

__all__ = [
    "Binding",
    "TargetKind",
    "ProxyRegistry",
    "Curve",
    "Keyframe",
    "CurveArena",
    "compress_curve",
    "SceneNode",
    "Behavior",
    "Renderer",
    "Material",
    "AudioSource",
    "PropertyRecorder",
    "BehaviorPropertyRecorder",
    "RecordedData",
    "RecordedAudio",
    "HierarchyRecorder",
    "SessionState",
]
