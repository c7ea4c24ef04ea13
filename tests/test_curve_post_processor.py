"""Тесты постобработки кривых."""

import pytest

from core.bindings import Binding, ProxyRegistry
from core.components import RecordedData
from core.curve_post_processor import CurvePostProcessor, UnresolvableTargetError
from core.curves import Curve, CurveArena
from core.progress import CallbackProgress
from core.scene import Behavior, SceneNode


class Dial(Behavior):
    type_name = "Dial"


class DialProxy(Behavior):
    type_name = "DialProxy"


class DialPlayback(Behavior):
    type_name = "DialPlayback"


def make_curve(values, dt=0.1):
    curve = Curve()
    for i, value in enumerate(values):
        curve.add_key(i * dt, value)
    return curve


@pytest.fixture
def scene():
    root = SceneNode("Root")
    node = SceneNode("A", parent=root)
    node.add_behavior(Dial())
    return root


def recorded_properties(node):
    recorded = node.get_behavior(RecordedData.type_name)
    return sorted(entry.property_name for entry in recorded.data) if recorded else []


class TestConstantElimination:
    def test_fully_constant_group_is_dropped(self, scene):
        arena = CurveArena()
        for axis in "xyz":
            arena.add(Binding.behavior("A", "Dial", f"offset.{axis}"), make_curve([1.0, 1.0, 1.0]))

        result = CurvePostProcessor(scene).process(arena)

        assert result.retained == 0
        assert result.dropped_constant == 3
        assert scene.find_child("A").get_behavior(RecordedData.type_name) is None

    def test_partially_constant_group_is_kept(self, scene):
        arena = CurveArena()
        arena.add(Binding.behavior("A", "Dial", "offset.x"), make_curve([1.0, 1.0, 1.0]))
        arena.add(Binding.behavior("A", "Dial", "offset.y"), make_curve([2.0, 2.0, 2.0]))
        arena.add(Binding.behavior("A", "Dial", "offset.z"), make_curve([0.0, 1.0, 4.0]))

        result = CurvePostProcessor(scene).process(arena)

        assert result.retained == 3
        assert recorded_properties(scene.find_child("A")) == ["offset.x", "offset.y", "offset.z"]

    def test_siblings_retained_when_two_compress_to_constant(self, scene):
        arena = CurveArena()
        # Отклонения меньше допуска: после сжатия кривые станут константными
        arena.add(Binding.behavior("A", "Dial", "offset.x"), make_curve([1.0, 1.2, 1.0]))
        arena.add(Binding.behavior("A", "Dial", "offset.y"), make_curve([3.0, 2.9, 3.0]))
        arena.add(Binding.behavior("A", "Dial", "offset.z"), make_curve([0.0, 5.0, 10.0, 2.0]))

        result = CurvePostProcessor(scene, tolerance=0.5).process(arena)

        assert result.retained == 3
        assert recorded_properties(scene.find_child("A")) == ["offset.x", "offset.y", "offset.z"]

    def test_compression_can_make_group_constant(self, scene):
        arena = CurveArena()
        arena.add(Binding.behavior("A", "Dial", "level"), make_curve([1.0, 1.2, 1.0]))

        result = CurvePostProcessor(scene, tolerance=0.5).process(arena)

        assert result.retained == 0
        assert result.dropped_constant == 1

    def test_order_independent(self, scene):
        curves = {
            "offset.x": [1.0, 1.0, 1.0],
            "offset.y": [0.0, 1.0, 4.0],
            "level": [7.0, 7.0, 7.0],
            "gain": [0.0, 0.5, 0.0],
        }

        def run(names):
            root = SceneNode("Root")
            SceneNode("A", parent=root).add_behavior(Dial())
            arena = CurveArena()
            for name in names:
                arena.add(Binding.behavior("A", "Dial", name), make_curve(curves[name]))
            CurvePostProcessor(root).process(arena)
            return recorded_properties(root.find_child("A"))

        forward = run(list(curves))
        backward = run(list(reversed(list(curves))))
        assert forward == backward == ["gain", "offset.x", "offset.y"]


class TestCompression:
    def test_custom_compressor_receives_tolerance(self, scene):
        calls = []

        def compressor(curve, tolerance):
            calls.append(tolerance)
            return curve.copy()

        arena = CurveArena()
        arena.add(Binding.behavior("A", "Dial", "level"), make_curve([0.0, 1.0]))
        CurvePostProcessor(scene, compressor=compressor, tolerance=0.25).process(arena)

        assert calls == [0.25]

    def test_aggregate_holds_compressed_curve(self, scene):
        arena = CurveArena()
        arena.add(Binding.behavior("A", "Dial", "level"), make_curve([0.0, 1.0, 2.0, 3.0]))

        CurvePostProcessor(scene).process(arena)

        entry = scene.find_child("A").get_behavior(RecordedData.type_name).find("level")
        assert entry.path == "A"
        assert entry.type_name == "Dial"
        assert len(entry.curve) == 2


class TestProxyRemapping:
    def test_proxy_binding_is_rewritten_once(self):
        root = SceneNode("Root")
        node = SceneNode("A", parent=root)
        node.add_behavior(DialProxy())

        registry = ProxyRegistry()
        registry.register("DialProxy", "DialPlayback", DialPlayback)

        arena = CurveArena()
        arena.add(Binding.behavior("A", "DialProxy", "angle"), make_curve([0.0, 1.0, 3.0]))
        arena.add(Binding.behavior("A", "DialProxy", "speed"), make_curve([1.0, 0.0, 1.0]))

        result = CurvePostProcessor(root, proxy_registry=registry).process(arena)

        assert result.remapped == 2
        assert len([b for b in node.behaviors if b.type_name == "DialPlayback"]) == 1
        recorded = node.get_behavior(RecordedData.type_name)
        assert {entry.type_name for entry in recorded.data} == {"DialPlayback"}

    def test_existing_playback_is_reused(self):
        root = SceneNode("Root")
        node = SceneNode("A", parent=root)
        existing = node.add_behavior(DialPlayback())

        registry = ProxyRegistry()
        registry.register("DialProxy", "DialPlayback", DialPlayback)

        arena = CurveArena()
        arena.add(Binding.behavior("A", "DialProxy", "angle"), make_curve([0.0, 1.0, 3.0]))
        CurvePostProcessor(root, proxy_registry=registry).process(arena)

        assert [b for b in node.behaviors if b.type_name == "DialPlayback"] == [existing]


class TestTargetResolution:
    def test_missing_node_raises(self, scene):
        arena = CurveArena()
        arena.add(Binding.behavior("Missing", "Dial", "level"), make_curve([0.0, 1.0]))

        with pytest.raises(UnresolvableTargetError) as excinfo:
            CurvePostProcessor(scene).process(arena)
        assert excinfo.value.binding.path == "Missing"

    def test_missing_behavior_raises(self, scene):
        arena = CurveArena()
        arena.add(Binding.behavior("A", "Knob", "level"), make_curve([0.0, 1.0]))

        with pytest.raises(UnresolvableTargetError):
            CurvePostProcessor(scene).process(arena)

    def test_progress_steps_reported(self, scene):
        reports = []
        arena = CurveArena()
        arena.add(Binding.behavior("A", "Dial", "level"), make_curve([0.0, 1.0]))
        arena.add(Binding.behavior("A", "Dial", "gain"), make_curve([1.0, 0.0]))

        CurvePostProcessor(scene).process(arena, CallbackProgress(lambda f, text: reports.append(text)))

        assert reports == ["Compressing Data: level", "Compressing Data: gain"]
