"""Тесты синтеза кривых из серий поз."""

import pytest

from core.bindings import Binding, TargetKind
from core.channels import ChannelGroup
from core.curve_synthesizer import is_group_constant, synthesize
from core.curves import Curve, CurveArena


class TestGroupConstancy:
    def test_identical_series_is_constant(self, make_series):
        series = make_series()
        for group in ChannelGroup:
            assert is_group_constant(series, group)

    def test_tiny_position_noise_is_constant(self, make_series):
        series = make_series()
        series[2].position[0] += 1e-7
        assert is_group_constant(series, ChannelGroup.POSITION)

    def test_negated_quaternion_is_not_equal(self, make_series):
        series = make_series()
        series[1].rotation = -series[1].rotation
        assert not is_group_constant(series, ChannelGroup.ROTATION)


class TestSynthesize:
    def test_identical_samples_yield_no_curves(self, make_series):
        arena = CurveArena()
        assert synthesize("A", make_series(), arena) == []
        assert len(arena) == 0

    def test_empty_series(self):
        arena = CurveArena()
        assert synthesize("A", [], arena) == []

    def test_rotation_change_yields_four_curves(self, make_series):
        series = make_series()
        series[3].rotation[1] = 0.5
        arena = CurveArena()

        added = synthesize("A", series, arena)

        assert len(added) == 4
        assert {b.property_name for b in added} == {
            "m_LocalRotation.x", "m_LocalRotation.y", "m_LocalRotation.z", "m_LocalRotation.w"}
        assert all(b.type_name == "Transform" and b.kind is TargetKind.BEHAVIOR for b in added)

    @pytest.mark.parametrize("component", range(4))
    def test_single_rotation_scalar_change_yields_four_curves(self, make_series, component):
        series = make_series()
        series[2].rotation[component] += 0.3
        arena = CurveArena()

        added = synthesize("A", series, arena)

        assert [b.property_name for b in added] == [
            "m_LocalRotation.x", "m_LocalRotation.y", "m_LocalRotation.z", "m_LocalRotation.w"]

    def test_curve_values_follow_samples(self, make_series):
        series = make_series(count=4, dt=0.5)
        for i, sample in enumerate(series):
            sample.position[1] = float(i)
        arena = CurveArena()

        synthesize("Arm/Hand", series, arena)

        curve = arena.curve(arena.id_of(Binding.behavior("Arm/Hand", "Transform", "m_LocalPosition.y")))
        assert [kf.time for kf in curve.keyframes] == pytest.approx([0.0, 0.5, 1.0, 1.5])
        assert [kf.value for kf in curve.keyframes] == pytest.approx([0.0, 1.0, 2.0, 3.0])
        x_curve = arena.curve(arena.id_of(Binding.behavior("Arm/Hand", "Transform", "m_LocalPosition.x")))
        assert x_curve.is_constant()

    def test_activity_binds_to_node(self, make_series):
        series = make_series()
        series[-1].enabled = False
        arena = CurveArena()

        added = synthesize("A", series, arena)

        assert added == [Binding.node("A", "m_IsActive")]
        values = [kf.value for kf in arena.curve(0).keyframes]
        assert values == [1.0, 1.0, 1.0, 1.0, 0.0]

    def test_duplicate_keeps_existing(self, make_series, caplog):
        series = make_series()
        series[1].scale[2] = 4.0
        arena = CurveArena()
        existing = Curve()
        arena.add(Binding.behavior("A", "Transform", "m_LocalScale.z"), existing)

        added = synthesize("A", series, arena)

        assert len(added) == 2
        assert arena.curve(0) is existing
        assert len(arena) == 3
        assert "m_LocalScale.z" in caplog.text
