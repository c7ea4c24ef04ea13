"""Тесты кодека каналов трансформации."""

import pytest

from core import channels
from core.channels import ChannelGroup, PoseSample


class TestChannelLayout:
    def test_curve_count(self):
        assert channels.CURVE_COUNT == 11

    def test_group_sizes(self):
        assert len(channels.group_channels(ChannelGroup.POSITION)) == 3
        assert len(channels.group_channels(ChannelGroup.ROTATION)) == 4
        assert len(channels.group_channels(ChannelGroup.SCALE)) == 3
        assert channels.group_channels(ChannelGroup.ACTIVITY) == [10]

    def test_channel_names(self):
        names = [channels.channel_name(i) for i in range(channels.CURVE_COUNT)]
        assert names == [
            "m_LocalPosition.x", "m_LocalPosition.y", "m_LocalPosition.z",
            "m_LocalRotation.x", "m_LocalRotation.y", "m_LocalRotation.z", "m_LocalRotation.w",
            "m_LocalScale.x", "m_LocalScale.y", "m_LocalScale.z",
            "m_IsActive",
        ]

    @pytest.mark.parametrize("index", [-1, 11, 42])
    def test_invalid_index_raises(self, index):
        with pytest.raises(ValueError):
            channels.channel_name(index)
        with pytest.raises(ValueError):
            channels.decode(PoseSample(0.0), index)


class TestCodec:
    def test_decode_fields(self):
        sample = PoseSample(0.0, True, [1, 2, 3], [0.1, 0.2, 0.3, 0.9], [4, 5, 6])
        values = [channels.decode(sample, i) for i in range(channels.CURVE_COUNT)]
        assert values == pytest.approx([1, 2, 3, 0.1, 0.2, 0.3, 0.9, 4, 5, 6, 1.0])

    def test_disabled_decodes_to_zero(self):
        assert channels.decode(PoseSample(0.0, enabled=False), 10) == 0.0

    def test_reencode_is_idempotent(self):
        source = PoseSample(0.5, False, [1.5, -2.0, 3.25], [0.0, 0.7071, 0.0, 0.7071], [2.0, 1.0, 0.5])
        for index in range(channels.CURVE_COUNT):
            value = channels.decode(source, index)
            fresh = PoseSample(0.0)
            channels.encode(fresh, index, value)
            assert channels.decode(fresh, index) == value
