"""Тесты загрузки настроек."""

from config.default_settings import (create_default_settings, flatten_dict, load_settings,
                                     save_settings, unflatten_dict)


class TestSettings:
    def test_defaults_contain_recording_keys(self):
        settings = create_default_settings()
        assert settings["recording.begin_key"] == "F5"
        assert settings["recording.finish_key"] == "F6"
        assert settings["recording.compression_tolerance"] is None

    def test_missing_file_falls_back(self, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml")
        assert settings["recording.finish_key"] == "F6"

    def test_overrides_merge_with_defaults(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("recording:\n  begin_key: F1\n", encoding='utf-8')

        settings = load_settings(path)

        assert settings["recording.begin_key"] == "F1"
        assert settings["recording.finish_key"] == "F6"

    def test_broken_yaml_falls_back(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("recording: [unclosed\n", encoding='utf-8')
        assert load_settings(path)["recording.begin_key"] == "F5"

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "saved.yaml"
        settings = create_default_settings()
        settings["recording.constant_tolerance"] = 0.5
        save_settings(path, settings)
        assert load_settings(path)["recording.constant_tolerance"] == 0.5

    def test_flatten_roundtrip(self):
        nested = {"a": {"b": 1, "c": {"d": 2}}, "e": 3}
        assert flatten_dict(nested) == {"a.b": 1, "a.c.d": 2, "e": 3}
        assert unflatten_dict(flatten_dict(nested)) == nested
