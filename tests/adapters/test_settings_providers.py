"""Tests for settings providers."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from webplanner.adapters.settings import InMemorySettingsProvider, JsonFileSettingsProvider
from webplanner.services.request_router import RequestRouter
from webplanner.settings import ApiKeys, UserPreferences


class TestJsonFileSettingsProvider:
    def test_missing_file_gives_defaults(self, tmp_path):
        provider = JsonFileSettingsProvider(tmp_path / "missing.json")
        assert provider.preferences() == UserPreferences()
        assert provider.api_keys().llm_api_key == ""

    def test_reads_storage_shape(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(
            json.dumps(
                {
                    "webplanner_settings": {"useProxyForAI": True, "proxyPort": 1080},
                    "webplanner_api_keys": {"llmApiKey": "sk-1", "amapApiKey": "a-1"},
                }
            ),
            encoding="utf-8",
        )
        provider = JsonFileSettingsProvider(path)

        prefs = provider.preferences()
        assert prefs.use_proxy_for_ai is True
        assert prefs.proxy_port == 1080
        assert "proxy_host" not in prefs.model_fields_set
        assert provider.api_keys().weather_key == "a-1"

    def test_edits_seen_without_restart(self, tmp_path):
        path = tmp_path / "settings.json"
        provider = JsonFileSettingsProvider(path)
        assert provider.preferences().use_proxy_for_ai is False
        path.write_text('{"webplanner_settings": {"useProxyForAI": true}}', encoding="utf-8")
        assert provider.preferences().use_proxy_for_ai is True

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            '["a list"]',
            '{"webplanner_settings": {"proxyPort": "not-a-port"}}',
            '{"webplanner_settings": {"proxyPort": 70000}}',
        ],
    )
    def test_corrupt_record_falls_back_to_defaults(self, tmp_path, content):
        path = tmp_path / "settings.json"
        path.write_text(content, encoding="utf-8")
        assert JsonFileSettingsProvider(path).preferences() == UserPreferences()

    def test_save_round_trip_uses_camel_case(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        provider = JsonFileSettingsProvider(path)
        provider.save(
            UserPreferences(use_proxy_for_ai=True), ApiKeys(llm_api_key="sk-9")
        )

        stored = json.loads(path.read_text(encoding="utf-8"))
        assert stored["webplanner_settings"]["useProxyForAI"] is True
        assert stored["webplanner_api_keys"]["llmApiKey"] == "sk-9"
        assert provider.api_keys().llm_api_key == "sk-9"

    def test_save_keeps_unset_proxy_fields_unset(self, tmp_path):
        path = tmp_path / "settings.json"
        provider = JsonFileSettingsProvider(path)
        provider.save(UserPreferences(useProxyForAI=True), ApiKeys())

        stored = json.loads(path.read_text(encoding="utf-8"))
        assert "proxyHost" not in stored["webplanner_settings"]
        router = RequestRouter(
            settings=provider,
            default_proxy_host="10.0.0.2",
            default_proxy_port=3128,
        )
        assert router.get_proxy_config().url == "http://10.0.0.2:3128"


class TestInMemorySettingsProvider:
    def test_updates_accept_both_spellings(self):
        provider = InMemorySettingsProvider()
        provider.update_preferences(useProxyForAI=True)
        provider.update_preferences(proxy_port=8080)
        prefs = provider.preferences()
        assert prefs.use_proxy_for_ai is True
        assert prefs.proxy_port == 8080
        assert "proxy_host" not in prefs.model_fields_set

    def test_invalid_update_rejected(self):
        provider = InMemorySettingsProvider()
        with pytest.raises(ValidationError):
            provider.update_preferences(proxyPort=0)
        assert provider.preferences() == UserPreferences()

    def test_masked_keys(self):
        keys = ApiKeys(llmApiKey="sk-abcdef")
        masked = keys.masked()
        assert masked["llm_api_key"] == "sk-a..."
        assert masked["amap_api_key"] == "<unset>"
