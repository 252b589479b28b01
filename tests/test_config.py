"""Tests for configuration defaults and environment overrides."""

from foodbank_ai.config import Config, LLMConfig, OutreachConfig


def test_defaults():
    config = Config()
    assert config.analysis.default_daily_demand["protein"] == 80
    assert config.analysis.fallback_daily_demand == 10.0
    assert config.analysis.critical_days == 3.0
    assert config.analysis.low_days == 5.0
    assert config.outreach.hot_days == 30
    assert config.outreach.warm_days == 90


def test_demand_for_fallback():
    config = Config()
    assert config.demand_for("protein", {"protein": 12}) == 12
    assert config.demand_for("snacks", {"protein": 12}) == 10.0
    assert config.demand_for(None, {"protein": 12}) == 10.0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("FOODBANK_MAX_SUPPLIERS", "3")
    monkeypatch.setenv("FOODBANK_LLM_TIMEOUT", "15")
    monkeypatch.setenv("FOODBANK_LLM_MODEL", "local-model")
    monkeypatch.delenv("FOODBANK_LLM_API_KEY", raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    assert OutreachConfig().max_suppliers == 3
    llm = LLMConfig()
    assert llm.timeout_seconds == 15.0
    assert llm.model == "local-model"
    assert llm.api_key == "sk-test"


def test_bad_environment_values_fall_back(monkeypatch):
    monkeypatch.setenv("FOODBANK_MAX_SUPPLIERS", "many")
    monkeypatch.setenv("FOODBANK_LLM_TIMEOUT", "")
    assert OutreachConfig().max_suppliers == 5
    assert LLMConfig().timeout_seconds == 60.0


def test_output_path_coerced(tmp_path):
    config = Config(output_path=str(tmp_path))
    assert config.output_path == tmp_path
