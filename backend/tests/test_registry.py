"""
Tests for the provider registry, policy table and selector.
"""

import pytest

from ai_editor.core.config import AIConfig, ProviderConfig
from ai_editor.core.security import encrypt_api_key
from ai_editor.services.ai_providers import (
    ConfigurationError,
    PolicyTable,
    ProtocolKind,
    ProviderRegistry,
    Selector,
    TaskType,
    build_policy_table,
    build_registry,
)
from tests.conftest import make_provider


class TestProviderRegistry:
    """Tests for ProviderRegistry."""

    def test_list_configured_is_priority_ordered(self):
        registry = ProviderRegistry(
            [make_provider("slow", priority=5), make_provider("fast", priority=0), make_provider("mid", priority=2)],
            {"slow": "k1", "fast": "k2", "mid": "k3"},
        )
        assert [p.id for p in registry.list_configured()] == ["fast", "mid", "slow"]

    def test_empty_secret_means_unconfigured(self):
        registry = ProviderRegistry([make_provider("a"), make_provider("b", priority=1)], {"a": "", "b": "key"})
        assert not registry.is_configured("a")
        assert registry.is_configured("b")
        assert [p.id for p in registry.list_configured()] == ["b"]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ConfigurationError, match="Duplicate provider id"):
            ProviderRegistry([make_provider("a"), make_provider("a", priority=1)])

    def test_secrets_for_unknown_ids_ignored(self):
        registry = ProviderRegistry([make_provider("a")], {"ghost": "key"})
        assert registry.list_configured() == []
        assert registry.credential_for("ghost") is None

    def test_unknown_lookup_returns_none(self):
        registry = ProviderRegistry([make_provider("a")])
        assert registry.get("nope") is None
        assert len(registry) == 1


class TestBuildRegistry:
    """Tests for building the registry from AIConfig."""

    def test_default_catalog_from_environment(self):
        registry = build_registry(AIConfig(), {"GROQ_API_KEY": "gk", "PERPLEXITY_API_KEY": "pk"})
        assert [p.id for p in registry.all()] == ["groq", "openai", "openrouter", "google", "perplexity"]
        assert [p.id for p in registry.list_configured()] == ["groq", "perplexity"]
        assert registry.get("google").protocol_kind == ProtocolKind.GEMINI
        assert registry.get("perplexity").protocol_kind == ProtocolKind.PERPLEXITY_SEARCH

    def test_whitespace_key_is_unconfigured(self):
        registry = build_registry(AIConfig(), {"OPENAI_API_KEY": "   "})
        assert not registry.is_configured("openai")

    def test_model_override_from_environment(self):
        registry = build_registry(AIConfig(), {"OPENROUTER_MODEL": "meta/llama-3"})
        assert registry.get("openrouter").model_id == "meta/llama-3"
        assert registry.get("perplexity").model_id == "sonar"

    def test_gemini_endpoint_includes_model(self):
        registry = build_registry(AIConfig(), {})
        assert registry.get("google").endpoint.endswith("/models/gemini-pro:generateContent")

    def test_openai_org_and_project_resolved(self):
        registry = build_registry(
            AIConfig(),
            {"OPENAI_API_KEY": "k", "OPENAI_ORG_ID": "org-1", "OPENAI_PROJECT_ID": "proj-1"},
        )
        openai = registry.get("openai")
        assert openai.organization == "org-1"
        assert openai.project == "proj-1"

    def test_config_credentials_take_precedence(self):
        config = AIConfig(credentials={"GROQ_API_KEY": "from-config"})
        registry = build_registry(config, {"GROQ_API_KEY": "from-env"})
        assert registry.credential_for("groq") == "from-config"

    def test_encrypted_credential_is_decrypted(self, monkeypatch):
        monkeypatch.setenv("AI_EDITOR_ENCRYPTION_KEY", "test-password")
        encrypted = encrypt_api_key("secret-groq-key", "test-password")
        config = AIConfig(credentials={"GROQ_API_KEY": f"enc:{encrypted}"})
        registry = build_registry(config, {})
        assert registry.credential_for("groq") == "secret-groq-key"

    def test_unknown_protocol_rejected(self):
        config = AIConfig(
            providers=[
                ProviderConfig(
                    id="x",
                    name="X",
                    protocol="carrier-pigeon",
                    endpoint="https://x.test",
                    model="m",
                    credential_ref="X_KEY",
                )
            ]
        )
        with pytest.raises(ConfigurationError, match="Unknown protocol"):
            build_registry(config, {})


class TestPolicyTable:
    """Tests for PolicyTable."""

    def test_missing_task_uses_general(self):
        table = PolicyTable({TaskType.GENERAL: ["a", "b"]})
        assert table.policy_for(TaskType.SEARCH) == ("a", "b")

    def test_general_required(self):
        with pytest.raises(ConfigurationError, match="general"):
            PolicyTable({TaskType.SEARCH: ["a"]})

    def test_duplicates_rejected(self):
        with pytest.raises(ConfigurationError, match="Duplicate provider"):
            PolicyTable({TaskType.GENERAL: ["a", "a"]})

    def test_unknown_task_type_in_config_rejected(self):
        config = AIConfig(task_policies={"general": ["groq"], "poetry": ["groq"]})
        with pytest.raises(ConfigurationError, match="Unknown task type"):
            build_policy_table(config)

    def test_default_policies(self):
        table = build_policy_table(AIConfig())
        assert table.policy_for(TaskType.SEARCH)[0] == "perplexity"
        assert table.policy_for(TaskType.CODE_GENERATION)[0] == "groq"


class TestSelector:
    """Tests for Selector."""

    def _selector(self, secrets):
        registry = build_registry(AIConfig(), secrets)
        return Selector(registry, build_policy_table(AIConfig(), registry))

    def test_search_prefers_perplexity(self):
        selector = self._selector({"GROQ_API_KEY": "g", "PERPLEXITY_API_KEY": "p"})
        assert selector.select(TaskType.SEARCH).id == "perplexity"

    def test_first_configured_in_policy(self):
        selector = self._selector({"OPENAI_API_KEY": "o", "GOOGLE_API_KEY": "g"})
        assert selector.select(TaskType.EXPLANATION).id == "openai"

    def test_falls_back_to_lowest_priority_configured(self):
        # perplexity is configured but in no code-generation policy entry
        selector = self._selector({"PERPLEXITY_API_KEY": "p"})
        assert selector.select(TaskType.CODE_GENERATION).id == "perplexity"

    def test_no_configured_provider_raises(self):
        selector = self._selector({})
        with pytest.raises(ConfigurationError, match="No AI providers available"):
            selector.select(TaskType.GENERAL)

    def test_selection_is_deterministic(self):
        selector = self._selector({"GROQ_API_KEY": "g", "OPENAI_API_KEY": "o"})
        picks = {selector.select(TaskType.DEBUGGING).id for _ in range(10)}
        assert picks == {"groq"}

    def test_accepts_task_type_string(self):
        selector = self._selector({"GROQ_API_KEY": "g"})
        assert selector.select("optimization").id == "groq"
