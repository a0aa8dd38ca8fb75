"""
Provider registry and task policy table.

Both are built once at startup from AIConfig and are read-only afterwards.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ai_editor.core.config import AIConfig, ProviderConfig
from ai_editor.core.logging import get_logger
from ai_editor.core.security import CredentialSource
from ai_editor.services.ai_providers.errors import ConfigurationError
from ai_editor.services.ai_providers.types import Provider, ProtocolKind, TaskType

logger = get_logger()


class ProviderRegistry:
    """Static catalog of known providers plus their resolved credentials."""

    def __init__(self, providers: Iterable[Provider], secrets: Optional[Mapping[str, str]] = None):
        self._providers: Dict[str, Provider] = {}
        for provider in providers:
            if provider.id in self._providers:
                raise ConfigurationError(f"Duplicate provider id: {provider.id}")
            self._providers[provider.id] = provider
        # provider id -> secret; only non-empty secrets are kept
        self._secrets = {pid: s for pid, s in (secrets or {}).items() if s and pid in self._providers}

    def get(self, provider_id: str) -> Optional[Provider]:
        return self._providers.get(provider_id)

    def all(self) -> List[Provider]:
        """All catalog entries, configured or not, in priority order."""
        return sorted(self._providers.values(), key=lambda p: p.priority)

    def is_configured(self, provider_id: str) -> bool:
        return provider_id in self._secrets

    def list_configured(self) -> List[Provider]:
        """Providers with a non-empty credential, ascending priority."""
        return [p for p in self.all() if p.id in self._secrets]

    def credential_for(self, provider_id: str) -> Optional[str]:
        return self._secrets.get(provider_id)

    def __len__(self) -> int:
        return len(self._providers)


class PolicyTable:
    """TaskType -> ordered provider preference list."""

    def __init__(self, policies: Mapping[TaskType, Sequence[str]]):
        table: Dict[TaskType, Tuple[str, ...]] = {}
        for task_type, ids in policies.items():
            ids = tuple(ids)
            if len(set(ids)) != len(ids):
                raise ConfigurationError(f"Duplicate provider in policy for {task_type.value}")
            if ids:
                table[task_type] = ids
        if TaskType.GENERAL not in table:
            raise ConfigurationError("Task policy 'general' must list at least one provider")
        self._table = table

    def policy_for(self, task_type: TaskType) -> Tuple[str, ...]:
        return self._table.get(TaskType(task_type), self._table[TaskType.GENERAL])

    def referenced_ids(self) -> set:
        return {pid for ids in self._table.values() for pid in ids}


def _parse_task_type(value: str) -> TaskType:
    try:
        return TaskType(value)
    except ValueError:
        raise ConfigurationError(f"Unknown task type: {value}")


def provider_from_config(cfg: ProviderConfig, credentials: CredentialSource, environ: Mapping[str, str]) -> Provider:
    """Turn one config entry into a Provider value."""
    try:
        protocol = ProtocolKind(cfg.protocol)
    except ValueError:
        raise ConfigurationError(f"Unknown protocol '{cfg.protocol}' for provider {cfg.id}")
    model = (environ.get(cfg.model_env) if cfg.model_env else None) or cfg.model
    return Provider(
        id=cfg.id,
        display_name=cfg.name,
        endpoint_template=cfg.endpoint,
        model_id=model,
        credential_ref=cfg.credential_ref,
        protocol_kind=protocol,
        strength_tags=frozenset(_parse_task_type(s) for s in cfg.strengths),
        priority=cfg.priority,
        extra_headers=dict(cfg.headers),
        organization=credentials.resolve(cfg.organization_ref),
        project=credentials.resolve(cfg.project_ref),
    )


def build_registry(ai_config: AIConfig, environ: Mapping[str, str]) -> ProviderRegistry:
    """
    Build the registry from config. Missing credentials never fail the build;
    the provider is just left unconfigured.
    """
    credentials = CredentialSource(ai_config.credentials, environ)
    providers = [provider_from_config(cfg, credentials, environ) for cfg in ai_config.providers]
    secrets = {}
    for provider in providers:
        secret = credentials.resolve(provider.credential_ref)
        if secret:
            secrets[provider.id] = secret
        else:
            logger.info("AI provider %s not configured (%s missing)", provider.id, provider.credential_ref)
    registry = ProviderRegistry(providers, secrets)
    logger.info(
        "AI provider registry ready: %d known, configured=%s",
        len(registry),
        [p.id for p in registry.list_configured()],
    )
    return registry


def build_policy_table(ai_config: AIConfig, registry: Optional[ProviderRegistry] = None) -> PolicyTable:
    table = PolicyTable({_parse_task_type(k): v for k, v in ai_config.task_policies.items()})
    if registry is not None:
        unknown = sorted(pid for pid in table.referenced_ids() if registry.get(pid) is None)
        if unknown:
            logger.warning("Task policies reference unknown providers: %s", unknown)
    return table
