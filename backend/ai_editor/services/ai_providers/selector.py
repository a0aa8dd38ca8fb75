"""
Selects which provider serves a task.
"""

from ai_editor.core.logging import get_logger
from ai_editor.services.ai_providers.errors import ConfigurationError
from ai_editor.services.ai_providers.registry import PolicyTable, ProviderRegistry
from ai_editor.services.ai_providers.types import Provider, TaskType

logger = get_logger()


class Selector:
    """Task fit first, then availability."""

    def __init__(self, registry: ProviderRegistry, policies: PolicyTable):
        self._registry = registry
        self._policies = policies

    def select(self, task_type: TaskType) -> Provider:
        """
        Pick the provider for a task.

        Walks the task's preference list and returns the first configured
        provider. If none of them is configured, returns the configured
        provider with the lowest priority value.

        Raises:
            ConfigurationError: If no provider is configured at all.
        """
        task_type = TaskType(task_type)
        configured = self._registry.list_configured()
        if not configured:
            raise ConfigurationError("No AI providers available. Please configure at least one API key.")

        configured_ids = {p.id for p in configured}
        for provider_id in self._policies.policy_for(task_type):
            if provider_id in configured_ids:
                provider = self._registry.get(provider_id)
                logger.debug("Auto-selected %s for %s", provider_id, task_type.value)
                return provider

        provider = configured[0]
        logger.debug("No preferred provider for %s, using %s", task_type.value, provider.id)
        return provider
