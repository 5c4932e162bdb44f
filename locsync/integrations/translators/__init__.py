"""Translation provider registry.

Provider modules are imported on first use only, so starting the CLI does not
pay for HTTP client imports of providers that are never selected.
"""

from __future__ import annotations

import importlib
import logging

from locsync.core.config import AppSettings
from locsync.core.errors import ConfigurationError
from locsync.integrations.translators.base import TranslateArgs, TranslationService


logger = logging.getLogger(__name__)

_SERVICE_IMPORT_PATHS: dict[str, str] = {
    "google-translate": "locsync.integrations.translators.google:GoogleTranslate",
    "deepl": "locsync.integrations.translators.deepl:DeepLTranslator",
    "azure": "locsync.integrations.translators.azure:AzureTranslator",
    "manual": "locsync.integrations.translators.manual:ManualTranslation",
}

# Populated by tests only.
_fake_services: dict[str, TranslationService] = {}


def get_service_names() -> list[str]:
    return list(_SERVICE_IMPORT_PATHS)


def inject_fake_service(name: str, service: TranslationService) -> None:
    _fake_services[name] = service


def clear_fake_services() -> None:
    _fake_services.clear()


def instantiate_service(name: str, settings: AppSettings) -> TranslationService:
    """Return the provider registered under ``name``, preferring injected fakes."""
    fake = _fake_services.get(name)
    if fake is not None:
        return fake

    import_path = _SERVICE_IMPORT_PATHS.get(name)
    if import_path is None:
        available = ", ".join(get_service_names())
        raise ConfigurationError(f"Unknown service '{name}'. Available services: {available}.")

    module_name, _, class_name = import_path.partition(":")
    module = importlib.import_module(module_name)
    logger.debug("Loaded translation service %s from %s", name, module_name)
    return getattr(module, class_name)(settings)


def check_credentials(service: TranslationService, service_config: str | None) -> None:
    """Raise ``ConfigurationError`` now if ``service`` cannot resolve an API key.

    Providers without credentials (manual entry, test doubles) are accepted.
    """
    resolve = getattr(service, "resolve_credentials", None)
    if resolve is not None:
        resolve(service_config)


class ServiceRegistry:
    """Builds each provider at most once for the lifetime of the registry."""

    def __init__(self, settings: AppSettings) -> None:
        self._settings = settings
        self._instances: dict[str, TranslationService] = {}

    def get(self, name: str) -> TranslationService:
        if name not in self._instances:
            self._instances[name] = instantiate_service(name, self._settings)
        return self._instances[name]


__all__ = [
    "ServiceRegistry",
    "TranslateArgs",
    "TranslationService",
    "check_credentials",
    "clear_fake_services",
    "get_service_names",
    "inject_fake_service",
    "instantiate_service",
]
