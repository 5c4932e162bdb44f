from __future__ import annotations

import logging
from typing import Callable

import httpx

from locsync.core.config import AppSettings
from locsync.core.errors import ConfigurationError, ServiceError
from locsync.integrations.translators.base import TranslateArgs, chunked
from locsync.schemas.translation import TranslationResult


logger = logging.getLogger(__name__)

DEEPL_FREE_URL = "https://api-free.deepl.com/v2/translate"
DEEPL_PRO_URL = "https://api.deepl.com/v2/translate"

# Target codes DeepL expects for locale variants it does not accept as-is.
DEEPL_TARGET_CODES = {
    "en": "EN-US",
    "pt": "PT-PT",
    "pt-br": "PT-BR",
    "zh": "ZH-HANS",
    "zh-cn": "ZH-HANS",
    "zh-tw": "ZH-HANT",
    "es-419": "ES-419",
    "kr": "KO",
}


class DeepLTranslator:
    """DeepL v2 REST provider."""

    _BATCH_SIZE = 50

    def __init__(
        self,
        settings: AppSettings,
        *,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ):
        self._settings = settings
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout))
        )

    async def translate_strings(self, args: TranslateArgs) -> list[TranslationResult]:
        auth_key = self.resolve_credentials(args.service_config)
        endpoint = self._settings.deepl_api_url or (
            DEEPL_FREE_URL if auth_key.endswith(":fx") else DEEPL_PRO_URL
        )
        results: list[TranslationResult] = []

        async with self._client_factory() as client:
            for batch in chunked(args.strings, self._BATCH_SIZE):
                payload = {
                    "text": [item.value for item in batch],
                    "source_lang": self.source_code(args.src_lng),
                    "target_lang": self.target_code(args.target_lng),
                    "tag_handling": "xml",
                    "ignore_tags": ["x"],
                }
                try:
                    response = await client.post(
                        endpoint,
                        json=payload,
                        headers={"Authorization": f"DeepL-Auth-Key {auth_key}"},
                    )
                except httpx.HTTPError as exc:
                    raise ServiceError("Failed to reach DeepL.") from exc

                if response.status_code < 200 or response.status_code >= 300:
                    raise ServiceError(self._extract_error(response))

                translations = response.json().get("translations") or []
                if len(translations) != len(batch):
                    raise ServiceError(
                        f"DeepL returned {len(translations)} translations for {len(batch)} inputs."
                    )
                for item, translation in zip(batch, translations):
                    results.append(
                        TranslationResult(key=item.key, translated=translation.get("text", ""))
                    )

        logger.debug("DeepL returned %s translations", len(results))
        return results

    @staticmethod
    def source_code(value: str) -> str:
        return value.replace("_", "-").split("-", 1)[0].upper()

    @staticmethod
    def target_code(value: str) -> str:
        normalized = value.replace("_", "-").lower()
        return DEEPL_TARGET_CODES.get(normalized, normalized.upper())

    def resolve_credentials(self, service_config: str | None) -> str:
        if service_config:
            return service_config
        if self._settings.deepl_api_key:
            return self._settings.deepl_api_key.get_secret_value()
        raise ConfigurationError("deepl requires an auth key via --service-config or DEEPL_API_KEY.")

    def _extract_error(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and payload.get("message"):
            return f"DeepL error {response.status_code}: {payload['message']}"
        if response.status_code == 456:
            return "DeepL quota exceeded."
        return f"DeepL request failed with status {response.status_code}."
