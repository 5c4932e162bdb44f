from __future__ import annotations

import logging
from typing import Callable

import httpx

from locsync.core.config import AppSettings
from locsync.core.errors import ConfigurationError, ServiceError
from locsync.integrations.translators.base import TranslateArgs, chunked
from locsync.schemas.translation import TranslationResult


logger = logging.getLogger(__name__)


class AzureTranslator:
    """Azure AI Translator (v3 REST) provider."""

    _BATCH_SIZE = 100
    _API_VERSION = "3.0"

    def __init__(
        self,
        settings: AppSettings,
        *,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ):
        self._settings = settings
        self._endpoint = f"{settings.azure_translator_endpoint.rstrip('/')}/translate"
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout))
        )

    async def translate_strings(self, args: TranslateArgs) -> list[TranslationResult]:
        headers = {"Ocp-Apim-Subscription-Key": self.resolve_credentials(args.service_config)}
        if self._settings.azure_translator_region:
            headers["Ocp-Apim-Subscription-Region"] = self._settings.azure_translator_region
        params = {
            "api-version": self._API_VERSION,
            "from": args.src_lng.replace("_", "-"),
            "to": args.target_lng.replace("_", "-"),
            "textType": "html",
        }
        results: list[TranslationResult] = []

        async with self._client_factory() as client:
            for batch in chunked(args.strings, self._BATCH_SIZE):
                try:
                    response = await client.post(
                        self._endpoint,
                        params=params,
                        json=[{"Text": item.value} for item in batch],
                        headers=headers,
                    )
                except httpx.HTTPError as exc:
                    raise ServiceError("Failed to reach Azure Translator.") from exc

                if response.status_code < 200 or response.status_code >= 300:
                    raise ServiceError(self._extract_error(response))

                payload = response.json()
                if not isinstance(payload, list) or len(payload) != len(batch):
                    raise ServiceError(
                        f"Azure Translator returned an unexpected payload for {len(batch)} inputs."
                    )
                for item, document in zip(batch, payload):
                    translations = document.get("translations") or [{}]
                    results.append(
                        TranslationResult(key=item.key, translated=translations[0].get("text", ""))
                    )

        logger.debug("Azure Translator returned %s translations", len(results))
        return results

    def resolve_credentials(self, service_config: str | None) -> str:
        if service_config:
            return service_config
        if self._settings.azure_translator_key:
            return self._settings.azure_translator_key.get_secret_value()
        raise ConfigurationError(
            "azure requires a subscription key via --service-config or AZURE_TRANSLATOR_KEY."
        )

    def _extract_error(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return f"Azure Translator error {error.get('code', response.status_code)}: {error['message']}"

        return f"Azure Translator request failed with status {response.status_code}."
