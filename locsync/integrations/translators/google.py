from __future__ import annotations

import html
import logging
from typing import Callable

import httpx

from locsync.core.config import AppSettings
from locsync.core.errors import ConfigurationError, ServiceError
from locsync.integrations.translators.base import TranslateArgs, chunked
from locsync.schemas.translation import TranslationResult


logger = logging.getLogger(__name__)


class GoogleTranslate:
    """Google Cloud Translation (v2 REST) provider."""

    _BATCH_SIZE = 128

    def __init__(
        self,
        settings: AppSettings,
        *,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ):
        self._settings = settings
        self._endpoint = settings.google_translate_endpoint
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout))
        )

    async def translate_strings(self, args: TranslateArgs) -> list[TranslationResult]:
        api_key = self.resolve_credentials(args.service_config)
        results: list[TranslationResult] = []

        async with self._client_factory() as client:
            for batch in chunked(args.strings, self._BATCH_SIZE):
                payload = {
                    "q": [item.value for item in batch],
                    "source": self._normalize_language(args.src_lng),
                    "target": self._normalize_language(args.target_lng),
                    "format": "html",
                }
                try:
                    response = await client.post(
                        self._endpoint,
                        params={"key": api_key},
                        json=payload,
                    )
                except httpx.HTTPError as exc:
                    raise ServiceError("Failed to reach Google Translate.") from exc

                if response.status_code < 200 or response.status_code >= 300:
                    raise ServiceError(self._extract_error(response))

                translations = (response.json().get("data") or {}).get("translations") or []
                if len(translations) != len(batch):
                    raise ServiceError(
                        f"Google Translate returned {len(translations)} translations "
                        f"for {len(batch)} inputs."
                    )
                for item, translation in zip(batch, translations):
                    results.append(
                        TranslationResult(
                            key=item.key,
                            translated=html.unescape(translation.get("translatedText", "")),
                        )
                    )

        logger.debug("Google Translate returned %s translations", len(results))
        return results

    def resolve_credentials(self, service_config: str | None) -> str:
        if service_config:
            return service_config
        if self._settings.google_translate_api_key:
            return self._settings.google_translate_api_key.get_secret_value()
        raise ConfigurationError(
            "google-translate requires an API key via --service-config or GOOGLE_TRANSLATE_API_KEY."
        )

    def _normalize_language(self, value: str) -> str:
        return value.replace("_", "-")

    def _extract_error(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return f"Google Translate error {error.get('code', response.status_code)}: {error['message']}"

        return f"Google Translate request failed with status {response.status_code}."
