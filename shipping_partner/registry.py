from typing import Dict, Iterable, List, Optional

import httpx

from logger import logger

from modules.rate_quote.rate_quote_service import RateQuoteService

from .base import ProviderAdapter


class ProviderRegistry:
    """Active courier adapters keyed by slug."""

    def __init__(self, adapters: Iterable[ProviderAdapter] = ()):
        self._adapters: Dict[str, ProviderAdapter] = {}
        for adapter in adapters:
            self.register(adapter)

    @classmethod
    def from_settings(
        cls,
        settings,
        http_client: httpx.AsyncClient,
        rate_quote_service: RateQuoteService,
    ) -> "ProviderRegistry":
        # imported late, the mapping imports every courier module
        from data.courier_service_mapping import courier_service_mapping

        registry = cls()
        for slug in settings.active_couriers:
            adapter_class = courier_service_mapping.get(slug)
            if adapter_class is None:
                logger.warning(msg=f"Unknown courier {slug} in ACTIVE_COURIERS, skipping")
                continue

            registry.register(
                adapter_class(
                    http_client,
                    rate_quote_service,
                    settings.courier_credentials.get(slug, {}),
                )
            )

        return registry

    def register(self, adapter: ProviderAdapter):
        self._adapters[adapter.slug] = adapter

    def get(self, slug: str) -> Optional[ProviderAdapter]:
        return self._adapters.get(slug)

    def active(self) -> List[ProviderAdapter]:
        return list(self._adapters.values())

    def __len__(self):
        return len(self._adapters)
