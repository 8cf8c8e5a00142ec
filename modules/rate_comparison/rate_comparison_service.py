"""
Rate Comparison Service

Fans a shipment out to every active courier, waits for all of them, then
decides. A courier that fails, times out or cannot service the lanes is
recorded as a failure and dropped from the candidates; it never fails the
comparison on its own.
"""

import asyncio
from typing import List, Optional, Sequence, Union

from context_manager.context import context_user_data
from logger import logger

# schema
from modules.rate_quote.rate_quote_schema import QuoteModel, ShipmentParamsModel
from .rate_comparison_schema import ComparisonResult, ProviderFailure

# service
from shipping_partner.base import ProviderAdapter
from shipping_partner.registry import ProviderRegistry

from utils.exceptions import (
    NoServiceableProvider,
    ProviderError,
    ProviderTimeout,
    ProviderUnavailable,
    ValidationError,
)


class RateComparisonService:

    def __init__(self, registry: ProviderRegistry, timeout_seconds: float = 5.0):
        self.registry = registry
        self.timeout_seconds = timeout_seconds

    async def compare(
        self,
        shipment: ShipmentParamsModel,
        providers: Optional[Sequence[ProviderAdapter]] = None,
    ) -> ComparisonResult:
        providers = list(providers) if providers is not None else self.registry.active()

        outcomes = await asyncio.gather(
            *[self._quote_one(provider, shipment) for provider in providers],
            return_exceptions=True,
        )

        # only a bad shipment escapes _quote_one, raised once every courier is done
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

        candidates: List[QuoteModel] = []
        failures: List[ProviderFailure] = []
        for outcome in outcomes:
            if isinstance(outcome, ProviderFailure):
                failures.append(outcome)
            else:
                candidates.append(outcome)

        if not candidates:
            logger.warning(
                extra=context_user_data.get(),
                msg=f"No serviceable courier for {shipment.pickup_pincode} -> "
                f"{shipment.delivery_pincode}: {[f.reason for f in failures]}",
            )
            raise NoServiceableProvider(failures)

        candidates.sort(key=lambda quote: (quote.total_amount, quote.courier))

        return ComparisonResult(
            best_option=candidates[0],
            candidates=candidates,
            failures=failures,
        )

    async def _quote_one(
        self, provider: ProviderAdapter, shipment: ShipmentParamsModel
    ) -> Union[QuoteModel, ProviderFailure]:
        try:
            return await asyncio.wait_for(provider.quote(shipment), self.timeout_seconds)

        except asyncio.TimeoutError:
            error = ProviderTimeout(provider.slug)

        except ValidationError:
            # a bad shipment is the caller's problem, not the courier's
            raise

        except ProviderError as e:
            error = e

        except Exception as e:
            logger.exception(
                extra=context_user_data.get(),
                msg=f"Unexpected error quoting {provider.slug}: {e}",
            )
            error = ProviderUnavailable(provider.slug, str(e))

        logger.info(
            extra=context_user_data.get(),
            msg=f"{provider.slug} excluded from comparison: {error.reason} {error.message}",
        )
        return ProviderFailure(
            courier=provider.slug, reason=error.reason, message=error.message
        )
