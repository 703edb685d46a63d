"""Ordered fallback chains shared by the orchestration services."""

import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from ..config import SettingsManager
from ..errors import WordLensError
from ..models import AppSettings
from ..providers import BaseProvider, Credentials, ProviderRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = TypeVar("P", bound=BaseProvider)


class OrchestrationService:
    """
    Base class for services that pick providers per capability.

    A chain is an ordered list of providers. The head is tried first and
    every failure is logged before moving to the next element; failures are
    never raised to the caller.
    """

    def __init__(self, settings: SettingsManager, registry: ProviderRegistry):
        self.settings = settings
        self.registry = registry

    @staticmethod
    def build_chain(
        settings: AppSettings,
        providers: Sequence[P],
        selected: Optional[P] = None,
        fallback: Optional[P] = None,
    ) -> List[P]:
        """
        Order providers for one request.

        The explicitly selected provider comes first when its credentials
        are valid-shaped, then every default-order provider that is ready,
        then the fallback.
        """
        chain: List[P] = []
        if selected is not None:
            if selected.is_ready(selected.credentials_from(settings)):
                chain.append(selected)
            else:
                logger.info("Selected provider %s has no usable credentials, skipping", selected.name)

        for provider in providers:
            if provider in chain or not provider.IN_DEFAULT_ORDER:
                continue
            if provider.is_ready(provider.credentials_from(settings)):
                chain.append(provider)

        if fallback is not None:
            chain.append(fallback)
        return chain

    async def run_chain(
        self,
        capability: str,
        chain: Sequence[P],
        settings: AppSettings,
        attempt: Callable[[P, Credentials], Awaitable[T]],
    ) -> Optional[T]:
        """
        Return the first non-empty result of the chain, or None.

        Args:
            capability: Name used in log lines ("images", "phrases", ...)
            chain: Providers in order
            settings: Effective settings the credentials are read from
            attempt: Coroutine function invoking one provider
        """
        for provider in chain:
            try:
                result = await attempt(provider, provider.credentials_from(settings))
            except WordLensError as e:
                logger.warning("%s: provider %s failed: %s", capability, provider.name, e)
                continue
            except Exception:
                logger.exception("%s: provider %s raised an unexpected error", capability, provider.name)
                continue

            if not result:
                logger.info("%s: provider %s returned nothing", capability, provider.name)
                continue

            logger.debug("%s: served by %s", capability, provider.name)
            return result

        logger.info("%s: no provider produced a result", capability)
        return None
