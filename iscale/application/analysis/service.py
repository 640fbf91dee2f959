"""Analysis pipeline service.

Coordinates request building, transport and parsing for a single capture.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from iscale.domain.analysis.models import AnalysisOutcome
from iscale.domain.analysis.modes import Mode, UnitSystem
from iscale.domain.analysis.parser import ResponseParser
from iscale.domain.shared.cancellation import CancellationToken
from iscale.domain.shared.errors import (
    AnalysisCancelledError,
    AnalysisError,
    RateLimitedError,
)
from iscale.infrastructure.ai.request_builder import VisionRequestBuilder
from iscale.infrastructure.ai.vision_transport import VisionTransport
from iscale.infrastructure.config import get_locale, get_unit_system
from iscale.infrastructure.imaging import make_thumbnail

logger = structlog.get_logger(__name__)

DEFAULT_ATTEMPTS = 3
_backoff = wait_exponential(multiplier=1, min=1, max=10)


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, AnalysisError) and error.retryable


def retry_wait(retry_state: RetryCallState) -> float:
    """Seconds before the next attempt: Retry-After when given, else backoff."""
    error = retry_state.outcome.exception() if retry_state.outcome else None
    if isinstance(error, RateLimitedError) and error.retry_after is not None:
        return float(error.retry_after)
    return float(_backoff(retry_state))


class AnalysisService:
    """
    Run the analysis pipeline for one capture.

    Flow:
    1. Build request (downscale, encode, prompts)
    2. Send via transport (classified failures)
    3. Parse reply into an AnalysisOutcome
    4. Attach capture thumbnail to outcome and items

    Example:
        >>> service = AnalysisService(VisionRequestBuilder(), transport, ResponseParser())
        >>> outcome = await service.analyze(image_bytes, Mode.CALORIES)
        >>> outcome.primary_value
        '400 kcal'
    """

    def __init__(
        self,
        request_builder: VisionRequestBuilder,
        transport: VisionTransport,
        parser: ResponseParser,
        unit_system_provider: Callable[[], UnitSystem] = get_unit_system,
        locale_provider: Callable[[], str] = get_locale,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize service.

        Args:
            request_builder: Builds the transport request body
            transport: Sends the request and classifies failures
            parser: Turns the response into an outcome
            unit_system_provider: Current unit preference
            locale_provider: Current device locale
            sleep: Awaitable sleep used between retry attempts
        """
        self._builder = request_builder
        self._transport = transport
        self._parser = parser
        self._units = unit_system_provider
        self._locale = locale_provider
        self._sleep = sleep

    async def analyze(
        self,
        image_data: bytes,
        mode: Mode,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[AnalysisOutcome]:
        """
        Analyze one capture.

        Args:
            image_data: Raw capture bytes
            mode: Analysis mode
            cancel_token: Token cancelled when the capture UI is dismissed

        Returns:
            AnalysisOutcome, or None if the analysis was cancelled

        Raises:
            AnalysisError: Any member of the analysis error taxonomy
        """
        body = self._builder.build(image_data, mode, self._units(), self._locale())

        try:
            response = await self._transport.send(body, cancel_token)
        except AnalysisCancelledError:
            logger.info("Analysis cancelled", mode=mode.value)
            return None

        if cancel_token is not None and cancel_token.is_cancelled:
            # Late result after dismissal: drop it
            logger.info("Discarding late analysis result", mode=mode.value)
            return None

        outcome = self._parser.parse(response, mode)
        outcome = outcome.with_thumbnail(make_thumbnail(image_data))

        logger.info(
            "Analysis completed",
            mode=mode.value,
            has_payload=outcome.has_payload,
        )
        return outcome

    async def analyze_with_retry(
        self,
        image_data: bytes,
        mode: Mode,
        cancel_token: Optional[CancellationToken] = None,
        attempts: int = DEFAULT_ATTEMPTS,
    ) -> Optional[AnalysisOutcome]:
        """
        Analyze with caller-side retry.

        Each attempt re-runs the whole pipeline from the request builder.
        Only retryable errors are retried; MissingCredentialError is raised
        immediately. The last error propagates once attempts are exhausted.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=retry_wait,
            retry=retry_if_exception(_is_retryable),
            sleep=self._sleep,
            reraise=True,
            before_sleep=self._log_retry,
        )

        async for attempt in retrying:
            with attempt:
                if cancel_token is not None and cancel_token.is_cancelled:
                    return None
                return await self.analyze(image_data, mode, cancel_token)

        return None

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Retrying analysis",
            attempt=retry_state.attempt_number,
            error=type(error).__name__ if error else None,
        )
