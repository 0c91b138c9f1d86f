"""
Webhook fan-out for indexed events.

Each subscriber gets one best-effort POST per event. Deliveries run as
background tasks and are never awaited by the indexing pass.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Set

import httpx
import structlog
from sqlalchemy import cast, select
from sqlalchemy.dialects.postgresql import JSONB

from stablelink.core.config import settings
from stablelink.core.database import get_async_session
from stablelink.core.exceptions import DeliveryFailedError
from stablelink.models.webhook import Webhook


logger = structlog.get_logger(__name__)


def subscribers_query(dialect: str, label: str):
    """
    Webhook select for ``label``.

    PostgreSQL filters with JSONB containment. Other dialects load every
    subscription and leave the membership check to the caller.
    """
    stmt = select(Webhook)
    if dialect == "postgresql":
        stmt = stmt.where(cast(Webhook.subscribed_events, JSONB).contains([label]))
    return stmt


class WebhookDispatcher:
    """Delivers event notifications to subscribed webhooks."""

    def __init__(
        self,
        session_factory: Callable = get_async_session,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self._session_factory = session_factory
        self._client = client or httpx.AsyncClient(
            timeout=timeout or settings.webhook_timeout
        )
        self._pending: Set[asyncio.Task] = set()
        self.logger = logger.bind(service="webhook_dispatcher")

    @property
    def pending(self) -> int:
        """Number of deliveries still in flight."""
        return len(self._pending)

    async def get_subscribers(self, label: str) -> List[Webhook]:
        """Webhooks whose subscribed events include ``label``."""
        async with self._session_factory() as db:
            dialect = db.get_bind().dialect.name
            result = await db.execute(subscribers_query(dialect, label))
            webhooks = result.scalars().all()

        return [webhook for webhook in webhooks if webhook.is_subscribed_to(label)]

    async def notify(self, label: str, payload: Dict[str, Any]) -> int:
        """
        Queue one delivery of ``{"event": label, **payload}`` per subscriber.

        Returns:
            Number of deliveries queued
        """
        subscribers = await self.get_subscribers(label)
        body = {"event": label, **payload}

        for webhook in subscribers:
            task = asyncio.create_task(self._deliver(webhook.url, label, body))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        if subscribers:
            self.logger.debug("Webhooks queued", event_label=label, subscribers=len(subscribers))

        return len(subscribers)

    async def _deliver(self, url: str, label: str, body: Dict[str, Any]) -> None:
        try:
            response = await self._client.post(url, json=body)
            if response.is_error:
                raise DeliveryFailedError(url, label, f"HTTP {response.status_code}")

            self.logger.debug("Webhook delivered", url=url, event_label=label, status=response.status_code)

        except DeliveryFailedError as e:
            self._log_failure(e)

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self._log_failure(DeliveryFailedError(url, label, str(e) or type(e).__name__))

        except Exception as e:
            self._log_failure(DeliveryFailedError(url, label, f"{type(e).__name__}: {e}"))

    def _log_failure(self, error: DeliveryFailedError) -> None:
        self.logger.warning(
            "Webhook delivery failed",
            url=error.details["url"],
            event_label=error.details["event"],
            reason=error.details["reason"],
            error_code=error.code
        )

    async def close(self) -> None:
        """Cancel in-flight deliveries and close the HTTP client."""
        for task in list(self._pending):
            task.cancel()

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

        await self._client.aclose()
