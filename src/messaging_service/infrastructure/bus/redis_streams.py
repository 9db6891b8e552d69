"""Redis Streams consumer for account and billing events."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

OnStreamEventCallback = Callable[[str, dict[str, Any]], Coroutine[Any, Any, None]]

RETRY_DELAY_SECONDS = 5.0
PENDING_BASE_DELAY_SECONDS = 1.0
PENDING_MAX_DELAY_SECONDS = 60.0


class RedisStreamConsumer:
    """XREADGROUP consumer for one stream and consumer group.

    Entries are acked only after the callback returns. Entries whose callback
    failed stay in this consumer's pending list and are re-read from id ``0``
    on an exponential backoff, and once on start, so a stable consumer name
    picks up what a previous run left behind. An entry delivered more than
    ``max_deliveries`` times is logged and acked without handling.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        stream: str,
        group: str,
        consumer: str,
        callback: OnStreamEventCallback,
        *,
        batch_size: int = 10,
        block_ms: int = 5000,
        max_deliveries: int = 5,
        retry_delay: float = RETRY_DELAY_SECONDS,
        pending_base_delay: float = PENDING_BASE_DELAY_SECONDS,
        pending_max_delay: float = PENDING_MAX_DELAY_SECONDS,
    ) -> None:
        self._redis = redis
        self._stream = stream
        self._group = group
        self._consumer = consumer
        self._callback = callback
        self._batch_size = batch_size
        self._block_ms = block_ms
        self._max_deliveries = max_deliveries
        self._retry_delay = retry_delay
        self._pending_base_delay = pending_base_delay
        self._pending_max_delay = pending_max_delay
        self._task: asyncio.Task[None] | None = None

    async def ensure_group(self) -> None:
        try:
            await self._redis.xgroup_create(self._stream, self._group, id="0", mkstream=True)
            logger.info("Created consumer group %s on %s", self._group, self._stream)
        except aioredis.ResponseError as e:
            if "BUSYGROUP" not in str(e):
                raise
            logger.debug("Consumer group %s already exists", self._group)

    async def start(self) -> None:
        await self.ensure_group()
        self._task = asyncio.create_task(self._run(), name=f"stream-consumer-{self._stream}")
        logger.info(
            "Stream consumer %s started: stream=%s group=%s",
            self._consumer, self._stream, self._group,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        logger.info("Stream consumer %s stopped", self._consumer)

    async def handle_entry(self, msg_id: str, fields: dict[str, Any]) -> bool:
        """Run the callback for one entry and ack it. Returns whether it was acked."""
        event_type = fields.get("event_type", "unknown")
        try:
            await self._callback(event_type, fields)
        except Exception:
            logger.exception("Error processing stream entry %s (%s)", msg_id, event_type)
            return False
        await self._redis.xack(self._stream, self._group, msg_id)
        return True

    async def _read(self, last_id: str, block: int | None) -> list[tuple[str, dict[str, Any]]]:
        response = await self._redis.xreadgroup(
            groupname=self._group,
            consumername=self._consumer,
            streams={self._stream: last_id},
            count=self._batch_size,
            block=block,
        )
        return [entry for _stream, entries in response or [] for entry in entries]

    async def _delivery_counts(self, first_id: str, last_id: str, count: int) -> dict[str, int]:
        rows = await self._redis.xpending_range(
            self._stream,
            self._group,
            min=first_id,
            max=last_id,
            count=count,
            consumername=self._consumer,
        )
        return {row["message_id"]: row["times_delivered"] for row in rows}

    async def replay_pending(self) -> int:
        """Retry entries delivered to this consumer but never acked.

        Returns how many are still pending afterwards.
        """
        still_pending = 0
        last_id = "0"
        while entries := await self._read(last_id, block=None):
            deliveries = await self._delivery_counts(entries[0][0], entries[-1][0], len(entries))
            for msg_id, fields in entries:
                if not fields:
                    # Trimmed from the stream while pending.
                    await self._redis.xack(self._stream, self._group, msg_id)
                elif deliveries.get(msg_id, 0) > self._max_deliveries:
                    logger.error(
                        "Dropping stream entry %s (%s) after %d deliveries: %s",
                        msg_id, fields.get("event_type", "unknown"),
                        deliveries[msg_id], fields,
                    )
                    await self._redis.xack(self._stream, self._group, msg_id)
                elif not await self.handle_entry(msg_id, fields):
                    still_pending += 1
            last_id = entries[-1][0]
        if still_pending:
            logger.warning("%d stream entries still pending after retry", still_pending)
        return still_pending

    def _pending_delay(self, failed_scans: int) -> float:
        return min(self._pending_base_delay * (2 ** failed_scans), self._pending_max_delay)

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        # Loop time of the next pending-list scan; None while nothing is pending.
        pending_due: float | None = loop.time()
        failed_scans = 0
        while True:
            try:
                if pending_due is not None and loop.time() >= pending_due:
                    if await self.replay_pending():
                        failed_scans += 1
                        pending_due = loop.time() + self._pending_delay(failed_scans)
                    else:
                        failed_scans = 0
                        pending_due = None
                for msg_id, fields in await self._read(">", block=self._block_ms):
                    if not await self.handle_entry(msg_id, fields) and pending_due is None:
                        pending_due = loop.time() + self._pending_delay(0)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Stream consumer loop error, retrying in %.1fs", self._retry_delay)
                await asyncio.sleep(self._retry_delay)
