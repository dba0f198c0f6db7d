"""Delivery pipeline: poll, transform, deliver, acknowledge."""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

from loguru import logger

from feed_relay.core import (
    ChatSink,
    CycleReport,
    DigestParseError,
    Entry,
    EntryFormatter,
    FeedSource,
    RelayError,
    Summarizer,
    parse_digest,
)


class DeliveryStrategy(ABC):
    """How a cycle's unread entries become messages and acknowledgments."""

    def __init__(self, feed_source: FeedSource, sinks: Sequence[ChatSink]) -> None:
        if not sinks:
            raise ValueError("At least one chat destination is required")
        self.feed_source = feed_source
        self.sinks = list(sinks)

    @abstractmethod
    async def process(self, entries: list[Entry]) -> CycleReport:
        """Deliver and acknowledge the given entries."""
        pass

    async def deliver(self, render: Callable[[EntryFormatter], str]) -> bool:
        """Deliver one message to every destination in order.

        Every destination is attempted. The delivery counts as successful
        only if all of them accepted it.
        """
        delivered = True
        for sink in self.sinks:
            name = getattr(sink, "name", sink.__class__.__name__)
            try:
                message = render(sink.formatter)
                response = await sink.deliver(message)
                logger.debug(f"{name} response: {response}")
            except RelayError as e:
                logger.error(f"Delivery to {name} failed: {e}")
                delivered = False
            except Exception as e:
                logger.exception(f"Unexpected error delivering to {name}: {e}")
                delivered = False
        return delivered

    async def acknowledge(self, entry_ids: list[int]) -> bool:
        """Mark delivered entries as read; a failure leaves them for the next cycle."""
        try:
            await self.feed_source.mark_read(entry_ids)
        except RelayError as e:
            logger.error(f"Marking {entry_ids} as read failed, they will be delivered again: {e}")
            return False
        return True


class DirectDelivery(DeliveryStrategy):
    """One message per entry, acknowledged individually."""

    async def process(self, entries: list[Entry]) -> CycleReport:
        report = CycleReport()

        for i, entry in enumerate(entries, 1):
            logger.info(f"[{i}/{len(entries)}] {entry.title} ({entry.url})")

            try:
                full_content = await self.feed_source.fetch_full_content(entry.id)
            except RelayError as e:
                logger.warning(f"Full content of entry {entry.id} unavailable: {e}")
                full_content = ""

            delivered = await self.deliver(
                lambda formatter: formatter.format_entry(entry, full_content)
            )
            if not delivered:
                logger.error(f"Entry {entry.id} not delivered, it stays unread")
                report.failed.append(entry.id)
                continue

            report.delivered.append(entry.id)
            if await self.acknowledge([entry.id]):
                report.acknowledged.append(entry.id)

        return report


class DigestDelivery(DeliveryStrategy):
    """One summarized message per batch, acknowledged all-or-nothing."""

    def __init__(
        self,
        feed_source: FeedSource,
        sinks: Sequence[ChatSink],
        summarizer: Summarizer,
        no_news_message: str = "No new items",
    ) -> None:
        super().__init__(feed_source, sinks)
        self.summarizer = summarizer
        self.no_news_message = no_news_message

    async def process(self, entries: list[Entry]) -> CycleReport:
        report = CycleReport()

        if not entries:
            logger.info("No new entries")
            await self.deliver(lambda formatter: formatter.format_notice(self.no_news_message))
            return report

        entry_ids = [entry.id for entry in entries]

        try:
            response = await self.summarizer.summarize(entries)
        except RelayError as e:
            logger.error(f"Summarization failed, {len(entries)} entries stay unread: {e}")
            report.failed.extend(entry_ids)
            return report

        try:
            items = parse_digest(response)
        except DigestParseError as e:
            logger.error(f"Could not parse digest, {len(entries)} entries stay unread: {e}")
            logger.debug(f"Unparseable model response: {response[:1000]}")
            report.failed.extend(entry_ids)
            return report

        logger.info(f"Digest has {len(items)} items for {len(entries)} entries")

        if items:
            delivered = await self.deliver(lambda formatter: formatter.format_digest(items))
        else:
            delivered = await self.deliver(
                lambda formatter: formatter.format_notice(self.no_news_message)
            )

        if not delivered:
            logger.error(f"Digest not delivered, {len(entries)} entries stay unread")
            report.failed.extend(entry_ids)
            return report

        report.delivered.extend(entry_ids)
        if await self.acknowledge(entry_ids):
            report.acknowledged.extend(entry_ids)
        return report


class RelayService:
    """Long-running loop tying the feed source to a delivery strategy."""

    def __init__(
        self,
        feed_source: FeedSource,
        strategy: DeliveryStrategy,
        interval: float = 1800,
        limit: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> None:
        self.feed_source = feed_source
        self.strategy = strategy
        self.interval = interval
        self.limit = limit
        self.category_id = category_id

    async def run_cycle(self) -> CycleReport:
        """Run one refresh, fetch, process pass."""
        try:
            await self.feed_source.refresh_feeds()
        except RelayError as e:
            logger.warning(f"Feed refresh failed, continuing with current entries: {e}")

        try:
            entries = await self.feed_source.list_unread(
                limit=self.limit, category_id=self.category_id
            )
        except RelayError as e:
            logger.error(f"Fetching unread entries failed, skipping cycle: {e}")
            return CycleReport(skipped=True)

        logger.info(f"Fetched {len(entries)} unread entries")

        report = await self.strategy.process(entries)
        report.fetched = [entry.id for entry in entries]

        logger.info(
            f"Cycle done: {len(report.delivered)} delivered, "
            f"{len(report.acknowledged)} marked read, {len(report.failed)} failed"
        )
        return report

    async def run_forever(self, max_cycles: Optional[int] = None) -> None:
        """Run cycles separated by the polling interval.

        Never returns on its own unless ``max_cycles`` is given; no error
        escapes the loop.
        """
        cycles = 0
        while True:
            try:
                await self.run_cycle()
            except Exception as e:
                logger.exception(f"Cycle failed unexpectedly: {e}")

            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                return

            logger.info(f"Sleeping for {self.interval} seconds")
            await asyncio.sleep(self.interval)
