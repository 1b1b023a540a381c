"""Bulk delivery - bounded-concurrency sending with retry and a full report."""

import asyncio
import time
from collections.abc import Callable
from datetime import datetime
from html import escape

from loguru import logger
from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_exponential

from app.errors import StoreError
from app.models.common import utc_now
from app.models.members import EmailRecipient
from app.models.notification import BulkDeliveryOptions, BulkDeliveryReport, DeliveryResult, EmailTemplate
from app.services.notification.recipients import validate_recipients
from app.services.ports import DeliveryRecorder, RecipientResolver, Transport

RETRY_OPTIONS = BulkDeliveryOptions(
    max_concurrent=2,
    retry_attempts=2,
    retry_delay=2.0,
    batch_size=5,
    batch_delay=1.0,
    respect_preferences=False,
)


class SendRejected(Exception):
    """Transport returned False instead of raising."""


def personalize_content(content: str, fields: dict[str, str]) -> str:
    for name, value in fields.items():
        content = content.replace("{{" + name + "}}", value)
    return content


def recipient_fields(recipient: EmailRecipient) -> dict[str, str]:
    return {
        "recipient_name": recipient.name,
        "recipient_email": recipient.email,
        "recipient_position": recipient.position or "",
        "recipient_role": str(recipient.role),
    }


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.warning("Send attempt {} failed: {}", state.attempt_number, _describe(exc))


def _describe(exc: BaseException | None) -> str:
    if isinstance(exc, TimeoutError):
        return "Send timed out"
    if exc is None:
        return "Unknown error"
    return str(exc) or type(exc).__name__


class BulkDeliveryCoordinator:
    """Sends one template to many recipients.

    Batches run one after another; inside a batch at most `max_concurrent`
    sends are in flight. A recipient fails only after every attempt failed,
    and one recipient's failure never affects another's.
    """

    def __init__(
        self,
        transport: Transport,
        resolver: RecipientResolver | None = None,
        recorder: DeliveryRecorder | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._transport = transport
        self._resolver = resolver
        self._recorder = recorder
        self._clock = clock
        self._stop_requested = False

    def request_stop(self) -> None:
        """Stop the running send before its next batch; sends already in flight finish."""
        self._stop_requested = True
        logger.info("Bulk delivery stop requested")

    async def send_bulk(
        self,
        recipients: list[EmailRecipient],
        template: EmailTemplate,
        options: BulkDeliveryOptions | None = None,
        personalizations: dict[str, dict[str, str]] | None = None,
        decision_id: str | None = None,
    ) -> BulkDeliveryReport:
        opts = options or BulkDeliveryOptions()
        personalizations = personalizations or {}
        # a stop only applies to the run it was requested during
        self._stop_requested = False
        started = time.monotonic()
        report = BulkDeliveryReport(total_recipients=len(recipients))
        logger.info("Bulk delivery to {} recipients", len(recipients))

        eligible = recipients
        if opts.respect_preferences and self._resolver is not None:
            eligible = [r for r in recipients if self._resolver.should_receive(r, opts.notification_kind)]
            report.filtered_out = len(recipients) - len(eligible)
            if report.filtered_out:
                logger.info("Filtered {} recipients by preferences", report.filtered_out)

        valid, invalid = validate_recipients(eligible)
        if invalid:
            rejected = []
            for item in invalid:
                logger.warning("Invalid address {}: {}", item.recipient.email, item.reason)
                result = DeliveryResult(
                    recipient=item.recipient,
                    success=False,
                    error=item.reason,
                    attempts=0,
                    delivery_time_ms=0,
                    sent_at=self._clock(),
                )
                rejected.append(self._record(report, result))
            self._track(rejected, opts, decision_id)

        batches = [valid[i : i + opts.batch_size] for i in range(0, len(valid), opts.batch_size)]
        try:
            for n, batch in enumerate(batches, 1):
                if self._stop_requested:
                    report.aborted = True
                    logger.warning("Bulk delivery aborted before batch {}/{}", n, len(batches))
                    skipped = [r for b in batches[n - 1 :] for r in b]
                    self._track(self._abort(report, skipped), opts, decision_id)
                    break

                logger.info("Batch {}/{} ({} recipients)", n, len(batches), len(batch))
                sem = asyncio.Semaphore(opts.max_concurrent)
                batch_results = await asyncio.gather(
                    *[self._send_one(sem, r, template, personalizations.get(r.id, {}), opts, report) for r in batch]
                )
                self._track(list(batch_results), opts, decision_id)

                if n < len(batches) and opts.batch_delay > 0:
                    await asyncio.sleep(opts.batch_delay)
        finally:
            self._stop_requested = False

        self._finish(report, started)
        logger.info("Bulk delivery completed: {}", report.summary())
        return report

    async def retry_failed(
        self,
        report: BulkDeliveryReport,
        template: EmailTemplate,
        personalizations: dict[str, dict[str, str]] | None = None,
        decision_id: str | None = None,
    ) -> BulkDeliveryReport | None:
        """Re-send to the recipients that failed, with conservative options. None if nothing failed."""
        failed = [r.recipient for r in report.failed_results]
        if not failed:
            logger.info("No failed deliveries to retry")
            return None
        logger.info("Retrying {} failed deliveries", len(failed))
        return await self.send_bulk(failed, template, RETRY_OPTIONS, personalizations, decision_id)

    async def _send_one(
        self,
        sem: asyncio.Semaphore,
        recipient: EmailRecipient,
        template: EmailTemplate,
        custom: dict[str, str],
        opts: BulkDeliveryOptions,
        report: BulkDeliveryReport,
    ) -> DeliveryResult:
        fields = {**recipient_fields(recipient), **custom}
        subject = personalize_content(template.subject, fields)
        html = personalize_content(template.html, {k: escape(v) for k, v in fields.items()})
        text = personalize_content(template.text, fields)

        async with sem:
            started = time.monotonic()
            attempts = 0
            error = None
            try:
                async for attempt in AsyncRetrying(
                    stop=stop_after_attempt(opts.retry_attempts),
                    wait=wait_exponential(multiplier=opts.retry_delay),
                    before_sleep=_log_retry,
                    reraise=True,
                ):
                    with attempt:
                        attempts = attempt.retry_state.attempt_number
                        sent = await asyncio.wait_for(
                            self._transport.send(recipient.email, subject, html, text),
                            timeout=opts.send_timeout,
                        )
                        if not sent:
                            raise SendRejected("Transport returned false")
            except Exception as e:
                error = _describe(e)
                logger.error("Delivery to {} failed after {} attempts: {}", recipient.email, attempts, error)

            result = DeliveryResult(
                recipient=recipient,
                success=error is None,
                error=error,
                attempts=attempts,
                delivery_time_ms=int((time.monotonic() - started) * 1000),
                sent_at=self._clock(),
            )
        return self._record(report, result)

    def _abort(self, report: BulkDeliveryReport, recipients: list[EmailRecipient]) -> list[DeliveryResult]:
        """Failed results for recipients a stop request kept from being sent to."""
        now = self._clock()
        return [
            self._record(
                report,
                DeliveryResult(
                    recipient=r,
                    success=False,
                    error="Delivery aborted",
                    attempts=0,
                    delivery_time_ms=0,
                    sent_at=now,
                ),
            )
            for r in recipients
        ]

    @staticmethod
    def _record(report: BulkDeliveryReport, result: DeliveryResult) -> DeliveryResult:
        report.results.append(result)
        if result.success:
            report.successful += 1
        else:
            report.failed += 1
        return result

    def _track(self, results: list[DeliveryResult], opts: BulkDeliveryOptions, decision_id: str | None) -> None:
        if not opts.track_delivery or self._recorder is None or not results:
            return
        try:
            self._recorder.record_batch(results, opts.notification_kind, decision_id)
        except StoreError as e:
            logger.error("Delivery log write failed ({} results): {}", len(results), e)

    @staticmethod
    def _finish(report: BulkDeliveryReport, started: float) -> None:
        report.total_time_ms = int((time.monotonic() - started) * 1000)
        if report.results:
            times = [r.delivery_time_ms or 0 for r in report.results]
            report.average_delivery_time_ms = round(sum(times) / len(times), 1)
            report.bounce_rate = round(report.failed / len(report.results) * 100, 2)
