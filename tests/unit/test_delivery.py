"""Tests for bulk delivery: concurrency cap, retries, isolation and stop."""

import asyncio

import pytest
from conftest import FakeTransport, make_recipient, seed_members

from app.models.members import DigestFrequency, EmailPreferences
from app.models.notification import BulkDeliveryOptions, EmailTemplate
from app.services.notification import BulkDeliveryCoordinator, MemberRecipientResolver, personalize_content


def fast(**kwargs) -> BulkDeliveryOptions:
    defaults = {"retry_delay": 0, "batch_delay": 0}
    defaults.update(kwargs)
    return BulkDeliveryOptions(**defaults)


@pytest.fixture
def template():
    return EmailTemplate(
        subject="Result for {{recipient_name}}",
        html="<p>Hello {{recipient_name}} ({{recipient_role}})</p><p>{{participation_message}}</p>",
        text="Hello {{recipient_name}} <{{recipient_email}}> {{recipient_position}}",
    )


class TestSendBulk:
    def test_one_failing_recipient(self, template):
        recipients = [make_recipient(i) for i in range(10)]
        transport = FakeTransport(always_fail={"m4@board.org"})
        coordinator = BulkDeliveryCoordinator(transport)

        report = asyncio.run(coordinator.send_bulk(recipients, template, fast(max_concurrent=3)))

        assert report.total_recipients == 10
        assert report.successful == 9
        assert report.failed == 1
        assert len(report.results) == 10
        assert report.success_ratio == 0.9
        assert report.bounce_rate == 10
        failed = report.failed_results[0]
        assert failed.recipient_id == "m4"
        assert failed.attempts == 3
        assert "mailbox unavailable" in failed.error
        assert transport.calls_to("m4@board.org") == 3
        assert transport.max_in_flight <= 3

    def test_fail_fail_succeed(self, template):
        transport = FakeTransport(script={"m0@board.org": [ConnectionError("reset"), False, True]})
        coordinator = BulkDeliveryCoordinator(transport)

        report = asyncio.run(coordinator.send_bulk([make_recipient(0)], template, fast()))

        result = report.results[0]
        assert result.success
        assert result.attempts == 3
        assert result.error is None

    def test_false_counts_as_failure(self, template):
        transport = FakeTransport(script={"m0@board.org": [False, False]})
        coordinator = BulkDeliveryCoordinator(transport)

        report = asyncio.run(coordinator.send_bulk([make_recipient(0)], template, fast(retry_attempts=2)))

        assert report.failed == 1
        assert report.results[0].error == "Transport returned false"
        assert report.results[0].attempts == 2

    def test_timeout(self, template):
        transport = FakeTransport(delay=1.0)
        coordinator = BulkDeliveryCoordinator(transport)

        report = asyncio.run(
            coordinator.send_bulk([make_recipient(0)], template, fast(retry_attempts=1, send_timeout=0.05))
        )

        assert report.failed == 1
        assert report.results[0].error == "Send timed out"

    def test_concurrency_cap_across_batches(self, template):
        recipients = [make_recipient(i) for i in range(25)]
        transport = FakeTransport()
        coordinator = BulkDeliveryCoordinator(transport)

        report = asyncio.run(coordinator.send_bulk(recipients, template, fast(max_concurrent=2, batch_size=10)))

        assert report.successful == 25
        assert transport.max_in_flight == 2

    def test_invalid_addresses_fail_without_sending(self, template):
        recipients = [
            make_recipient(0),
            make_recipient(1, email="not-an-email"),
            make_recipient(2, email="someone@example.com"),
        ]
        transport = FakeTransport()
        coordinator = BulkDeliveryCoordinator(transport)

        report = asyncio.run(coordinator.send_bulk(recipients, template, fast()))

        assert report.successful == 1
        assert report.failed == 2
        errors = {r.recipient_id: (r.error, r.attempts) for r in report.failed_results}
        assert errors == {"m1": ("Invalid email format", 0), "m2": ("Invalid email domain", 0)}
        assert [c[0] for c in transport.calls] == ["m0@board.org"]

    def test_personalization(self, template):
        recipient = make_recipient(0, name="Ann <Lee>", position="Treasurer")
        transport = FakeTransport()
        coordinator = BulkDeliveryCoordinator(transport)

        asyncio.run(
            coordinator.send_bulk(
                [recipient],
                template,
                fast(),
                personalizations={"m0": {"participation_message": "You approved this item."}},
            )
        )

        to, subject, html, text = transport.calls[0]
        assert to == "m0@board.org"
        assert subject == "Result for Ann <Lee>"
        assert "Hello Ann &lt;Lee&gt; (board_member)" in html
        assert "You approved this item." in html
        assert text == "Hello Ann <Lee> <m0@board.org> Treasurer"

    def test_empty(self, template):
        report = asyncio.run(BulkDeliveryCoordinator(FakeTransport()).send_bulk([], template, fast()))
        assert report.total_recipients == 0
        assert report.success_ratio == 0
        assert report.results == []


class TestPreferences:
    def test_filtered_by_resolver(self, members, template):
        recipients = [
            make_recipient(0),
            make_recipient(1, preferences=EmailPreferences(voting_summaries=False)),
            make_recipient(2, preferences=EmailPreferences(digest_frequency=DigestFrequency.DISABLED)),
            make_recipient(3, voting_email_notifications=False),
        ]
        transport = FakeTransport()
        coordinator = BulkDeliveryCoordinator(transport, resolver=MemberRecipientResolver(members))

        report = asyncio.run(coordinator.send_bulk(recipients, template, fast()))

        assert report.filtered_out == 3
        assert report.successful == 1
        assert [c[0] for c in transport.calls] == ["m0@board.org"]

    def test_preferences_ignored_when_disabled(self, members, template):
        recipients = [make_recipient(1, preferences=EmailPreferences(voting_summaries=False))]
        coordinator = BulkDeliveryCoordinator(FakeTransport(), resolver=MemberRecipientResolver(members))

        report = asyncio.run(coordinator.send_bulk(recipients, template, fast(respect_preferences=False)))

        assert report.filtered_out == 0
        assert report.successful == 1


class TestStopAndRetry:
    def test_stop_between_batches(self, template):
        recipients = [make_recipient(i) for i in range(6)]
        transport = FakeTransport()
        coordinator = BulkDeliveryCoordinator(transport)
        transport.on_send = lambda to: coordinator.request_stop()

        report = asyncio.run(coordinator.send_bulk(recipients, template, fast(batch_size=2)))

        assert report.aborted
        assert len(transport.calls) == 2
        assert report.successful == 2
        assert report.failed == 4
        assert len(report.results) == 6
        skipped = report.failed_results
        assert {r.recipient_id for r in skipped} == {"m2", "m3", "m4", "m5"}
        assert all(r.error == "Delivery aborted" and r.attempts == 0 for r in skipped)

    def test_aborted_recipients_can_be_retried(self, template):
        recipients = [make_recipient(i) for i in range(4)]
        transport = FakeTransport()
        coordinator = BulkDeliveryCoordinator(transport)
        transport.on_send = lambda to: coordinator.request_stop()
        report = asyncio.run(coordinator.send_bulk(recipients, template, fast(batch_size=2)))
        transport.on_send = None

        retried = asyncio.run(coordinator.retry_failed(report, template))

        assert sorted(r.recipient_id for r in retried.results) == ["m2", "m3"]
        assert retried.successful == 2

    def test_stop_outside_a_run_is_ignored(self, template):
        transport = FakeTransport()
        coordinator = BulkDeliveryCoordinator(transport)
        coordinator.request_stop()

        report = asyncio.run(coordinator.send_bulk([make_recipient(0)], template, fast()))

        assert not report.aborted
        assert report.successful == 1
        assert transport.calls_to("m0@board.org") == 1

    def test_stop_does_not_carry_over(self, template):
        transport = FakeTransport()
        coordinator = BulkDeliveryCoordinator(transport)
        transport.on_send = lambda to: coordinator.request_stop()
        first = asyncio.run(coordinator.send_bulk([make_recipient(0)], template, fast()))
        second = asyncio.run(coordinator.send_bulk([make_recipient(1)], template, fast()))

        assert not first.aborted
        assert not second.aborted
        assert second.successful == 1

    def test_retry_failed_only(self, template):
        recipients = [make_recipient(i) for i in range(3)]
        transport = FakeTransport(script={"m1@board.org": [False, False, False]})
        coordinator = BulkDeliveryCoordinator(transport)
        report = asyncio.run(coordinator.send_bulk(recipients, template, fast()))
        assert report.failed == 1

        retried = asyncio.run(coordinator.retry_failed(report, template))

        assert retried.total_recipients == 1
        assert retried.successful == 1
        assert retried.results[0].recipient_id == "m1"

    def test_retry_nothing_failed(self, template):
        coordinator = BulkDeliveryCoordinator(FakeTransport())
        report = asyncio.run(coordinator.send_bulk([make_recipient(0)], template, fast()))
        assert asyncio.run(coordinator.retry_failed(report, template)) is None


class TestTracking:
    def test_results_written_per_batch(self, members, delivery_log, template):
        recipients = seed_members(members, 5)
        transport = FakeTransport(always_fail={"m3@board.org"})
        coordinator = BulkDeliveryCoordinator(transport, recorder=delivery_log)

        asyncio.run(coordinator.send_bulk(recipients, template, fast(batch_size=2), decision_id="r1"))

        assert delivery_log.count("r1") == 5
        assert members.get_member("m0").last_email_sent is not None
        assert members.get_member("m3").last_email_sent is None

    def test_aborted_recipients_logged(self, members, delivery_log, template):
        recipients = seed_members(members, 4)
        transport = FakeTransport()
        coordinator = BulkDeliveryCoordinator(transport, recorder=delivery_log)
        transport.on_send = lambda to: coordinator.request_stop()

        asyncio.run(coordinator.send_bulk(recipients, template, fast(batch_size=2), decision_id="r1"))

        assert delivery_log.count("r1") == 4
        assert members.get_member("m3").last_email_sent is None

    def test_tracking_disabled(self, delivery_log, template):
        coordinator = BulkDeliveryCoordinator(FakeTransport(), recorder=delivery_log)
        asyncio.run(coordinator.send_bulk([make_recipient(0)], template, fast(track_delivery=False)))
        assert delivery_log.count() == 0


class TestTiming:
    def test_retry_delay_grows(self, template):
        transport = FakeTransport(script={"m0@board.org": [False, False, True]}, delay=0)
        coordinator = BulkDeliveryCoordinator(transport)

        report = asyncio.run(coordinator.send_bulk([make_recipient(0)], template, fast(retry_delay=0.05)))

        first, second, third = transport.start_times("m0@board.org")
        assert report.results[0].success
        assert second - first >= 0.04
        assert third - second > second - first

    def test_next_batch_waits_for_retries(self, template):
        recipients = [make_recipient(i) for i in range(3)]
        transport = FakeTransport(script={"m0@board.org": [False, False, True]}, delay=0)
        coordinator = BulkDeliveryCoordinator(transport)

        report = asyncio.run(
            coordinator.send_bulk(recipients, template, fast(retry_delay=0.02, batch_size=2, max_concurrent=2))
        )

        assert report.successful == 3
        last_m0 = transport.start_times("m0@board.org")[-1]
        assert len(transport.start_times("m0@board.org")) == 3
        assert transport.start_times("m2@board.org")[0] >= last_m0


class TestPersonalizeContent:
    def test_replaces_every_occurrence(self):
        assert personalize_content("{{a}} and {{a}} {{b}}", {"a": "x"}) == "x and x {{b}}"
