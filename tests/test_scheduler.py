import unittest
from unittest.mock import patch

from app.worker.errors import FatalError
from app.worker.scheduler import UpcomingEventScheduler
from app.worker.special_dates import plan_special_date

from fakes import NOW, FakeMailer, FakeStore, at, reminder_row, special_date_row


class TestSchedulerBase(unittest.TestCase):

    def make(self, store, mailer=None, now=NOW, max_workers=1):
        self.store = store
        self.mailer = mailer or FakeMailer()
        return UpcomingEventScheduler(self.store, self.mailer, now=now, max_workers=max_workers)


class TestScenarios(TestSchedulerBase):

    def test_scenario_a_reminder_today_both_channels_succeed(self):
        scheduler = self.make(FakeStore(reminders=[reminder_row()], emails={"user-1": "me@example.com"}))
        report = scheduler.run()
        self.assertEqual(report.message, "Processed 1 upcoming events")
        self.assertEqual(len(report.results), 1)
        result = report.results[0]
        self.assertEqual((result.id, result.type, result.status), ("rem-1", "reminder", "success"))
        self.assertEqual(result.contact, "Ada Lovelace")
        self.assertEqual(len(self.mailer.sent), 1)
        self.assertEqual(len(self.store.inserted), 1)

    def test_scenario_b_email_failure_is_partial(self):
        scheduler = self.make(
            FakeStore(reminders=[reminder_row()], emails={"user-1": "me@example.com"}),
            FakeMailer(fail=True),
        )
        result = scheduler.run().results[0]
        self.assertEqual(result.status, "partial_success")
        self.assertIn("email failed", result.message)
        inserted = self.store.inserted[0]
        self.assertEqual((inserted["user_id"], inserted["reminder_id"]), ("user-1", "rem-1"))
        self.assertEqual(inserted["type"], "reminder_due")

    def test_scenario_c_special_date_email_follows_global_setting(self):
        row = special_date_row(id="sd-9", date="1999-07-04")
        for enabled, status, sent in ((True, "success", 1), (False, "success_no_email", 0)):
            scheduler = self.make(
                FakeStore(special_dates=[row], settings={"user-1": enabled}, emails={"user-1": "me@example.com"}),
                now=at(2025, 6, 27, 7),
            )
            report = scheduler.run()
            self.assertEqual([r.id for r in report.results], ["sd-9-7d"])
            self.assertEqual(report.results[0].type, "special_date")
            self.assertEqual(report.results[0].status, status)
            self.assertEqual(len(self.mailer.sent), sent)

    def test_scenario_d_bad_row_is_skipped(self):
        store = FakeStore(
            reminders=[reminder_row(id="bad", date="31/02/2025"), reminder_row(id="good")],
            emails={"user-1": "me@example.com"},
        )
        with self.assertLogs("app.worker.scheduler", level="WARNING") as logs:
            report = self.make(store).run()
        self.assertEqual([r.id for r in report.results], ["good"])
        self.assertTrue(any("bad" in line for line in logs.output))

    def test_row_out_of_calendar_range_is_skipped(self):
        store = FakeStore(
            reminders=[
                reminder_row(id="edge", date="0001-01-01", time="00:30:00+05:00"),
                reminder_row(id="far", date="9999-12-31", time="23:30:00-05:00"),
                reminder_row(id="good"),
            ],
            special_dates=[special_date_row(id="ok", date="1990-06-11")],
            settings={"user-1": False},
            emails={"user-1": "me@example.com"},
        )
        with self.assertLogs("app.worker.scheduler", level="WARNING") as logs:
            report = self.make(store).run()
        self.assertEqual([r.id for r in report.results], ["good", "ok-1d"])
        self.assertTrue(any("edge" in line for line in logs.output))
        self.assertTrue(any("far" in line for line in logs.output))

    def test_unexpected_planning_error_is_isolated_to_its_row(self):
        store = FakeStore(
            reminders=[reminder_row(id="good")],
            special_dates=[special_date_row(id="boom", date="1990-06-11"), special_date_row(id="ok", date="1990-06-11")],
            settings={"user-1": False},
            emails={"user-1": "me@example.com"},
        )

        def flaky(row, now):
            if row["id"] == "boom":
                raise RuntimeError("calendar exploded")
            return plan_special_date(row, now)

        with patch("app.worker.scheduler.plan_special_date", side_effect=flaky), \
                self.assertLogs("app.worker.scheduler", level="ERROR") as logs:
            report = self.make(store).run()
        self.assertEqual([r.id for r in report.results], ["good", "ok-1d"])
        self.assertTrue(any("boom" in line for line in logs.output))

    def test_bad_special_date_is_skipped(self):
        store = FakeStore(
            special_dates=[special_date_row(id="broken", date="??"), special_date_row(id="ok")],
            settings={"user-1": False},
        )
        with self.assertLogs("app.worker.scheduler", level="WARNING"):
            report = self.make(store, now=at(2025, 6, 14)).run()
        self.assertEqual([r.id for r in report.results], ["ok-1d"])


class TestRunSemantics(TestSchedulerBase):

    def test_no_events(self):
        report = self.make(FakeStore(reminders=[reminder_row(date="2025-01-01")])).run()
        self.assertEqual(report.message, "No upcoming events found")
        self.assertEqual(report.results, [])

    def test_bulk_read_failure_is_fatal(self):
        store = FakeStore(reminders=[reminder_row()])
        store.fail_reads = True
        with self.assertRaises(FatalError):
            self.make(store).run()
        self.assertEqual(store.inserted, [])

    def test_unexpected_bulk_read_error_is_wrapped(self):
        store = FakeStore()
        with patch.object(store, "fetch_special_dates", side_effect=RuntimeError("timeout")):
            with self.assertRaises(FatalError) as ctx:
                self.make(store).run()
        self.assertIn("timeout", str(ctx.exception))

    def test_email_lookup_failure_degrades_to_partial(self):
        store = FakeStore(reminders=[reminder_row()])
        store.fail_email_lookup = True
        result = self.make(store).run().results[0]
        self.assertEqual(result.status, "partial_success")
        self.assertEqual(self.mailer.sent, [])

    def test_email_not_requested_skips_lookup(self):
        store = FakeStore(reminders=[reminder_row(send_email_notification=False)])
        store.fail_email_lookup = True
        result = self.make(store).run().results[0]
        self.assertEqual(result.status, "success_no_email")

    def test_both_channels_failing_is_error(self):
        store = FakeStore(reminders=[reminder_row()], emails={"user-1": "me@example.com"})
        store.fail_insert = True
        result = self.make(store, FakeMailer(fail=True)).run().results[0]
        self.assertEqual(result.status, "error")

    def test_unexpected_error_is_contained_per_event(self):
        store = FakeStore(
            reminders=[reminder_row(id="a"), reminder_row(id="b")],
            emails={"user-1": "me@example.com"},
        )
        scheduler = self.make(store)
        original = scheduler.dispatcher.dispatch

        def flaky(event, eligible, recipient):
            if event.id == "a":
                raise ValueError("boom")
            return original(event, eligible, recipient)

        with patch.object(scheduler.dispatcher, "dispatch", side_effect=flaky):
            with self.assertLogs("app.worker.scheduler", level="ERROR"):
                results = scheduler.run().results
        self.assertEqual([(r.id, r.status) for r in results], [("a", "error"), ("b", "success")])
        self.assertIn("boom", results[0].message)

    def test_parallel_run_keeps_order_and_isolation(self):
        reminders = [reminder_row(id=f"r{i}", user_id=f"u{i}") for i in range(8)]
        emails = {f"u{i}": f"u{i}@example.com" for i in range(8) if i % 2 == 0}
        report = self.make(FakeStore(reminders=reminders, emails=emails), max_workers=4).run()
        self.assertEqual([r.id for r in report.results], [f"r{i}" for i in range(8)])
        statuses = [r.status for r in report.results]
        self.assertEqual(statuses, ["success", "partial_success"] * 4)
        self.assertEqual(len(self.store.inserted), 8)

    def test_reinvocation_duplicates_notifications(self):
        store = FakeStore(reminders=[reminder_row()], emails={"user-1": "me@example.com"})
        scheduler = self.make(store)
        scheduler.run()
        scheduler.run()
        self.assertEqual(len(store.inserted), 2)
        self.assertEqual(len(self.mailer.sent), 2)

    def test_naive_now_is_read_as_utc(self):
        scheduler = self.make(FakeStore(), now=NOW.replace(tzinfo=None))
        self.assertEqual(scheduler.now(), NOW)


if __name__ == "__main__":
    unittest.main()
