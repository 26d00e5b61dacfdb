import unittest

from app.worker.occurrences import plan_reminder
from app.worker.preferences import resolve_email_eligibility
from app.worker.special_dates import plan_special_date

from fakes import NOW, FakeStore, at, reminder_row, special_date_row


class TestEmailEligibility(unittest.TestCase):

    def setUp(self):
        self.advance = plan_special_date(special_date_row(), at(2025, 6, 14))[0]

    def test_reminder_uses_its_own_flag(self):
        store = FakeStore(settings={"user-1": False})
        opted_in = plan_reminder(reminder_row(send_email_notification=True), NOW)
        opted_out = plan_reminder(reminder_row(send_email_notification=False), NOW)
        self.assertTrue(resolve_email_eligibility(opted_in, store))
        self.assertFalse(resolve_email_eligibility(opted_out, FakeStore(settings={"user-1": True})))

    def test_reminder_never_reads_settings(self):
        store = FakeStore()
        store.fail_settings = True
        event = plan_reminder(reminder_row(send_email_notification=True), NOW)
        self.assertTrue(resolve_email_eligibility(event, store))

    def test_special_date_follows_global_setting(self):
        self.assertTrue(resolve_email_eligibility(self.advance, FakeStore(settings={"user-1": True})))
        self.assertFalse(resolve_email_eligibility(self.advance, FakeStore(settings={"user-1": False})))

    def test_special_date_without_settings_row_fails_closed(self):
        self.assertFalse(resolve_email_eligibility(self.advance, FakeStore()))

    def test_special_date_lookup_failure_fails_closed(self):
        store = FakeStore(settings={"user-1": True})
        store.fail_settings = True
        with self.assertLogs("app.worker.preferences", level="WARNING"):
            self.assertFalse(resolve_email_eligibility(self.advance, store))

    def test_unknown_event_type_is_rejected(self):
        with self.assertRaises(TypeError):
            resolve_email_eligibility(object(), FakeStore())


if __name__ == "__main__":
    unittest.main()
