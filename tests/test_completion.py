import unittest
from datetime import datetime, timedelta

from app import app, db
from models.application import Application, ApplicationStatus
from models.notification import Notification, NotificationType
from services.completion_service import complete_job, format_duration
from services.progress_service import toggle_module_completion
from services.result import ErrorKind
from tests.utils.case import DatabaseTestCase


class FormatDurationTestCase(unittest.TestCase):
    def test_weeks_and_days(self):
        self.assertEqual(format_duration(17), "2 weeks, 3 days")
        self.assertEqual(format_duration(8), "1 week, 1 day")

    def test_exact_weeks_and_short_spans(self):
        self.assertEqual(format_duration(14), "2 weeks")
        self.assertEqual(format_duration(1), "1 day")
        self.assertEqual(format_duration(0), "0 days")


class CompleteJobTestCase(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.module_ids = self._create_modules("Kickoff", "Build", "Ship")
        self.application_id = self._create_application(ApplicationStatus.ACCEPTED)

    def _complete(self, user_id=None, **kwargs):
        with app.app_context():
            return complete_job(user_id or self.company_user_id, self.application_id, **kwargs)

    def _status(self):
        with app.app_context():
            return db.session.get(Application, self.application_id).status_enum

    def test_complete_accepted_application(self):
        with app.app_context():
            toggle_module_completion(self.application_id, self.module_ids[0], True, self.student_user_id)
            application = db.session.get(Application, self.application_id)
            application.reviewed_at = datetime.utcnow() - timedelta(days=17)
            db.session.commit()

        result = self._complete(feedback="  Great work  ", deliverable_url="https://example.com/report")
        self.assertTrue(result.success)
        summary = result.data
        self.assertEqual(summary["total_modules"], 3)
        self.assertEqual(summary["completed_modules_count"], 1)
        self.assertEqual(summary["total_modules_completed"], 1)
        self.assertEqual(summary["progress_percentage"], 33.33)
        self.assertEqual(summary["project_name"], "Data Pipeline")
        self.assertEqual(summary["student_name"], "Ada Lovelace")
        self.assertEqual(summary["duration_days"], 17)
        self.assertEqual(summary["duration_text"], "2 weeks, 3 days")
        self.assertEqual(summary["feedback"], "Great work")
        self.assertIsNotNone(summary["completed_at"])

        with app.app_context():
            application = db.session.get(Application, self.application_id)
            self.assertEqual(application.status_enum, ApplicationStatus.COMPLETED)
            self.assertEqual(application.final_deliverable_url, "https://example.com/report")
            notification = Notification.query.filter_by(user_id=self.student_user_id).one()
            self.assertEqual(notification.type_enum, NotificationType.JOB_COMPLETED)

    def test_completion_happens_once(self):
        self.assertTrue(self._complete().success)
        again = self._complete()
        self.assertFalse(again.success)
        self.assertEqual(again.error, ErrorKind.VALIDATION)
        self.assertEqual(again.message, "This job has already been completed.")

    def test_only_accepted_applications_complete(self):
        with app.app_context():
            application = db.session.get(Application, self.application_id)
            application.status_enum = ApplicationStatus.PENDING
            db.session.commit()

        result = self._complete()
        self.assertEqual(result.error, ErrorKind.VALIDATION)
        self.assertEqual(result.message, "Only accepted applications can be completed (current status: 'pending').")
        self.assertEqual(self._status(), ApplicationStatus.PENDING)

    def test_other_company_cannot_complete(self):
        result = self._complete(user_id=self.other_company_user_id)
        self.assertEqual(result.error, ErrorKind.UNAUTHORIZED)
        self.assertEqual(self._status(), ApplicationStatus.ACCEPTED)

    def test_student_cannot_complete(self):
        result = self._complete(user_id=self.student_user_id)
        self.assertEqual(result.error, ErrorKind.UNAUTHORIZED)

    def test_unknown_application(self):
        with app.app_context():
            result = complete_job(self.company_user_id, 9999)
        self.assertEqual(result.error, ErrorKind.NOT_FOUND)

    def test_all_modules_requirement_when_enabled(self):
        app.config["COMPLETION_REQUIRES_ALL_MODULES"] = True
        result = self._complete()
        self.assertEqual(result.error, ErrorKind.VALIDATION)
        self.assertEqual(self._status(), ApplicationStatus.ACCEPTED)

        with app.app_context():
            for module_id in self.module_ids:
                toggle_module_completion(self.application_id, module_id, True, self.student_user_id)
        result = self._complete()
        self.assertTrue(result.success)
        self.assertEqual(result.data["progress_percentage"], 100.0)

    def test_complete_route(self):
        self._login(self.company_user_id)
        response = self.client.post(
            "/api/applications/complete",
            json={"application_id": self.application_id, "feedback": "Thanks"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["data"]["feedback"], "Thanks")

        again = self.client.post("/api/applications/complete", json={"application_id": self.application_id})
        self.assertEqual(again.status_code, 400)

    def test_complete_route_validates_url(self):
        self._login(self.company_user_id)
        response = self.client.post(
            "/api/applications/complete",
            json={"application_id": self.application_id, "deliverable_url": "not a url"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("deliverable_url", response.get_json()["errors"])
        self.assertEqual(self._status(), ApplicationStatus.ACCEPTED)


if __name__ == "__main__":
    unittest.main()
