import unittest

from app import app, db
from models.application import Application, ApplicationStatus
from models.application_module_progress import ApplicationModuleProgress
from models.notification import Notification, NotificationType
from models.project import Project
from models.project_module import ProjectModule
from services.progress_service import (
    ProgressSnapshot,
    build_progress_snapshot,
    get_application_progress,
    toggle_module_completion,
    update_progress,
)
from services.result import ErrorKind
from tests.utils.case import DatabaseTestCase


class ProgressSnapshotTestCase(unittest.TestCase):
    def test_percentage_is_rounded_to_two_decimals(self):
        snapshot = ProgressSnapshot(application_id=1, project_id=1, total_modules=3, completed_module_ids=[7])
        self.assertEqual(snapshot.progress_percentage, 33.33)
        self.assertFalse(snapshot.is_complete)

    def test_zero_modules_is_zero_percent(self):
        snapshot = ProgressSnapshot(application_id=1, project_id=1, total_modules=0)
        self.assertEqual(snapshot.progress_percentage, 0.0)
        self.assertFalse(snapshot.is_complete)
        self.assertEqual(snapshot.to_dict()["completed_modules_count"], 0)


class ModuleProgressTestCase(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.module_ids = self._create_modules("Kickoff", "Build", "Ship")
        self.application_id = self._create_application()

    def _toggle(self, module_id, is_completed, user_id=None):
        with app.app_context():
            return toggle_module_completion(
                self.application_id, module_id, is_completed, user_id or self.student_user_id
            )

    def _progress_rows(self):
        with app.app_context():
            return ApplicationModuleProgress.query.filter_by(application_id=self.application_id).count()

    def test_completing_one_of_three_modules(self):
        result = self._toggle(self.module_ids[0], True)
        self.assertTrue(result.success)
        self.assertEqual(result.data["total_modules"], 3)
        self.assertEqual(result.data["completed_modules_count"], 1)
        self.assertEqual(result.data["progress_percentage"], 33.33)
        self.assertEqual(result.data["completed_module_ids"], [self.module_ids[0]])

    def test_completing_twice_is_idempotent(self):
        self._toggle(self.module_ids[1], True)
        result = self._toggle(self.module_ids[1], True)
        self.assertTrue(result.success)
        self.assertEqual(result.data["completed_modules_count"], 1)
        self.assertEqual(self._progress_rows(), 1)

    def test_uncompleting_deletes_row_and_is_noop_when_absent(self):
        self._toggle(self.module_ids[0], True)
        result = self._toggle(self.module_ids[0], False)
        self.assertTrue(result.success)
        self.assertEqual(result.data["completed_modules_count"], 0)
        self.assertEqual(self._progress_rows(), 0)

        again = self._toggle(self.module_ids[0], False)
        self.assertTrue(again.success)
        self.assertEqual(again.data["progress_percentage"], 0.0)
        self.assertEqual(self._progress_rows(), 0)

    def test_incomplete_row_is_flipped(self):
        with app.app_context():
            db.session.add(
                ApplicationModuleProgress(
                    application_id=self.application_id, project_module_id=self.module_ids[2], is_completed=False
                )
            )
            db.session.commit()
        result = self._toggle(self.module_ids[2], True)
        self.assertEqual(result.data["completed_module_ids"], [self.module_ids[2]])
        self.assertEqual(self._progress_rows(), 1)

    def test_completed_ids_follow_module_order(self):
        self._toggle(self.module_ids[2], True)
        result = self._toggle(self.module_ids[0], True)
        self.assertEqual(result.data["completed_module_ids"], [self.module_ids[0], self.module_ids[2]])

    def test_all_modules_completed_notifies_company_once(self):
        for module_id in self.module_ids:
            result = self._toggle(module_id, True)
        self.assertEqual(result.data["progress_percentage"], 100.0)

        # repeating a completed toggle must not notify again
        self._toggle(self.module_ids[0], True)
        with app.app_context():
            notifications = Notification.query.filter_by(user_id=self.company_user_id).all()
            self.assertEqual(len(notifications), 1)
            self.assertEqual(notifications[0].type_enum, NotificationType.MODULES_COMPLETED)
            self.assertEqual(notifications[0].application_id, self.application_id)
            self.assertIn("Ada Lovelace", notifications[0].message)

    def test_other_student_cannot_toggle(self):
        result = self._toggle(self.module_ids[0], True, user_id=self.other_student_user_id)
        self.assertFalse(result.success)
        self.assertEqual(result.error, ErrorKind.UNAUTHORIZED)
        self.assertEqual(self._progress_rows(), 0)

    def test_company_cannot_toggle(self):
        result = self._toggle(self.module_ids[0], True, user_id=self.company_user_id)
        self.assertEqual(result.error, ErrorKind.UNAUTHORIZED)

    def test_anonymous_toggle_is_rejected(self):
        with app.app_context():
            result = toggle_module_completion(self.application_id, self.module_ids[0], True, None)
        self.assertEqual(result.error, ErrorKind.UNAUTHORIZED)

    def _foreign_module(self):
        with app.app_context():
            other = Project(name="Other", company_id=self.company_id, created_by=self.company_user_id)
            db.session.add(other)
            db.session.commit()
            other_id = other.id
        return self._create_modules("Foreign", project_id=other_id)[0]

    def test_module_from_another_project_is_rejected(self):
        foreign_module = self._foreign_module()
        result = self._toggle(foreign_module, True)
        self.assertEqual(result.error, ErrorKind.VALIDATION)
        self.assertEqual(result.message, "Module does not belong to this project.")
        self.assertEqual(self._progress_rows(), 0)

    def test_unknown_application(self):
        with app.app_context():
            result = toggle_module_completion(9999, self.module_ids[0], True, self.student_user_id)
        self.assertEqual(result.error, ErrorKind.NOT_FOUND)

    def test_stale_progress_rows_are_ignored(self):
        foreign_module = self._foreign_module()
        self._toggle(self.module_ids[0], True)
        with app.app_context():
            # a row pointing at a module of another project does not count
            db.session.add(
                ApplicationModuleProgress(
                    application_id=self.application_id, project_module_id=foreign_module, is_completed=True
                )
            )
            db.session.commit()
            application = db.session.get(Application, self.application_id)
            snapshot = build_progress_snapshot(application)
        self.assertEqual(snapshot.total_modules, 3)
        self.assertEqual(snapshot.completed_module_ids, [self.module_ids[0]])

    def test_update_progress_returns_bool(self):
        with app.app_context():
            result = update_progress(self.student_user_id, self.application_id, self.module_ids[1], True)
            denied = update_progress(self.other_student_user_id, self.application_id, self.module_ids[1], True)
        self.assertTrue(result.success)
        self.assertIs(result.data, True)
        self.assertFalse(denied.success)
        self.assertEqual(denied.error, ErrorKind.UNAUTHORIZED)

    def test_get_application_progress_breakdown(self):
        self._toggle(self.module_ids[1], True)
        with app.app_context():
            result = get_application_progress(self.application_id)
        self.assertTrue(result.success)
        self.assertEqual(result.data["application_status"], ApplicationStatus.ACCEPTED.value)
        self.assertEqual(result.data["progress_percentage"], 33.33)
        modules = result.data["modules"]
        self.assertEqual([module["title"] for module in modules], ["Kickoff", "Build", "Ship"])
        self.assertEqual([module["is_completed"] for module in modules], [False, True, False])
        self.assertIsNotNone(modules[1]["completed_at"])

    def test_progress_follows_module_deletion(self):
        self._toggle(self.module_ids[0], True)
        with app.app_context():
            db.session.delete(db.session.get(ProjectModule, self.module_ids[2]))
            db.session.commit()
            result = get_application_progress(self.application_id)
        self.assertEqual(result.data["total_modules"], 2)
        self.assertEqual(result.data["progress_percentage"], 50.0)


class ProgressRoutesTestCase(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.module_ids = self._create_modules("Kickoff", "Build")
        self.application_id = self._create_application()

    def test_toggle_route(self):
        self._login(self.student_user_id)
        response = self.client.post(
            f"/api/applications/{self.application_id}/modules/{self.module_ids[0]}/toggle",
            json={"is_completed": True},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["data"]["progress_percentage"], 50.0)

        undo = self.client.post(
            f"/api/applications/{self.application_id}/modules/{self.module_ids[0]}/toggle",
            json={"is_completed": False},
        )
        self.assertEqual(undo.get_json()["data"]["completed_modules_count"], 0)

    def test_toggle_requires_flag(self):
        self._login(self.student_user_id)
        response = self.client.post(
            f"/api/applications/{self.application_id}/modules/{self.module_ids[0]}/toggle", json={}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("is_completed", response.get_json()["errors"])

    def test_progress_put_and_get(self):
        self._login(self.student_user_id)
        response = self.client.put(
            f"/api/applications/{self.application_id}/progress",
            json={"module_id": self.module_ids[1], "is_completed": True},
        )
        self.assertEqual(response.status_code, 200)
        self.assertIs(response.get_json()["data"], True)

        progress = self.client.get(f"/api/applications/{self.application_id}/progress")
        self.assertEqual(progress.status_code, 200)
        self.assertEqual(progress.get_json()["data"]["completed_module_ids"], [self.module_ids[1]])

    def test_other_student_is_forbidden(self):
        self._login(self.other_student_user_id)
        response = self.client.put(
            f"/api/applications/{self.application_id}/progress",
            json={"module_id": self.module_ids[1], "is_completed": True},
        )
        self.assertEqual(response.status_code, 403)

    def test_unknown_application_progress(self):
        self._login(self.student_user_id)
        response = self.client.get("/api/applications/9999/progress")
        self.assertEqual(response.status_code, 404)


if __name__ == "__main__":
    unittest.main()
