import os
import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

# Keep API tests deterministic: no rate limiting, no real API calls.
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from fastapi.testclient import TestClient

from app.ai.types import CompletionError
from app.core import identity_store
from app.core.state import clear_app_states
from app.main import app


class FakeClient:
    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, messages):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.reply


class CareerApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        db_path = str(Path(self._tmp.name) / "identity.db")
        self._settings_patch = patch.object(
            identity_store, "settings", SimpleNamespace(identity_db_path=db_path)
        )
        self._settings_patch.start()
        identity_store.close_identity_store()
        clear_app_states()

        response = self.client.post("/v1/users", json={"display_name": "Sam"})
        self.assertEqual(response.status_code, 201)
        self.user_id = response.json()["user_id"]
        self.base = f"/v1/users/{self.user_id}"
        self.exploration = {
            "enjoyedSubjects": "Math",
            "dislikedSubjects": "Art",
            "hobbies": "Chess",
            "workEnvironment": "Remote",
        }

    def tearDown(self):
        identity_store.close_identity_store()
        self._settings_patch.stop()
        clear_app_states()
        self._tmp.cleanup()

    def _submit(self, path: str, payload: dict, fake: FakeClient):
        with patch("app.services.advice_service.get_ai_client", return_value=fake):
            return self.client.post(f"{self.base}/advice/{path}", json=payload)

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_register_and_restore_session(self):
        clear_app_states()
        response = self.client.get(f"{self.base}/session")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["name_confirmed"])
        self.assertEqual(body["display_name"], "Sam")

    def test_blank_display_name_rejected(self):
        response = self.client.post("/v1/users", json={"display_name": "  "})
        self.assertEqual(response.status_code, 422)

    def test_unknown_user_is_404(self):
        response = self.client.get("/v1/users/nope/state")
        self.assertEqual(response.status_code, 404)

    def test_unknown_session_is_not_registered(self):
        response = self.client.get("/v1/users/nobody-registered/session")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["name_confirmed"])

        self.assertEqual(self.client.get("/v1/users/nobody-registered/state").status_code, 404)
        fake = FakeClient(reply="never")
        with patch("app.services.advice_service.get_ai_client", return_value=fake):
            response = self.client.post(
                "/v1/users/nobody-registered/advice/exploration", json=self.exploration
            )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(fake.calls, [])

    def test_unconfirmed_session_cannot_submit(self):
        with patch.object(identity_store, "get_current_user", side_effect=RuntimeError("disk error")):
            response = self.client.get(f"{self.base}/session")
        self.assertFalse(response.json()["name_confirmed"])

        fake = FakeClient(reply="never")
        response = self._submit("exploration", self.exploration, fake)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(fake.calls, [])

    def test_dark_mode_preference(self):
        response = self.client.put(f"{self.base}/preferences", json={"dark_mode": True})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["dark_mode"])
        self.assertTrue(identity_store.get_dark_mode(self.user_id))

    def test_activate_intent_returns_scroll_target(self):
        response = self.client.post(f"{self.base}/intents/pathway")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["intent"], "pathway")
        self.assertEqual(body["title"], "Explore My Career Path")
        self.assertEqual(body["scroll_target"], "result-pathway")
        self.assertEqual(body["scroll_behavior"], "smooth")
        state = self.client.get(f"{self.base}/state").json()
        self.assertEqual(state["active_intent"], "pathway")

    def test_unknown_intent_route_is_rejected(self):
        response = self.client.post(f"{self.base}/intents/horoscope")
        self.assertEqual(response.status_code, 422)

    def test_exploration_submission_success(self):
        fake = FakeClient(reply="# Ideas\n**Actuary**")
        response = self._submit("exploration", self.exploration, fake)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["result"], "<b>Ideas</b><br><b>Actuary</b>")
        self.assertEqual(body["scroll_target"], "result-exploration")
        self.assertEqual(body["scroll_behavior"], "smooth")
        self.assertIn("Lifestyle: Not specified", fake.calls[0][0].content)
        self.assertIn("Hello Sam!", fake.calls[0][0].content)

        state = self.client.get(f"{self.base}/state").json()
        self.assertEqual(state["results"]["exploration"], body["result"])
        self.assertEqual(state["in_flight"], [])

    def test_missing_required_field_never_calls_remote(self):
        fake = FakeClient(reply="never")
        payload = dict(self.exploration, hobbies="   ")
        response = self._submit("exploration", payload, fake)
        self.assertEqual(response.status_code, 422)
        self.assertEqual(fake.calls, [])

    def test_resume_without_text_is_rejected_before_network(self):
        fake = FakeClient(reply="never")
        response = self._submit("resume", {"jobDescription": "Backend engineer"}, fake)
        self.assertEqual(response.status_code, 422)

        response = self._submit("resume", {"resumeText": "cv", "jobDescription": ""}, fake)
        self.assertEqual(response.status_code, 422)
        self.assertEqual(fake.calls, [])

    def test_resume_upload_then_submit_uses_extracted_text(self):
        upload = self.client.post(
            f"{self.base}/resume/file",
            files={"file": ("cv.txt", "Registered nurse, 5 years ICU".encode("utf-8"), "text/plain")},
        )
        self.assertEqual(upload.status_code, 200)
        self.assertEqual(upload.json()["text"], "Registered nurse, 5 years ICU")
        self.assertEqual(upload.json()["format"], "text")

        fake = FakeClient(reply="**Match**")
        response = self._submit("resume", {"jobDescription": "ICU nurse"}, fake)
        self.assertEqual(response.status_code, 200)
        self.assertIn("Registered nurse, 5 years ICU", fake.calls[0][0].content)
        self.assertIn("ICU nurse", fake.calls[0][0].content)

    def test_resume_upload_error_is_reported(self):
        upload = self.client.post(
            f"{self.base}/resume/file",
            files={"file": ("cv.pdf", b"definitely not a pdf", "application/pdf")},
        )
        self.assertEqual(upload.status_code, 400)
        self.assertIn("pdf-open", upload.json()["detail"])
        state = self.client.get(f"{self.base}/state").json()
        self.assertFalse(state["processing"])
        self.assertIn("pdf-open", state["extraction_error"])

    def test_leaving_resume_form_discards_document(self):
        self.client.post(f"{self.base}/intents/resume")
        self.client.post(
            f"{self.base}/resume/file",
            files={"file": ("cv.txt", b"resume body", "text/plain")},
        )
        self.assertIsNotNone(self.client.get(f"{self.base}/state").json()["document"])

        self.client.post(f"{self.base}/intents/exploration")
        self.assertIsNone(self.client.get(f"{self.base}/state").json()["document"])

    def test_discard_document_endpoint(self):
        self.client.post(
            f"{self.base}/resume/file",
            files={"file": ("cv.txt", b"resume body", "text/plain")},
        )
        response = self.client.delete(f"{self.base}/resume/file")
        self.assertEqual(response.status_code, 204)
        self.assertIsNone(self.client.get(f"{self.base}/state").json()["document"])

    def test_failed_submission_keeps_other_results(self):
        ok = self._submit("exploration", self.exploration, FakeClient(reply="ideas"))
        self.assertEqual(ok.status_code, 200)

        failed = self._submit(
            "pathway",
            {"dreamCareer": "Chef", "educationLevel": "None", "learningFormat": "Video"},
            FakeClient(error=CompletionError("Service Unavailable", status_code=503)),
        )
        self.assertEqual(failed.status_code, 502)
        self.assertEqual(failed.json()["detail"], "API request failed: Service Unavailable")

        state = self.client.get(f"{self.base}/state").json()
        self.assertEqual(state["results"]["exploration"], "ideas")
        self.assertIsNone(state["results"]["pathway"])
        self.assertEqual(state["error"], "API request failed: Service Unavailable")

    def test_unexpected_submission_error_is_banner_text(self):
        failed = self._submit("exploration", self.exploration, FakeClient(error=RuntimeError("timed out")))
        self.assertEqual(failed.status_code, 502)
        self.assertEqual(failed.json()["detail"], "timed out")


if __name__ == "__main__":
    unittest.main()
