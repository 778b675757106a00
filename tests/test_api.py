"""HTTP tests through the FastAPI app: auth flow, access guard, uploads, files and timeline."""

import tempfile
import unittest
from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bugtracker.core.config import settings
from bugtracker.core.database import get_db
from bugtracker.core.security import create_access_token, decode_access_token
from bugtracker.core.storage import LocalBlobStore, get_blob_store
from bugtracker.main import app
from bugtracker.models import Attachment, Base, Comment, Report, StatusChange

API = settings.API_PREFIX
MIB = 1024 * 1024


class ApiTestCase(unittest.TestCase):
    """Fresh in-memory database and blob directory per test."""

    def setUp(self) -> None:
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(engine)
        self.Session = sessionmaker(bind=engine, autoflush=False)
        self.tmpdir = tempfile.TemporaryDirectory()
        self.blobs = LocalBlobStore(self.tmpdir.name)

        def override_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_db
        app.dependency_overrides[get_blob_store] = lambda: self.blobs
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.tmpdir.cleanup()

    def register(self, email: str = "ada@example.com", password: str = "pw-123456", name: str = "Ada"):
        return self.client.post(f"{API}/auth/register", json={"name": name, "email": email, "password": password})

    def login(self, email: str = "ada@example.com", password: str = "pw-123456"):
        return self.client.post(f"{API}/auth/login", json={"email": email, "password": password})

    def auth_headers(self) -> dict[str, str]:
        self.register()
        token = self.login().json()["token"]
        return {"Authorization": f"Bearer {token}"}

    def make_report(self) -> int:
        db = self.Session()
        try:
            report = Report(title="Crash when saving", tags=["crash"])
            db.add(report)
            db.commit()
            return report.id
        finally:
            db.close()


class TestAuthFlow(ApiTestCase):
    def test_register_then_login(self) -> None:
        resp = self.register()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"success": True})

        resp = self.login()
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        claims = decode_access_token(body["token"])
        self.assertEqual(claims["sub"], str(body["user"]["id"]))
        self.assertEqual(body["user"]["email"], "ada@example.com")
        self.assertEqual(body["user"]["role"], "user")
        self.assertIsNone(body["user"]["avatar_url"])
        self.assertNotIn("password_hash", body["user"])

    def test_register_missing_fields(self) -> None:
        resp = self.client.post(f"{API}/auth/register", json={"email": "a@example.com"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Missing fields"})

    def test_register_duplicate_email(self) -> None:
        self.register()
        resp = self.register(name="Impostor")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Email already exists"})

    def test_login_failures_are_indistinguishable(self) -> None:
        self.register()
        wrong_password = self.login(password="not-the-password")
        unknown_email = self.login(email="ghost@example.com")
        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_email.status_code, 401)
        self.assertEqual(wrong_password.json(), unknown_email.json())
        self.assertEqual(wrong_password.json(), {"error": "Invalid credentials"})

    def test_me_returns_account(self) -> None:
        resp = self.client.get(f"{API}/auth/me", headers=self.auth_headers())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["email"], "ada@example.com")
        self.assertEqual(resp.json()["name"], "Ada")


class TestAccessGuard(ApiTestCase):
    def test_missing_header(self) -> None:
        resp = self.client.get(f"{API}/auth/me")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Unauthorized"})

    def test_garbage_token(self) -> None:
        resp = self.client.get(f"{API}/auth/me", headers={"Authorization": "Bearer nonsense"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Unauthorized"})

    def test_expired_token_same_response_as_invalid(self) -> None:
        self.register()
        issued = datetime.now(UTC) - timedelta(days=8)
        token = create_access_token(1, "ada@example.com", now=issued)
        expired = self.client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
        invalid = self.client.get(f"{API}/auth/me", headers={"Authorization": "Bearer x.y.z"})
        self.assertEqual(expired.status_code, 401)
        self.assertEqual(expired.json(), invalid.json())

    def test_non_bearer_scheme(self) -> None:
        resp = self.client.get(f"{API}/auth/me", headers={"Authorization": "Basic YTpi"})
        self.assertEqual(resp.status_code, 401)

    def test_token_trusted_without_lookup_until_expiry(self) -> None:
        """A validly signed token for a missing account passes the guard; /me then 404s."""
        token = create_access_token(999, "gone@example.com")
        resp = self.client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 404)


class TestProfileAndAvatar(ApiTestCase):
    def test_profile_requires_auth(self) -> None:
        resp = self.client.post(f"{API}/user/profile", json={"name": "X"})
        self.assertEqual(resp.status_code, 401)

    def test_partial_profile_update(self) -> None:
        headers = self.auth_headers()
        resp = self.client.post(f"{API}/user/profile", json={"name": "Ada Lovelace"}, headers=headers)
        self.assertEqual(resp.json(), {"success": True})
        me = self.client.get(f"{API}/auth/me", headers=headers).json()
        self.assertEqual(me["name"], "Ada Lovelace")
        self.assertIsNone(me["avatar_url"])

    def test_avatar_upload(self) -> None:
        headers = self.auth_headers()
        resp = self.client.post(
            f"{API}/user/avatar",
            files={"file": ("me.png", b"\x89PNG....", "image/png")},
            headers=headers,
        )
        self.assertEqual(resp.status_code, 200)
        avatar_url = resp.json()["avatar_url"]
        self.assertTrue(avatar_url.startswith(f"{API}/files/avatars/"))
        self.assertEqual(self.client.get(f"{API}/auth/me", headers=headers).json()["avatar_url"], avatar_url)

        served = self.client.get(avatar_url)
        self.assertEqual(served.status_code, 200)
        self.assertEqual(served.content, b"\x89PNG....")
        self.assertEqual(served.headers["content-type"], "image/png")

    def test_avatar_with_url_special_characters_loads(self) -> None:
        headers = self.auth_headers()
        resp = self.client.post(
            f"{API}/user/avatar",
            files={"file": ("me #1.png", b"\x89PNG-hash", "image/png")},
            headers=headers,
        )
        self.assertEqual(resp.status_code, 200)
        avatar_url = resp.json()["avatar_url"]
        self.assertNotIn("#", avatar_url)

        served = self.client.get(avatar_url)
        self.assertEqual(served.status_code, 200)
        self.assertEqual(served.content, b"\x89PNG-hash")

    def test_avatar_without_file(self) -> None:
        resp = self.client.post(f"{API}/user/avatar", data={"other": "x"}, headers=self.auth_headers())
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "No file provided"})

    def test_avatar_requires_auth(self) -> None:
        resp = self.client.post(f"{API}/user/avatar", files={"file": ("me.png", b"x", "image/png")})
        self.assertEqual(resp.status_code, 401)


class TestReportUpload(ApiTestCase):
    def test_upload_and_serve(self) -> None:
        report_id = self.make_report()
        resp = self.client.post(
            f"{API}/reports/{report_id}/upload",
            files={"file": ("trace.txt", b"Traceback ...", "text/plain")},
        )
        self.assertEqual(resp.status_code, 200)
        key = resp.json()["key"]
        self.assertTrue(key.startswith(f"attachments/{report_id}/"))
        self.assertTrue(key.endswith("_trace.txt"))

        served = self.client.get(f"{API}/files/{key}")
        self.assertEqual(served.status_code, 200)
        self.assertEqual(served.content, b"Traceback ...")
        self.assertTrue(served.headers["content-type"].startswith("text/plain"))
        self.assertIn("etag", served.headers)

        listed = self.client.get(f"{API}/reports/{report_id}/attachments").json()
        self.assertEqual(len(listed), 1)
        self.assertEqual(listed[0]["storage_key"], key)
        self.assertEqual(listed[0]["file_size"], len(b"Traceback ..."))

    def test_over_long_file_name_is_accepted(self) -> None:
        report_id = self.make_report()
        resp = self.client.post(
            f"{API}/reports/{report_id}/upload",
            files={"file": ("a" * 300 + ".png", b"png-bytes", "image/png")},
        )
        self.assertEqual(resp.status_code, 200)
        key = resp.json()["key"]
        self.assertTrue(key.endswith(".png"))
        self.assertEqual(self.client.get(f"{API}/files/{key}").content, b"png-bytes")

        listed = self.client.get(f"{API}/reports/{report_id}/attachments").json()
        self.assertLessEqual(len(listed[0]["file_name"]), 100)

    def test_eleven_mib_rejected_without_blob(self) -> None:
        report_id = self.make_report()
        resp = self.client.post(
            f"{API}/reports/{report_id}/upload",
            files={"file": ("big.bin", b"\0" * (11 * MIB), "application/octet-stream")},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("too large", resp.json()["error"])
        self.assertEqual(list(self.blobs.list()), [])

    def test_video_rejected(self) -> None:
        report_id = self.make_report()
        resp = self.client.post(
            f"{API}/reports/{report_id}/upload",
            files={"file": ("clip.mp4", b"tiny", "video/mp4")},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Video files are not allowed"})
        self.assertEqual(list(self.blobs.list()), [])
        db = self.Session()
        try:
            self.assertEqual(db.query(Attachment).count(), 0)
        finally:
            db.close()

    def test_no_file(self) -> None:
        report_id = self.make_report()
        resp = self.client.post(f"{API}/reports/{report_id}/upload", data={"note": "x"})
        self.assertEqual(resp.status_code, 400)

    def test_missing_file_is_404(self) -> None:
        resp = self.client.get(f"{API}/files/attachments/1/0_missing.txt")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "File not found"})


class TestTimelineAndDiscussion(ApiTestCase):
    def test_timeline_order_and_tags(self) -> None:
        report_id = self.make_report()
        t1 = datetime(2024, 1, 1, 9, 0, 0)
        db = self.Session()
        try:
            db.add_all(
                [
                    Comment(bug_id=report_id, user_id=None, content="first", created_at=t1),
                    Comment(bug_id=report_id, user_id=None, content="third", created_at=t1 + timedelta(hours=2)),
                    StatusChange(
                        bug_id=report_id,
                        old_status="Open",
                        new_status="Triaged",
                        created_at=t1 + timedelta(hours=1),
                    ),
                ]
            )
            db.commit()
        finally:
            db.close()

        events = self.client.get(f"{API}/reports/{report_id}/timeline").json()
        self.assertEqual([e["type"] for e in events], ["comment", "status_change", "comment"])
        self.assertEqual(events[0]["content"], "first")
        self.assertEqual(events[1]["new_status"], "Triaged")
        self.assertEqual(events[2]["content"], "third")

    def test_timeline_of_unknown_report_is_empty(self) -> None:
        resp = self.client.get(f"{API}/reports/424242/timeline")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), [])

    def test_comment_and_status_change_through_api(self) -> None:
        headers = self.auth_headers()
        report_id = self.make_report()
        resp = self.client.post(f"{API}/reports/{report_id}/comments", json={"content": "seen it"}, headers=headers)
        self.assertEqual(resp.status_code, 200)
        resp = self.client.post(f"{API}/reports/{report_id}/status", json={"status": "Resolved"}, headers=headers)
        self.assertEqual(resp.status_code, 200)

        detail = self.client.get(f"{API}/reports/{report_id}").json()
        self.assertEqual(detail["status"], "Resolved")
        types = {e["type"] for e in self.client.get(f"{API}/reports/{report_id}/timeline").json()}
        self.assertEqual(types, {"comment", "status_change"})

    def test_blank_status_rejected(self) -> None:
        headers = self.auth_headers()
        report_id = self.make_report()
        resp = self.client.post(f"{API}/reports/{report_id}/status", json={"status": "   "}, headers=headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Status is required"})

        self.assertEqual(self.client.get(f"{API}/reports/{report_id}").json()["status"], "Open")
        self.assertEqual(self.client.get(f"{API}/reports/{report_id}/timeline").json(), [])

    def test_comment_requires_auth(self) -> None:
        report_id = self.make_report()
        resp = self.client.post(f"{API}/reports/{report_id}/comments", json={"content": "anon"})
        self.assertEqual(resp.status_code, 401)


class TestReportsAndProducts(ApiTestCase):
    def test_create_and_list(self) -> None:
        product = self.client.post(f"{API}/products", json={"name": "Mobile App", "icon_color": "#1976D2"}).json()
        resp = self.client.post(
            f"{API}/bugs",
            json={"title": "Crash on launch", "severity": "High", "product_id": product["id"], "tags": ["ios"]},
        )
        self.assertEqual(resp.status_code, 200)

        bugs = self.client.get(f"{API}/bugs").json()
        self.assertEqual(len(bugs), 1)
        self.assertEqual(bugs[0]["status"], "Open")
        self.assertEqual(bugs[0]["product_name"], "Mobile App")
        self.assertEqual(bugs[0]["tags"], ["ios"])

        products = self.client.get(f"{API}/products").json()
        self.assertEqual([p["name"] for p in products], ["Mobile App"])

    def test_missing_report_is_404(self) -> None:
        resp = self.client.get(f"{API}/reports/999")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "Report not found"})

    def test_users_list_has_no_credentials(self) -> None:
        self.register()
        users = self.client.get(f"{API}/users").json()
        self.assertEqual(len(users), 1)
        self.assertEqual(set(users[0]), {"id", "name", "email", "role", "avatar_url"})

    def test_missing_title_is_400(self) -> None:
        resp = self.client.post(f"{API}/bugs", json={"severity": "Low"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("error", resp.json())


if __name__ == "__main__":
    unittest.main()
