"""
HTTP-level tests: routing, identity header and the mapping of service errors to status codes.
"""
from decimal import Decimal

from httpx import ASGITransport, AsyncClient

from api.deps import get_blob_storage, get_notifier
from database import get_db
from main import app
from models import Role
from support import DatabaseTestCase


class TestLoanReviewApi(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()

        async def _test_db():
            async with self.sessionmaker() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        app.dependency_overrides[get_db] = _test_db
        app.dependency_overrides[get_blob_storage] = lambda: self.storage
        app.dependency_overrides[get_notifier] = lambda: self.notifier

        self.officer = await self.make_user(Role.OFFICER)
        self.manager = await self.make_user(Role.MANAGER)
        self.admin = await self.make_user(Role.ADMIN)
        await self.session.commit()

        self.client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    async def asyncTearDown(self):
        await self.client.aclose()
        app.dependency_overrides.clear()
        await super().asyncTearDown()

    def as_user(self, user_id: str) -> dict:
        return {"X-User-Id": user_id}

    async def register_applicant(self, username: str = "alice") -> str:
        resp = await self.client.post(
            "/api/users",
            json={"username": username, "profile": {"annualIncome": 60000, "age": 35, "latePayments": 0}},
        )
        self.assertEqual(resp.status_code, 201)
        return resp.json()["id"]

    async def upload(self, user_id: str, document_type: str = "id_proof") -> str:
        resp = await self.client.post(
            "/api/documents",
            files={"file": ("id.pdf", b"%PDF-1.4", "application/pdf")},
            data={"documentType": document_type},
            headers=self.as_user(user_id),
        )
        self.assertEqual(resp.status_code, 201)
        return resp.json()["id"]

    async def test_health(self):
        resp = await self.client.get("/health")
        self.assertEqual(resp.json(), {"status": "ok"})

    async def test_full_review_flow(self):
        alice = await self.register_applicant()

        resp = await self.client.post(
            "/api/applications",
            json={"amount": 5000, "termMonths": 12, "purpose": "personal"},
            headers=self.as_user(alice),
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "validation_error")

        doc_id = await self.upload(alice)
        resp = await self.client.post(
            "/api/applications",
            json={"amount": 5000, "termMonths": 12, "purpose": "personal"},
            headers=self.as_user(alice),
        )
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        app_id = body["id"]
        self.assertEqual(body["status"], "SUBMITTED")
        self.assertEqual(body["creditScore"], 595)
        self.assertEqual(Decimal(str(body["interestRate"])), Decimal("12"))
        self.assertFalse(body["documentsVerified"])

        resp = await self.client.post(f"/api/applications/{app_id}/approve", headers=self.as_user(self.manager.id))
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["currentState"], "SUBMITTED")

        resp = await self.client.post(f"/api/documents/{doc_id}/verify", headers=self.as_user(self.officer.id))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "VERIFIED")

        resp = await self.client.get(f"/api/applications/{app_id}", headers=self.as_user(alice))
        self.assertEqual(resp.json()["status"], "DOCUMENT_VERIFIED")
        self.assertTrue(resp.json()["documentsVerified"])

        resp = await self.client.post(f"/api/applications/{app_id}/approve", headers=self.as_user(self.officer.id))
        self.assertEqual(resp.status_code, 403)

        resp = await self.client.post(f"/api/applications/{app_id}/approve", headers=self.as_user(self.manager.id))
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "APPROVED")
        self.assertEqual(Decimal(str(body["pendingAmount"])), Decimal("5600"))
        self.assertEqual(Decimal(str(body["paidAmount"])), Decimal("0"))

        resp = await self.client.get(f"/api/applications/{app_id}/documents", headers=self.as_user(alice))
        self.assertEqual([d["id"] for d in resp.json()], [doc_id])

        self.assertEqual(
            [status for _, status in self.sink.events],
            ["SUBMITTED", "DOCUMENT_VERIFIED", "APPROVED"],
        )

    async def test_assessment_endpoint(self):
        alice = await self.register_applicant()
        await self.upload(alice)
        resp = await self.client.post(
            "/api/applications",
            json={"amount": 5000, "termMonths": 12, "purpose": "personal"},
            headers=self.as_user(alice),
        )
        app_id = resp.json()["id"]
        resp = await self.client.get(f"/api/applications/{app_id}/assessment", headers=self.as_user(self.officer.id))
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["creditScore"], 595)
        self.assertTrue(body["eligible"])
        self.assertIn("Income", [f["name"] for f in body["factors"]])

    async def test_identity_is_required(self):
        resp = await self.client.get("/api/applications")
        self.assertEqual(resp.status_code, 401)
        resp = await self.client.get("/api/applications", headers=self.as_user("usr-nobody"))
        self.assertEqual(resp.status_code, 401)

    async def test_unknown_application_is_404(self):
        resp = await self.client.get("/api/applications/app-missing", headers=self.as_user(self.officer.id))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "not_found")

    async def test_staff_accounts_need_an_admin(self):
        resp = await self.client.post("/api/users", json={"username": "eve", "role": "MANAGER"})
        self.assertEqual(resp.status_code, 403)
        resp = await self.client.post(
            "/api/users", json={"username": "eve", "role": "MANAGER"}, headers=self.as_user(self.admin.id)
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["role"], "MANAGER")

    async def test_duplicate_username_is_rejected(self):
        await self.register_applicant("bob")
        resp = await self.client.post("/api/users", json={"username": "bob"})
        self.assertEqual(resp.status_code, 400)

    async def test_profile_update_and_deactivation(self):
        alice = await self.register_applicant()
        resp = await self.client.patch(
            "/api/users/me/profile", json={"creditMix": ["auto"], "favouriteColour": "blue"}, headers=self.as_user(alice)
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["profile"]["creditMix"], ["auto"])
        self.assertEqual(resp.json()["profile"]["latePayments"], 0)

        resp = await self.client.post(f"/api/users/{alice}/deactivate", headers=self.as_user(self.officer.id))
        self.assertEqual(resp.status_code, 403)
        resp = await self.client.post(f"/api/users/{alice}/deactivate", headers=self.as_user(self.admin.id))
        self.assertFalse(resp.json()["isActive"])
        resp = await self.client.get("/api/users/me", headers=self.as_user(alice))
        self.assertEqual(resp.status_code, 403)

    async def test_interest_rate_overrides(self):
        resp = await self.client.put(
            "/api/interest-rates/Personal", json={"rate": 7.25}, headers=self.as_user(self.officer.id)
        )
        self.assertEqual(resp.status_code, 403)

        resp = await self.client.put(
            "/api/interest-rates/Personal", json={"rate": 7.25}, headers=self.as_user(self.manager.id)
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["purpose"], "personal")

        resp = await self.client.get("/api/interest-rates")
        rates = {r["purpose"]: r for r in resp.json()["rates"]}
        self.assertTrue(rates["personal"]["override"])
        self.assertEqual(Decimal(str(rates["personal"]["rate"])), Decimal("7.25"))
        self.assertFalse(rates["education"]["override"])

        resp = await self.client.put(
            "/api/interest-rates/personal", json={"rate": 3}, headers=self.as_user(self.manager.id)
        )
        self.assertEqual(resp.status_code, 400)

    async def test_lost_blob_maps_to_bad_gateway(self):
        alice = await self.register_applicant()
        doc_id = await self.upload(alice)
        resp = await self.client.get(f"/api/documents/{doc_id}/content", headers=self.as_user(alice))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.content, b"%PDF-1.4")

        self.storage.blobs.clear()
        resp = await self.client.get(f"/api/documents/{doc_id}/content", headers=self.as_user(alice))
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json()["error"], "storage_error")
