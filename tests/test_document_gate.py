"""
Tests for document uploads and the verification gate.
"""

from errors import NotFoundError, PermissionDeniedError, ValidationError
from models import DocumentStatus, LoanStatus, Role
from services.document_gate import DocumentGate, gate_satisfied
from support import DatabaseTestCase


class TestDocumentGate(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.gate = DocumentGate(self.session, self.storage, self.notifier)
        self.applicant = await self.make_user(Role.APPLICANT)
        self.officer = await self.make_user(Role.OFFICER)

    async def test_upload_stores_blob_and_records_document(self):
        doc = await self.gate.record_upload(self.applicant, "id.png", "image/png", b"\x89PNG", " passport ")
        self.assertEqual(doc.status, DocumentStatus.UPLOADED.value)
        self.assertEqual(doc.document_type, "passport")
        self.assertEqual(doc.file_size, 4)
        self.assertIsNone(doc.application_id)
        self.assertEqual(self.storage.retrieve(doc.storage_handle), b"\x89PNG")

    async def test_upload_rejects_empty_file(self):
        with self.assertRaises(ValidationError):
            await self.gate.record_upload(self.applicant, "empty.pdf", "application/pdf", b"", "passport")

    async def test_upload_rejects_blank_document_type(self):
        with self.assertRaises(ValidationError):
            await self.gate.record_upload(self.applicant, "id.pdf", "application/pdf", b"data", "   ")

    async def test_staff_cannot_upload(self):
        with self.assertRaises(PermissionDeniedError):
            await self.gate.record_upload(self.officer, "id.pdf", "application/pdf", b"data", "passport")

    async def test_verify_unknown_document(self):
        with self.assertRaises(NotFoundError):
            await self.gate.verify("doc-missing", self.officer)

    async def test_applicant_cannot_verify(self):
        doc = await self.make_document(self.applicant)
        with self.assertRaises(PermissionDeniedError):
            await self.gate.verify(doc.id, self.applicant)

    async def test_verifying_last_type_releases_every_submitted_application(self):
        """Two pending applications unblock together once each document type has a verified copy."""
        id_doc = await self.make_document(self.applicant, "id_proof")
        income_doc = await self.make_document(self.applicant, "income_proof")
        first = await self.make_application(self.applicant)
        second = await self.make_application(self.applicant)
        rejected = await self.make_application(self.applicant, status=LoanStatus.REJECTED)

        await self.gate.verify(id_doc.id, self.officer)
        self.assertEqual(first.status, LoanStatus.SUBMITTED.value)
        self.assertFalse(first.documents_verified)
        self.assertEqual(self.sink.events, [])

        await self.gate.verify(income_doc.id, self.officer)
        for app in (first, second):
            self.assertEqual(app.status, LoanStatus.DOCUMENT_VERIFIED.value)
            self.assertTrue(app.documents_verified)
            self.assertEqual(app.officer_id, self.officer.id)
        self.assertEqual(rejected.status, LoanStatus.REJECTED.value)
        self.assertEqual(
            self.sink.events,
            [(self.applicant.id, "DOCUMENT_VERIFIED"), (self.applicant.id, "DOCUMENT_VERIFIED")],
        )

    async def test_rejected_copy_does_not_block_when_another_copy_is_verified(self):
        bad = await self.make_document(self.applicant, "id_proof", status=DocumentStatus.REJECTED)
        good = await self.make_document(self.applicant, "id_proof")
        app = await self.make_application(self.applicant)
        self.assertFalse(gate_satisfied([bad]))
        await self.gate.verify(good.id, self.officer)
        self.assertEqual(app.status, LoanStatus.DOCUMENT_VERIFIED.value)

    async def test_other_applicants_are_untouched(self):
        other = await self.make_user(Role.APPLICANT)
        other_app = await self.make_application(other)
        doc = await self.make_document(self.applicant)
        await self.make_application(self.applicant)
        await self.gate.verify(doc.id, self.officer)
        self.assertEqual(other_app.status, LoanStatus.SUBMITTED.value)

    async def test_reject_clears_flag_on_all_applications_including_approved(self):
        """Any rejection re-opens document scrutiny, even on decided applications."""
        doc = await self.make_document(self.applicant)
        verified = await self.make_application(self.applicant, LoanStatus.DOCUMENT_VERIFIED, documents_verified=True)
        approved = await self.make_application(self.applicant, LoanStatus.APPROVED, documents_verified=True)

        result = await self.gate.reject(doc.id, self.officer)

        self.assertEqual(result.status, DocumentStatus.REJECTED.value)
        self.assertEqual(result.reviewed_by, self.officer.id)
        self.assertFalse(verified.documents_verified)
        self.assertFalse(approved.documents_verified)
        self.assertEqual(verified.status, LoanStatus.DOCUMENT_VERIFIED.value)
        self.assertEqual(approved.status, LoanStatus.APPROVED.value)

    async def test_link_only_claims_unlinked_documents(self):
        earlier = await self.make_application(self.applicant)
        claimed = await self.make_document(self.applicant, application_id=earlier.id)
        loose = await self.make_document(self.applicant)
        app = await self.make_application(self.applicant)

        linked = await self.gate.link_unassociated_documents(self.applicant.id, app.id)

        self.assertEqual([d.id for d in linked], [loose.id])
        self.assertEqual(loose.application_id, app.id)
        self.assertEqual(claimed.application_id, earlier.id)

    async def test_retrieve_enforces_ownership(self):
        doc = await self.make_document(self.applicant)
        stranger = await self.make_user(Role.APPLICANT)
        _, data = await self.gate.retrieve(doc.id, self.officer)
        self.assertEqual(data, b"pdf")
        with self.assertRaises(PermissionDeniedError):
            await self.gate.retrieve(doc.id, stranger)

    async def test_list_for_scopes_by_role(self):
        await self.make_document(self.applicant)
        other = await self.make_user(Role.APPLICANT)
        await self.make_document(other, status=DocumentStatus.VERIFIED)
        self.assertEqual(len(await self.gate.list_for(self.applicant)), 1)
        self.assertEqual(len(await self.gate.list_for(self.officer)), 2)
        verified = await self.gate.list_for(self.officer, DocumentStatus.VERIFIED.value)
        self.assertEqual([d.owner_id for d in verified], [other.id])

    async def test_gate_requires_at_least_one_document(self):
        self.assertFalse(gate_satisfied([]))
