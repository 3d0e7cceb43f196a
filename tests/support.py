"""
Shared fixtures for the service and API tests: an in-memory database per test,
an in-memory blob store and a notification sink that records events.
"""
import unittest
import uuid
from decimal import Decimal

from database import Base, build_engine, build_sessionmaker, init_db
from errors import StorageError
from models import Document, DocumentStatus, LoanApplication, LoanStatus, Role, User
from services.notifications import NotificationDispatcher
from utils.clock import utcnow

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


class MemoryBlobStorage:
    def __init__(self):
        self.blobs: dict[str, bytes] = {}

    def store(self, data: bytes) -> str:
        handle = uuid.uuid4().hex
        self.blobs[handle] = data
        return handle

    def retrieve(self, handle: str) -> bytes:
        if handle not in self.blobs:
            raise StorageError(f"Could not read file: {handle}")
        return self.blobs[handle]


class RecordingSink:
    def __init__(self):
        self.events: list[tuple[str, str]] = []

    def notify(self, applicant_id: str, new_status: str) -> None:
        self.events.append((applicant_id, new_status))


class FailingSink:
    def notify(self, applicant_id: str, new_status: str) -> None:
        raise ConnectionError("mail relay down")


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh schema per test; `self.session` is an open AsyncSession."""

    async def asyncSetUp(self):
        self.engine = build_engine(MEMORY_URL)
        await init_db(self.engine)
        self.sessionmaker = build_sessionmaker(self.engine)
        self.session = self.sessionmaker()
        self.storage = MemoryBlobStorage()
        self.sink = RecordingSink()
        self.notifier = NotificationDispatcher(self.sink)

    async def asyncTearDown(self):
        await self.session.close()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await self.engine.dispose()

    async def make_user(self, role: Role = Role.APPLICANT, **profile) -> User:
        user = User(
            id=f"usr-{uuid.uuid4().hex[:12]}",
            username=f"{role.value.lower()}-{uuid.uuid4().hex[:6]}",
            role=role.value,
            is_active=True,
            **profile,
        )
        self.session.add(user)
        await self.session.flush()
        return user

    async def make_document(
        self,
        owner: User,
        document_type: str = "id_proof",
        status: DocumentStatus = DocumentStatus.UPLOADED,
        application_id: str | None = None,
    ) -> Document:
        doc = Document(
            id=f"doc-{uuid.uuid4().hex[:12]}",
            owner_id=owner.id,
            application_id=application_id,
            document_type=document_type,
            file_name="scan.pdf",
            content_type="application/pdf",
            file_size=3,
            storage_handle=self.storage.store(b"pdf"),
            status=status.value,
            uploaded_at=utcnow(),
        )
        self.session.add(doc)
        await self.session.flush()
        return doc

    async def make_application(
        self,
        applicant: User,
        status: LoanStatus = LoanStatus.SUBMITTED,
        amount: str = "5000",
        documents_verified: bool = False,
    ) -> LoanApplication:
        app = LoanApplication(
            id=f"app-{uuid.uuid4().hex[:12]}",
            applicant_id=applicant.id,
            status=status.value,
            documents_verified=documents_verified,
            amount=Decimal(amount),
            term_months=12,
            purpose="personal",
            credit_score=600,
            interest_rate=Decimal("12.00"),
            applied_at=utcnow(),
        )
        self.session.add(app)
        await self.session.flush()
        return app
