"""
Test data factories for generating test objects.

This module provides Factory Boy factories for building model instances and
staged-file payloads with realistic default values. Model factories use the
build strategy; fixtures in ``conftest.py`` add and commit them on the async
test session.
"""

import base64
import uuid

import factory

from app.schemas.files import StagedFile
from models import Client, ClientType, FileStatus, StoredFile, User

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class UserFactory(factory.Factory):
    """Factory for creating User test instances."""

    class Meta:
        model = User

    clerk_user_id = factory.LazyFunction(lambda: f"clerk_user_{uuid.uuid4()}")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    username = factory.Sequence(lambda n: f"staffer{n}")
    user_type = "staff"
    is_active = True


class ClientFactory(factory.Factory):
    """Factory for creating Client test instances."""

    class Meta:
        model = Client

    client_name = factory.Faker("name")
    client_type = ClientType.CIVIL
    email = factory.Sequence(lambda n: f"client{n}@example.com")
    phone = factory.Sequence(lambda n: f"555-01{n:02d}")


class StoredFileFactory(factory.Factory):
    """Factory for creating StoredFile test instances."""

    class Meta:
        model = StoredFile

    client_name = "Unassigned"
    status = FileStatus.TEMP_QUEUE
    file_name = factory.Sequence(lambda n: f"exhibit_{n}.pdf")
    file_type = "application/pdf"
    file_size = 2048
    file_url = factory.LazyAttribute(lambda o: f"https://files.example.com/uploads/{o.file_name}")
    storage_path = factory.LazyAttribute(lambda o: f"uploads/{o.file_name}")


class StagedFileFactory(factory.Factory):
    """Factory for staged-file payloads as the web client sends them."""

    class Meta:
        model = StagedFile

    class Params:
        content = b"%PDF-1.4 retainer agreement"

    temp_id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    filename = factory.Sequence(lambda n: f"document_{n}.pdf")
    content_type = "application/pdf"
    size = factory.LazyAttribute(lambda o: len(o.content))
    file_buffer = factory.LazyAttribute(lambda o: base64.b64encode(o.content).decode("ascii"))
