import io
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="paper-review-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'review.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["MEMBERSHIP_ENFORCE"] = "false"
os.environ["DECISION_MIN_REVIEWS"] = "1"
os.environ["ENVIRONMENT"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.permissions import resolve_effective_roles  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.crud import event_roles  # noqa: E402
from app.db.database import Base, SessionLocal, engine, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import (  # noqa: E402
    Event,
    EventRoleType,
    GlobalRole,
    Submission,
    SubmissionStatus,
    User,
)
from app.services.file_store import LocalFileStore  # noqa: E402

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n%%EOF\n"


def pdf_stream(content: bytes = PDF_BYTES) -> io.BytesIO:
    return io.BytesIO(content)


@pytest.fixture
def db():
    """Fresh schema for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def user_factory(db):
    counter = {"n": 0}

    def _create(full_name=None, email=None, role=GlobalRole.USER, is_active=True) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.org",
            full_name=full_name or f"User {counter['n']}",
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _create


@pytest.fixture
def event_factory(db):
    counter = {"n": 0}

    def _create(name=None) -> Event:
        counter["n"] += 1
        event = Event(name=name or f"Conference {counter['n']}")
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _create


@pytest.fixture
def grant(db):
    def _grant(event: Event, user: User, *roles: EventRoleType) -> None:
        for role in roles:
            event_roles.grant_role(db, event.id, user.id, role)

    return _grant


@pytest.fixture
def submission_factory(db):
    def _create(event: Event, author: User, title="A study of things", status=SubmissionStatus.SUBMITTED,
                pdf_path=None, membership_email=None) -> Submission:
        sub = Submission(
            event_id=event.id,
            author_user_id=author.id,
            title=title,
            authors=[{"name": author.full_name, "email": author.email, "organization": None}],
            status=status,
            pdf_path=pdf_path or f"events/{event.id}/submissions/draft-{title[:5].replace(' ', '_')}.pdf",
            membership_email=membership_email,
        )
        db.add(sub)
        db.commit()
        db.refresh(sub)
        return sub

    return _create


@pytest.fixture
def access_for(db):
    def _access(user: User, event: Event):
        return resolve_effective_roles(db, user.id, event.id)

    return _access


@pytest.fixture
def event(event_factory):
    return event_factory("ICML Workshop")


@pytest.fixture
def admin(user_factory):
    return user_factory("Ada Admin", "admin@example.org", role=GlobalRole.ADMIN)


@pytest.fixture
def chair(user_factory, event, grant):
    user = user_factory("Carla Chair", "chair@example.org")
    grant(event, user, EventRoleType.CHAIR)
    return user


@pytest.fixture
def reviewer(user_factory, event, grant):
    user = user_factory("Rui Reviewer", "reviewer@example.org")
    grant(event, user, EventRoleType.REVIEWER)
    return user


@pytest.fixture
def second_reviewer(user_factory, event, grant):
    user = user_factory("Rosa Reviewer", "reviewer2@example.org")
    grant(event, user, EventRoleType.REVIEWER)
    return user


@pytest.fixture
def author(user_factory, event, grant):
    user = user_factory("Ann Author", "author@example.org")
    grant(event, user, EventRoleType.AUTHOR)
    return user


@pytest.fixture
def submission(submission_factory, event, author):
    return submission_factory(event, author)


@pytest.fixture
def file_store(tmp_path):
    return LocalFileStore(base_dir=str(tmp_path / "uploads"), max_bytes=1024 * 1024)


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
