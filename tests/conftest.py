import os
import re

os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from boothops import models, models_event, models_inventory, models_invoice  # noqa: F401
from boothops.data_sources import data_source_manager
from boothops.database import AppBase, TenantBase, create_db_engine, get_app_db
from boothops.main import app
from boothops.models import User
from boothops.models_app import AppUser, Tenant
from boothops.rate_limiter import reset_rate_limits
from boothops.security_utils import create_session_token, hash_password

APP_TENANT_ID = "tenant-app-1"
TENANT_ID = "tenant-data-1"
SUBDOMAIN = "snapbooths"

PDF_PAGE = re.compile(rb"/Type /Page\b")


def pdf_page_count(pdf: bytes) -> int:
    return len(PDF_PAGE.findall(pdf))


@pytest.fixture
def engines(tmp_path):
    app_engine = create_db_engine(f"sqlite:///{tmp_path / 'app.db'}")
    tenant_url = f"sqlite:///{tmp_path / 'tenant.db'}"
    tenant_engine = create_db_engine(tenant_url)
    AppBase.metadata.create_all(bind=app_engine)
    TenantBase.metadata.create_all(bind=tenant_engine)
    yield app_engine, tenant_engine, tenant_url
    data_source_manager.invalidate()
    app_engine.dispose()
    tenant_engine.dispose()


@pytest.fixture
def app_db(engines):
    session = sessionmaker(bind=engines[0])()
    yield session
    session.close()


@pytest.fixture
def db(engines):
    """Session on the tenant data database, for seeding and assertions"""
    session = sessionmaker(bind=engines[1])()
    yield session
    session.close()


@pytest.fixture
def tenant(app_db, engines):
    record = Tenant(
        id=APP_TENANT_ID,
        name="Snap Booths",
        subdomain=SUBDOMAIN,
        data_source_url=engines[2],
        tenant_id_in_data_source=TENANT_ID,
    )
    app_db.add(record)
    app_db.commit()
    return record


@pytest.fixture
def client(engines, tenant):
    factory = sessionmaker(bind=engines[0])

    def override_get_app_db():
        session = factory()
        try:
            yield session
        finally:
            session.close()

    data_source_manager.invalidate()
    reset_rate_limits()
    app.dependency_overrides[get_app_db] = override_get_app_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(app_db, db, tenant):
    """Create a login plus its staff row and return (staff_user, auth headers)"""
    counter = {"n": 0}

    def _make(role="user", department=None, department_role=None, first_name="Sam", last_name="Staff"):
        counter["n"] += 1
        staff = User(
            tenant_id=TENANT_ID,
            first_name=first_name,
            last_name=last_name,
            email=f"user{counter['n']}@snapbooths.test",
            role=role,
            department=department,
            department_role=department_role,
        )
        db.add(staff)
        db.commit()
        login = AppUser(
            tenant_id=tenant.id,
            email=staff.email,
            password_hash=hash_password("correct-horse"),
            first_name=first_name,
            last_name=last_name,
            role=role,
            data_user_id=staff.id,
        )
        app_db.add(login)
        app_db.commit()
        token = create_session_token(login.id, tenant.id, role)
        return staff, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(role="admin", first_name="Ada", last_name="Admin")


@pytest.fixture
def auth_headers(admin):
    return admin[1]
