"""
Shared fixtures.

Environment is set before the application is imported so the engine points
at a throwaway SQLite database.
"""
import asyncio
import os
import tempfile

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{tempfile.mkdtemp()}/test.db"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RATE_LIMIT"] = "10000/minute"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.core.database.engine import AsyncSessionLocal  # noqa: E402
from app.features.organizations.models import Organization, OrganizationType, SubscriptionPlan  # noqa: E402
from app.features.users.auth import create_access_token  # noqa: E402
from app.features.users.models import User, UserRole  # noqa: E402
from app.main import app  # noqa: E402


async def _seed() -> dict:
    """
    Master
    ├── Enterprise (org_admin, client)
    │   └── Subsidiary
    └── Other enterprise (inspector)
    """
    async with AsyncSessionLocal() as db:
        master = Organization(
            name="Master", type=OrganizationType.MASTER, plan=SubscriptionPlan.ENTERPRISE,
            max_users=1000, max_subsidiaries=100,
        )
        db.add(master)
        await db.flush()
        enterprise = Organization(name="Enterprise", type=OrganizationType.ENTERPRISE, parent_id=master.id)
        other = Organization(name="Other enterprise", type=OrganizationType.ENTERPRISE, parent_id=master.id)
        db.add_all([enterprise, other])
        await db.flush()
        subsidiary = Organization(name="Subsidiary", type=OrganizationType.SUBSIDIARY, parent_id=enterprise.id)
        db.add(subsidiary)
        await db.flush()

        users = {
            "system_admin": User(email="admin@acme.com", name="Admin", role=UserRole.SYSTEM_ADMIN, organization_id=master.id),
            "org_admin": User(email="orgadmin@acme.com", name="Org Admin", role=UserRole.ORG_ADMIN, organization_id=enterprise.id),
            "client": User(email="client@acme.com", name="Client", role=UserRole.CLIENT, organization_id=enterprise.id),
            "inspector": User(email="inspector@acme.com", name="Inspector", role=UserRole.INSPECTOR, organization_id=other.id),
        }
        db.add_all(users.values())
        await db.commit()

        return {
            "organizations": {
                "master": master.id,
                "enterprise": enterprise.id,
                "other": other.id,
                "subsidiary": subsidiary.id,
            },
            "users": {key: user.id for key, user in users.items()},
            "headers": {
                key: {"Authorization": f"Bearer {create_access_token(user.id)}"}
                for key, user in users.items()
            },
        }


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="session")
def seeded(client):
    return asyncio.run(_seed())
