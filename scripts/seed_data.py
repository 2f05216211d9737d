"""
Seed script to populate a fresh database.

Creates:
- The master organization and its system administrator
- A sample enterprise under the master and its organization admin

Prints a bearer token for each seeded user.

Usage:
    python -m scripts.seed_data
"""
import asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db, init_db
from app.features.organizations.models import Organization, OrganizationType, SubscriptionPlan
from app.features.users.auth import create_access_token
from app.features.users.models import User, UserRole
from app.utils import get_logger


log = get_logger(__name__)


MASTER_ORGANIZATION = {
    "name": "IA SST Master",
    "type": OrganizationType.MASTER,
    "plan": SubscriptionPlan.ENTERPRISE,
    "max_users": 1000,
    "max_subsidiaries": 100,
}

SAMPLE_ENTERPRISE = {
    "name": "Empresa Exemplo Ltda",
    "type": OrganizationType.ENTERPRISE,
    "plan": SubscriptionPlan.PRO,
    "max_users": 50,
    "max_subsidiaries": 10,
    "address": "Rua das Empresas, 123 - São Paulo, SP",
    "phone": "(11) 9999-9999",
    "email": "contato@empresaexemplo.com",
    "cnpj": "12.345.678/0001-99",
}


async def get_or_create_organization(db: AsyncSession, parent_id: str | None, **fields) -> Organization:
    """Find an organization by name or create it."""
    result = await db.execute(select(Organization).where(Organization.name == fields["name"]))
    existing = result.scalars().first()
    if existing:
        log.debug(f"Organization '{existing.name}' already exists, skipping")
        return existing

    organization = Organization(parent_id=parent_id, **fields)
    db.add(organization)
    await db.commit()
    await db.refresh(organization)
    log.info(f"Created organization '{organization.name}' ({organization.id})")
    return organization


async def get_or_create_user(db: AsyncSession, email: str, name: str, role: UserRole, organization_id: str) -> User:
    """Find a user by email or create it."""
    result = await db.execute(select(User).where(User.email == email))
    existing = result.scalars().first()
    if existing:
        log.debug(f"User '{email}' already exists, skipping")
        return existing

    user = User(email=email, name=name, role=role, organization_id=organization_id)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    log.info(f"Created user '{email}' as {role.value}")
    return user


async def main():
    """Main function to seed organizations and users."""
    log.info("Starting data seeding...")
    await init_db()

    async for db in get_db():
        try:
            master = await get_or_create_organization(db, None, **MASTER_ORGANIZATION)
            enterprise = await get_or_create_organization(db, master.id, **SAMPLE_ENTERPRISE)

            admin = await get_or_create_user(
                db, "admin@iasst.com", "System Administrator", UserRole.SYSTEM_ADMIN, master.id
            )
            org_admin = await get_or_create_user(
                db, "admin@empresaexemplo.com", "João Silva", UserRole.ORG_ADMIN, enterprise.id
            )

            log.info("Data seeding completed successfully!")
            for user in (admin, org_admin):
                log.info(f"  - {user.email}: Bearer {create_access_token(user.id, expires_in=86400)}")

        except Exception as e:
            log.error(f"Error seeding data: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())
