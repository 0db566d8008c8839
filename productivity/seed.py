"""Seed the database with the fixed roles and a default editor account.

Usage:
    python -m productivity.seed
    python -m productivity.seed --reset --editor-password <password>

Roles keep fixed ids because registration clients send ``roleId``.
"""

import argparse
import asyncio
import sys

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from productivity.core import async_session_maker, engine, setup_logging
from productivity.core.logging import get_logger
from productivity.models import Role, RoleName, User
from productivity.services.session import hash_password

logger = get_logger("seed")

ROLE_DEFINITIONS = [
    (1, RoleName.VIEWER, "Can only view data, no modification permissions"),
    (2, RoleName.EDITOR, "Can view, create, update, and delete data"),
    (3, RoleName.OPERATOR, "Warehouse operator recording daily productivity"),
    (4, RoleName.ADMIN, "Full access including the activity audit trail"),
]

DEFAULT_EDITOR = {
    "username": "editor",
    "email": "editor@example.com",
    "full_name": "Default Editor",
}


async def seed_roles(db: AsyncSession) -> list[Role]:
    """Create missing roles. Existing roles are left untouched."""
    result = await db.execute(select(Role))
    existing = {role.name: role for role in result.scalars().all()}

    roles = []
    for role_id, name, description in ROLE_DEFINITIONS:
        role = existing.get(name)
        if role is None:
            role = Role(id=role_id, name=name, description=description)
            db.add(role)
            logger.info(f"Created role {name} (id={role_id})")
        roles.append(role)
    await db.flush()
    return roles


async def seed_default_editor(db: AsyncSession, password: str) -> User | None:
    """Create the default editor account unless the username is taken."""
    result = await db.execute(select(User).where(User.username == DEFAULT_EDITOR["username"]))
    if result.unique().scalar_one_or_none() is not None:
        logger.info("Default editor already exists")
        return None

    role = (await db.execute(select(Role).where(Role.name == RoleName.EDITOR))).scalar_one()
    user = User(password_hash=hash_password(password), role_id=role.id, **DEFAULT_EDITOR)
    db.add(user)
    await db.flush()
    logger.info(f"Created default editor account {user.username}")
    return user


async def run(reset: bool, editor_password: str) -> None:
    async with async_session_maker() as db:
        if reset:
            await db.execute(delete(User))
            await db.execute(delete(Role))
            logger.warning("Deleted all users and roles")
        await seed_roles(db)
        await seed_default_editor(db, editor_password)
        await db.commit()
    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed roles and the default editor")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete all users and roles before seeding",
    )
    parser.add_argument(
        "--editor-password",
        default="editor123",
        help="Password for the default editor account (default: editor123)",
    )
    args = parser.parse_args()

    setup_logging()
    try:
        asyncio.run(run(args.reset, args.editor_password))
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        sys.exit(1)
    print("Database has been seeded.")


if __name__ == "__main__":
    main()
