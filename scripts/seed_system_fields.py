"""
Seed a development database with the built-in system metadata fields
"""
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict

# Add the project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schema_engine.database import Base, initialize_database
from schema_engine.models import FieldScope, MetadataField, MetadataOption
from scripts.system_field_definitions import get_system_field_definitions

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def _sync_options(session: AsyncSession, field: MetadataField, options: list, force: bool) -> None:
    stmt = select(MetadataOption).where(MetadataOption.metadata_field_id == field.id)
    existing = {option.value: option for option in (await session.execute(stmt)).scalars().all()}

    for option_data in options:
        option = existing.get(option_data["value"])
        if option is None:
            session.add(MetadataOption(metadata_field_id=field.id, **option_data))
        elif force:
            for key, value in option_data.items():
                setattr(option, key, value)


async def seed_system_fields(session: AsyncSession, force: bool = False) -> None:
    """
    Seed system fields and their options

    Args:
        session: Database session
        force: If True, will update existing fields and options
    """
    for definition in get_system_field_definitions():
        field_data: Dict[str, Any] = {k: v for k, v in definition.items() if k != "options"}
        options = definition.get("options", [])

        stmt = select(MetadataField).where(
            MetadataField.scope == FieldScope.SYSTEM,
            MetadataField.tenant_id.is_(None),
            MetadataField.key == field_data["key"],
        )
        field = (await session.execute(stmt)).scalar_one_or_none()

        if field is None:
            field = MetadataField(scope=FieldScope.SYSTEM, **field_data)
            session.add(field)
            await session.flush()
            logger.info(f"Added system field: {field.key}")
        elif force:
            for key, value in field_data.items():
                setattr(field, key, value)
            logger.info(f"Updated system field: {field.key}")
        else:
            logger.info(f"Skipping existing system field: {field.key}")
            continue

        await _sync_options(session, field, options, force)

    await session.commit()
    logger.info("System field seeding completed")


async def main():
    """Main entry point for the seed script"""
    import argparse

    parser = argparse.ArgumentParser(description="Seed the database with built-in system metadata fields")
    parser.add_argument("--force", action="store_true", help="Force update existing fields and options")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables before seeding")
    parser.add_argument("--database-url", help="Override DATABASE_URL")

    args = parser.parse_args()

    session_manager = initialize_database(database_url=args.database_url)
    await session_manager.initialize()

    try:
        if args.create_tables:
            async with session_manager.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created")

        async with session_manager.get_session() as session:
            await seed_system_fields(session, force=args.force)
    finally:
        await session_manager.close()


if __name__ == "__main__":
    asyncio.run(main())
