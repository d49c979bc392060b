#!/usr/bin/env python3
"""Script to create the employee service database and its tables"""
import asyncio
import sys
import psycopg2
from psycopg2 import sql
from psycopg2.extensions import ISOLATION_LEVEL_AUTOCOMMIT
from employee_service.app.core.config import settings
from employee_service.app.core.database import init_db, close_db


def create_database():
    """Create the database if it doesn't exist"""
    try:
        # Connect to PostgreSQL server (default postgres database)
        conn = psycopg2.connect(
            host=settings.DB_HOST,
            port=settings.DB_PORT,
            user=settings.DB_USER,
            password=settings.DB_PASSWORD,
            database="postgres"
        )
        conn.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)
        cursor = conn.cursor()

        cursor.execute("SELECT 1 FROM pg_database WHERE datname = %s", (settings.DB_NAME,))
        exists = cursor.fetchone()

        if not exists:
            cursor.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(settings.DB_NAME)))
            print(f"✅ Database '{settings.DB_NAME}' created successfully!")
        else:
            print(f"ℹ️  Database '{settings.DB_NAME}' already exists.")

        cursor.close()
        conn.close()
        return True

    except psycopg2.Error as e:
        print(f"❌ Error creating database: {e}")
        return False


async def create_tables():
    await init_db()
    await close_db()
    print("✅ Tables created")


if __name__ == "__main__":
    if not settings.is_sqlite and not create_database():
        sys.exit(1)
    asyncio.run(create_tables())
    sys.exit(0)
