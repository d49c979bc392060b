#!/usr/bin/env python3
"""Bootstrap an ADMIN account linked to a CEO employee"""
import argparse
import asyncio
import sys
from sqlalchemy import select
from employee_service.app.core.database import AsyncSessionLocal, init_db, close_db
from employee_service.app.core.security import hash_password
from employee_service.app.models import Employee, EmployeeRole, User, UserRole


async def create_admin(email: str, password: str, name: str, surname: str, employee_number: str):
    """
    Create the admin account and its CEO record if they don't exist.

    Returns the linked CEO employee, or None when linking was refused.
    """
    await init_db()

    async with AsyncSessionLocal() as session:
        async with session.begin():
            result = await session.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()

            if user:
                print(f"ℹ️  Account '{email}' already exists.")
                if user.role != UserRole.ADMIN:
                    user.role = UserRole.ADMIN
                    print("✅ Updated account to ADMIN")
            else:
                user = User(
                    email=email,
                    name=f"{name} {surname}",
                    password_hash=hash_password(password),
                    role=UserRole.ADMIN,
                )
                session.add(user)
                await session.flush()
                print(f"✅ Admin account created: {email}")

            result = await session.execute(select(Employee).where(Employee.user_id == user.id))
            linked = result.scalar_one_or_none()

            result = await session.execute(
                select(Employee).where(Employee.employee_number == employee_number)
            )
            ceo = result.scalar_one_or_none()

            if linked is not None and (ceo is None or linked.id != ceo.id):
                print(f"⚠️  Account '{email}' is already linked to employee {linked.employee_number}; not linking")
                ceo = None
            elif ceo is None:
                result = await session.execute(select(Employee).where(Employee.email == email))
                email_taken = result.scalar_one_or_none() is not None
                ceo = Employee(
                    employee_number=employee_number,
                    name=name,
                    surname=surname,
                    email=None if email_taken else email,
                    role=EmployeeRole.CEO,
                    department="Executive",
                    user_id=user.id,
                )
                session.add(ceo)
                await session.flush()
                print(f"✅ CEO employee {employee_number} created and linked")
            elif ceo.role != EmployeeRole.CEO:
                print(f"⚠️  Employee {employee_number} is a {ceo.role.value}, not a CEO; not linking")
                ceo = None
            elif ceo.user_id is None:
                ceo.user_id = user.id
                print(f"✅ Linked existing employee {employee_number}")
            elif ceo.user_id == user.id:
                print(f"ℹ️  Employee {employee_number} is already linked to this account")
            else:
                print(f"⚠️  Employee {employee_number} is already linked to another account; not linking")
                ceo = None

    await close_db()
    return ceo


def parse_args():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--email", default="admin@company.com")
    parser.add_argument("--password", default="admin123")
    parser.add_argument("--name", default="System")
    parser.add_argument("--surname", default="Administrator")
    parser.add_argument("--employee-number", default="EMP001")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    try:
        asyncio.run(create_admin(args.email, args.password, args.name, args.surname, args.employee_number))
        sys.exit(0)
    except Exception as e:
        print(f"❌ Error creating admin user: {e}")
        sys.exit(1)
