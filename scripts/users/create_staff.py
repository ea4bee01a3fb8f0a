"""
Create a staff account (admin, medico or portero).

Creates the Supabase Auth user if needed and writes the matching
admin_users row that grants the role.

Usage:
    ENV_FILE=.env.dev python scripts/users/create_staff.py --email medico@clubzenith.com --role medico
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add parent directory to path to import libs
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from dotenv import load_dotenv

# Load env file before importing libs that use get_settings()
project_root = Path(__file__).resolve().parents[2]
env_file = os.environ.get("ENV_FILE", ".env.prod")
load_dotenv(project_root / env_file, override=True)

import httpx
from sqlalchemy import select

from libs.auth.models import STAFF_ROLES
from libs.common.config import get_settings
from libs.db.config import get_session_factory
from services.members_service.models import AdminUser

settings = get_settings()


async def find_or_create_auth_user(client: httpx.AsyncClient, email: str, password: str) -> str:
    headers = {
        "apikey": settings.SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {settings.SUPABASE_SERVICE_ROLE_KEY}",
        "Content-Type": "application/json",
    }
    url = f"{settings.SUPABASE_URL}/auth/v1/admin/users"

    response = await client.post(
        url,
        json={"email": email, "password": password, "email_confirm": True},
        headers=headers,
    )
    if response.status_code == 200:
        data = response.json()
        return data["user"]["id"] if "user" in data else data["id"]

    if response.status_code != 422 and "already" not in response.text:
        response.raise_for_status()

    print("⚠️ User already exists in Supabase. Looking up ID...")
    list_res = await client.get(url, headers=headers)
    list_res.raise_for_status()
    for user in list_res.json().get("users", []):
        if user["email"].lower() == email.lower():
            return user["id"]
    raise RuntimeError(f"Could not find Supabase user {email}")


async def create_staff(email: str, password: str, role: str, nombre: str, apellido: str):
    print(f"🚀 Creating {role} account for {email}")

    async with httpx.AsyncClient(timeout=30.0) as client:
        auth_id = await find_or_create_auth_user(client, email, password)
    print(f"✅ Supabase Auth user: {auth_id}")

    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(select(AdminUser).where(AdminUser.auth_id == auth_id))
        staff = result.scalar_one_or_none()
        if staff:
            print(f"⚠️ Role record exists ({staff.role}), updating to {role}")
            staff.role = role
        else:
            session.add(
                AdminUser(
                    auth_id=auth_id,
                    role=role,
                    email=email,
                    nombre=nombre,
                    apellido=apellido,
                )
            )
        await session.commit()

    print(f"🎉 {email} is now {role}")


def main():
    parser = argparse.ArgumentParser(description="Create a Club Zenith staff account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", default=os.environ.get("STAFF_PASSWORD", "cambiar-ya"))
    parser.add_argument("--role", choices=[r.value for r in STAFF_ROLES], default="admin")
    parser.add_argument("--nombre", default="Staff")
    parser.add_argument("--apellido", default="Zenith")
    args = parser.parse_args()

    asyncio.run(create_staff(args.email, args.password, args.role, args.nombre, args.apellido))


if __name__ == "__main__":
    main()
