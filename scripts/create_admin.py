"""
Script to create an Admin user
Admins are never created through the public registration endpoint
"""

import sys
import asyncio
import uuid
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.database import database, connect_db, disconnect_db, utcnow
from app.auth import ROLE_ADMIN, MIN_PASSWORD_LENGTH, hash_password, generate_random_password


async def create_admin(email: str, name: str, password: str = None):
    """
    Create an admin user, or promote an existing account to admin

    Args:
        email: Admin email
        name: Display name
        password: Password (if None, will generate random)
    """

    await connect_db()

    try:
        email = email.strip().lower()
        existing = await database.fetch_one(
            "SELECT id, role FROM users WHERE email = :email",
            {"email": email}
        )

        if existing:
            if existing["role"] == ROLE_ADMIN:
                print(f"❌ {email} is already an admin!")
                return
            await database.execute(
                "UPDATE users SET role = :role WHERE id = :id",
                {"role": ROLE_ADMIN, "id": str(existing["id"])}
            )
            print(f"✅ Existing account {email} promoted to admin.")
            return

        generated = password is None
        if generated:
            password = generate_random_password(12)

        await database.execute(
            """
            INSERT INTO users (id, email, password_hash, name, role, created_at)
            VALUES (:id, :email, :password_hash, :name, :role, :created_at)
            """,
            {
                "id": str(uuid.uuid4()),
                "email": email,
                "password_hash": hash_password(password),
                "name": name,
                "role": ROLE_ADMIN,
                "created_at": utcnow()
            }
        )

        print("✅ Admin created successfully!")
        print(f"   Email: {email}")
        print(f"   Name: {name}")

        if generated:
            print(f"   Password: {password}")
            print("   ⚠️  IMPORTANT: Save this password! It is not shown again.")
        else:
            print("   Password: (custom password set)")

    except Exception as e:
        print(f"❌ Error creating admin: {e}")

    finally:
        await disconnect_db()


async def main():
    """Main function"""
    print("\n" + "="*60)
    print("CREATE ADMIN")
    print("="*60 + "\n")

    email = input("Enter email: ").strip()
    name = input("Enter name: ").strip()

    use_custom = input("Set custom password? (y/n): ").strip().lower()

    if use_custom == 'y':
        password = input("Enter password: ").strip()
        confirm = input("Confirm password: ").strip()

        if password != confirm:
            print("❌ Passwords do not match!")
            return

        if len(password) < MIN_PASSWORD_LENGTH:
            print(f"❌ Password must be at least {MIN_PASSWORD_LENGTH} characters!")
            return
    else:
        password = None

    print("\n")
    await create_admin(email, name, password)
    print("\n")


if __name__ == "__main__":
    asyncio.run(main())
