"""Shared builders for API tests."""

from typing import Dict, Iterable

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User, UserRole
from app.auth.security import create_access_token, hash_password

TEST_PASSWORD = "secret123"


async def make_user(
    db: AsyncSession,
    email: str,
    roles: Iterable[str] = (),
    full_name: str = "Test User",
) -> User:
    user = User(email=email, full_name=full_name, password_hash=hash_password(TEST_PASSWORD))
    db.add(user)
    await db.flush()
    for role in roles:
        db.add(UserRole(user_id=user.id, role=role))
    await db.commit()
    return user


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(
        subject={"sub": str(user.id), "user_id": str(user.id), "email": user.email}
    )
    return {"Authorization": f"Bearer {token}"}


async def create_concept(client: AsyncClient, headers: Dict[str, str], name: str, amount) -> dict:
    resp = await client.post(
        "/api/v1/debt-concepts",
        json={"name": name, "amount": str(amount)},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def create_student(
    client: AsyncClient,
    headers: Dict[str, str],
    first_name: str = "Ana",
    last_name: str = "Benítez",
    concept_ids=(),
) -> dict:
    resp = await client.post(
        "/api/v1/students",
        json={
            "first_name": first_name,
            "last_name": last_name,
            "identification": "4.123.456",
            "concept_ids": list(concept_ids),
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def open_debts(client: AsyncClient, headers: Dict[str, str], student_id: str) -> list:
    resp = await client.get(f"/api/v1/debts/student/{student_id}", headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()
