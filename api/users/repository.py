"""
User persistence helpers (raw SQL over the `users` table).

Table:
    id          serial primary key
    name        varchar(255) not null
    email       varchar(255) not null unique
    password    varchar(255) not null   -- bcrypt hash
    role        varchar(50)  not null default 'user'
    created_at  timestamp    not null default now()
    updated_at  timestamp    not null default now()
"""

from __future__ import annotations

from core import db

_PUBLIC_COLUMNS = "id, name, email, role, created_at, updated_at"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(*, name: str, email: str, password_hash: str, role: str = "user") -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO users (name, email, password, role)
        VALUES ($1, $2, $3, $4)
        RETURNING {_PUBLIC_COLUMNS}
        """,
        name.strip(),
        normalize_email(email),
        password_hash,
        role,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(email: str) -> dict | None:
    # Includes the password hash; only the sign-in flow should need it.
    return await db.fetch_one(
        f"""
        SELECT {_PUBLIC_COLUMNS}, password
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def get_user_by_id(user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_PUBLIC_COLUMNS}
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def list_users(*, limit: int = 100, offset: int = 0) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_PUBLIC_COLUMNS}
        FROM users
        ORDER BY id ASC
        LIMIT $1 OFFSET $2
        """,
        limit,
        offset,
    )


async def update_user(
    user_id: int,
    *,
    name: str | None = None,
    email: str | None = None,
    role: str | None = None,
) -> dict | None:
    # NULL parameters keep the current column value.
    return await db.fetch_one(
        f"""
        UPDATE users
        SET name = COALESCE($2, name),
            email = COALESCE($3, email),
            role = COALESCE($4, role),
            updated_at = now()
        WHERE id = $1
        RETURNING {_PUBLIC_COLUMNS}
        """,
        user_id,
        name.strip() if name is not None else None,
        normalize_email(email) if email is not None else None,
        role,
    )


async def delete_user(user_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM users
        WHERE id = $1
        RETURNING id
        """,
        user_id,
    )
    return row is not None
