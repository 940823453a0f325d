"""
Shared fixtures: an app wired to in-memory SQLite and a scripted LLM.
"""
from __future__ import annotations

from datetime import date
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select, text

from config import Settings
from main import create_app
from services.context import AppContext
from services.store import RecordStore

ANA_REPLY = (
    'Here is it: {"resumo":"ok","tabela":[{"refeicao":"Café","horario":"08:00",'
    '"alimentos":"aveia","observacoes":""}],"recomendacoes":"","notas":""} thanks'
)

PROFESSIONAL = {
    "name": "Marina Souza",
    "email": "marina@example.com",
    "password": "s3nha-forte",
    "cpf_cnpj": "123.456.789-00",
    "profession": "Nutricionista",
    "crn": "CRN-3 12345",
}


class FakeGenerator:
    """Stands in for Gemini; replies with `reply` or raises it."""

    def __init__(self, reply: str | Exception = ANA_REPLY) -> None:
        self.reply = reply
        self.calls: list[dict[str, Any]] = []

    async def generate(self, prompt, *, system_instruction, temperature, max_output_tokens):
        self.calls.append(
            dict(
                prompt=prompt,
                system_instruction=system_instruction,
                temperature=temperature,
                max_output_tokens=max_output_tokens,
            )
        )
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def client(generator):
    test_settings = Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        CREATE_TABLES=True,
        JWT_SECRET="test-secret",
        BCRYPT_ROUNDS=4,
    )
    with TestClient(create_app(test_settings, generator)) as c:
        yield c


def register(client: TestClient, **overrides) -> dict:
    body = {**PROFESSIONAL, **overrides}
    r = client.post("/register", json=body)
    assert r.status_code == 200, r.text
    return r.json()


def login(client: TestClient, email: str, password: str) -> tuple[str, dict]:
    r = client.post("/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    payload = r.json()
    return payload["user"]["id"], {"Authorization": f"Bearer {payload['token']}"}


@pytest.fixture
def auth(client) -> tuple[str, dict]:
    """(identity id, headers) for a freshly registered professional."""
    register(client)
    return login(client, PROFESSIONAL["email"], PROFESSIONAL["password"])


# ── direct store access, run on the app's own event loop ──────────────
def _ctx(client: TestClient) -> AppContext:
    return client.app.state.context


def seed_plan(
    client: TestClient,
    user_id: str,
    data: date,
    paciente: str = "Ana",
    objetivo: str = "perda de peso",
) -> int:
    async def _insert() -> int:
        async with _ctx(client).sessions() as session:
            row = await RecordStore(session).insert_plan(
                user_id=user_id,
                paciente=paciente,
                objetivo=objetivo,
                data=data,
                anamnese={"nome": paciente, "objetivo": objetivo},
                plano={"resumo": "seed"},
            )
            return row.id

    return client.portal.call(_insert)


def count_rows(client: TestClient, model) -> int:
    async def _count() -> int:
        async with _ctx(client).sessions() as session:
            res = await session.execute(select(func.count()).select_from(model))
            return int(res.scalar_one())

    return client.portal.call(_count)


def seed_profile(client: TestClient, email: str, identity_id: str) -> None:
    """A profile row whose email has no identity of its own."""

    async def _insert() -> None:
        async with _ctx(client).sessions() as session:
            await RecordStore(session).insert_profile(
                name="Perfil Solto",
                email=email,
                password_hash="x",
                cpf_cnpj="000",
                profession="Nutricionista",
                crn=None,
                identity_id=identity_id,
            )

    client.portal.call(_insert)


def drop_table(client: TestClient, name: str) -> None:
    async def _drop() -> None:
        async with _ctx(client).sessions() as session:
            await session.execute(text(f"DROP TABLE {name}"))
            await session.commit()

    client.portal.call(_drop)
