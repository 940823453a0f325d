"""
Plan generation, listing, fetch, pagination and dashboard over the API.
"""
from datetime import date, datetime, timezone

import pytest

from conftest import count_rows, login, register, seed_plan
from core.errors import GenerationError
from services.db import Plano

ANA = {"nome": "Ana", "objetivo": "perda de peso", "restricoes": ["lactose"]}


# ── generate ─────────────────────────────────────────────────────────
def test_generate_stores_extracted_plan(client, auth):
    user_id, headers = auth
    r = client.post("/gerar-plano", json=ANA, headers=headers)
    assert r.status_code == 200, r.text

    plano = r.json()["plano"]
    assert plano["user_id"] == user_id
    assert plano["paciente"] == "Ana"
    assert plano["objetivo"] == "perda de peso"
    assert plano["anamnese"] == ANA
    assert plano["data"] == datetime.now(timezone.utc).date().isoformat()
    assert plano["plano"]["tabela"][0]["horario"] == "08:00"

    stored = client.get(f"/plano/{plano['id']}", headers=headers).json()["plano"]
    assert stored["plano"]["tabela"][0]["horario"] == "08:00"


@pytest.mark.parametrize(
    "body",
    [{"nome": "Ana"}, {"objetivo": "perda de peso"}, {"nome": "", "objetivo": "x"}, ["Ana"]],
)
def test_generate_rejects_incomplete_anamnese(client, auth, generator, body):
    _, headers = auth
    r = client.post("/gerar-plano", json=body, headers=headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Dados de anamnese incompletos."}
    assert generator.calls == []


@pytest.mark.parametrize("reply", ["Desculpe, não consigo.", "resposta: {}"])
def test_reply_without_json_persists_nothing(client, auth, generator, reply):
    _, headers = auth
    generator.reply = reply
    r = client.post("/gerar-plano", json=ANA, headers=headers)
    assert r.status_code == 400
    assert r.json() == {"error": "A IA não retornou um JSON válido."}
    assert count_rows(client, Plano) == 0


def test_unparseable_reply_persists_nothing(client, auth, generator):
    _, headers = auth
    generator.reply = '{"resumo": "ok",}'
    r = client.post("/gerar-plano", json=ANA, headers=headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Erro ao interpretar resposta da IA. Tente novamente."}
    assert count_rows(client, Plano) == 0


def test_reply_with_nan_persists_nothing(client, auth, generator):
    _, headers = auth
    generator.reply = '{"resumo": "ok", "kcal": NaN, "tabela": []}'
    r = client.post("/gerar-plano", json=ANA, headers=headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Erro ao interpretar resposta da IA. Tente novamente."}
    assert count_rows(client, Plano) == 0
    assert client.get("/planos", headers=headers).json()["planos"] == []


def test_generation_service_failure(client, auth, generator):
    _, headers = auth
    generator.reply = GenerationError("quota exceeded")
    r = client.post("/gerar-plano", json=ANA, headers=headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Erro ao gerar plano com IA."}


def test_unexpected_generator_crash_is_500(client, auth, generator):
    _, headers = auth
    generator.reply = RuntimeError("boom")
    r = client.post("/gerar-plano", json=ANA, headers=headers)
    assert r.status_code == 500
    assert r.json() == {"error": "Erro ao gerar plano com IA."}


def test_generate_requires_token(client):
    assert client.post("/gerar-plano", json=ANA).status_code == 401


# ── list / fetch ─────────────────────────────────────────────────────
def test_list_is_newest_first(client, auth):
    user_id, headers = auth
    for d in (date(2024, 1, 10), date(2024, 3, 1), date(2024, 2, 5)):
        seed_plan(client, user_id, d)

    planos = client.get("/planos", headers=headers).json()["planos"]
    assert [p["data"] for p in planos] == ["2024-03-01", "2024-02-05", "2024-01-10"]


def test_list_only_shows_own_plans(client, auth):
    user_id, headers = auth
    seed_plan(client, user_id, date(2024, 1, 1))

    register(client, email="outro@example.com")
    other_id, other_headers = login(client, "outro@example.com", "s3nha-forte")
    theirs = seed_plan(client, other_id, date(2024, 1, 2))

    mine = client.get("/planos", headers=headers).json()["planos"]
    assert len(mine) == 1 and mine[0]["user_id"] == user_id
    assert client.get(f"/plano/{theirs}", headers=headers).status_code == 404
    assert client.get(f"/plano/{theirs}", headers=other_headers).status_code == 200


def test_fetch_is_repeatable(client, auth):
    user_id, headers = auth
    plan_id = seed_plan(client, user_id, date(2024, 5, 5))

    first = client.get(f"/plano/{plan_id}", headers=headers)
    second = client.get(f"/plano/{plan_id}", headers=headers)
    assert first.status_code == 200
    assert first.content == second.content


def test_fetch_missing_plan_is_404(client, auth):
    _, headers = auth
    r = client.get("/plano/999", headers=headers)
    assert r.status_code == 404
    assert r.json() == {"error": "Plano não encontrado."}


def test_fetch_non_numeric_id_is_400(client, auth):
    _, headers = auth
    assert client.get("/plano/abc", headers=headers).status_code == 400


# ── pagination ───────────────────────────────────────────────────────
def test_recent_pages_cover_full_listing(client, auth):
    user_id, headers = auth
    for d in (date(2024, 1, 1), date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)):
        seed_plan(client, user_id, d)

    everything = [p["id"] for p in client.get("/planos", headers=headers).json()["planos"]]

    page1 = client.get("/planos/recentes?limit=2&offset=0", headers=headers).json()
    page2 = client.get("/planos/recentes?limit=2&offset=2", headers=headers).json()
    assert page1["total"] == page2["total"] == 4

    paged = [p["id"] for p in page1["planos"] + page2["planos"]]
    assert len(paged) == len(set(paged))
    assert sorted(paged) == sorted(everything)


def test_recent_defaults(client, auth):
    user_id, headers = auth
    for day in range(1, 8):
        seed_plan(client, user_id, date(2024, 4, day))

    for query in ("", "?limit=abc&offset=xyz", "?limit=0"):
        body = client.get(f"/planos/recentes{query}", headers=headers).json()
        assert body["total"] == 7
        assert [p["data"] for p in body["planos"]] == [
            f"2024-04-0{d}" for d in (7, 6, 5, 4, 3)
        ]


def test_recent_parses_leading_digits(client, auth):
    user_id, headers = auth
    for day in range(1, 5):
        seed_plan(client, user_id, date(2024, 5, day))

    body = client.get("/planos/recentes?limit=2abc&offset=1x", headers=headers).json()
    assert body["total"] == 4
    assert [p["data"] for p in body["planos"]] == ["2024-05-03", "2024-05-02"]

    body = client.get("/planos/recentes?limit=-3", headers=headers).json()
    assert len(body["planos"]) == 4


# ── dashboard ────────────────────────────────────────────────────────
def test_dashboard_without_plans(client, auth):
    _, headers = auth
    r = client.get("/dashboard", headers=headers)
    assert r.status_code == 200
    assert r.json() == {
        "totalPlanos": 0,
        "planosPorMes": {},
        "totalPacientes": 0,
        "planosPorObjetivo": {},
        "ultimoPlano": None,
        "planosUltimos7Dias": 0,
        "topObjetivos": [],
    }


def test_dashboard_over_generated_plans(client, auth):
    user_id, headers = auth
    client.post("/gerar-plano", json=ANA, headers=headers)
    client.post("/gerar-plano", json={"nome": "Bia", "objetivo": "ganho de massa"}, headers=headers)
    seed_plan(client, user_id, date(2023, 12, 24), paciente="Ana", objetivo="perda de peso")

    today = datetime.now(timezone.utc).date().isoformat()
    d = client.get("/dashboard", headers=headers).json()
    assert d["totalPlanos"] == 3
    assert d["totalPacientes"] == 2
    assert d["planosPorMes"] == {"2023-12": 1, today[:7]: 2}
    assert d["planosUltimos7Dias"] == 2
    assert d["ultimoPlano"]["data"] == today
    assert d["ultimoPlano"]["paciente"] == "Bia"
    assert d["topObjetivos"][0] == {"objetivo": "perda de peso", "count": 2}
