from __future__ import annotations

import logging

import anyio
from fastapi import APIRouter, Depends

from core.errors import ApiError, InternalError, ServiceValidationError, Unauthenticated
from core.models.user import SessionUser
from services.auth import hash_password, verify_password
from services.context import AppContext
from services.identity import IdentityProvider
from services.store import RecordStore
from api.v1.deps import get_context, get_identity_provider, get_store
from api.v1.schemas import LoginIn, LoginOut, RegisterIn, RegisterOut, RegisteredUserOut, UserOut

router = APIRouter()
_LOG = logging.getLogger(__name__)


# ───────────────────────── login ───────────────────────────
@router.post("/login", response_model=LoginOut)
async def login(
    body: LoginIn,
    store: RecordStore = Depends(get_store),
    identities: IdentityProvider = Depends(get_identity_provider),
    ctx: AppContext = Depends(get_context),
) -> LoginOut:
    if not body.email or not body.password:
        raise ServiceValidationError("Email e senha são obrigatórios.")
    try:
        profile = await store.find_profile_by_email(body.email)
        if profile is None:
            raise Unauthenticated("Usuário não encontrado.")

        # tokens carry the identity UUID, not the profile row id
        identity = await identities.find_by_email(body.email)
        if identity is None:
            raise Unauthenticated("Usuário Auth não encontrado.")

        # bcrypt runs in a worker thread, not on the event loop
        valid = await anyio.to_thread.run_sync(verify_password, body.password, profile.password)
        if not valid:
            raise Unauthenticated("Senha inválida.")

        user = SessionUser(id=identity.id, email=profile.email, name=profile.name)
        token = ctx.tokens.issue(user)
    except ApiError:
        raise
    except Exception as exc:
        _LOG.exception("login failed for %s", body.email)
        raise InternalError("Erro interno do servidor.") from exc

    _LOG.info("login ok for %s", identity.id)
    return LoginOut(user=UserOut(**user.model_dump()), token=token)


# ───────────────────────── register ────────────────────────
@router.post("/register", response_model=RegisterOut)
async def register(
    body: RegisterIn,
    store: RecordStore = Depends(get_store),
    identities: IdentityProvider = Depends(get_identity_provider),
    ctx: AppContext = Depends(get_context),
) -> RegisterOut:
    required = (body.name, body.email, body.password, body.cpf_cnpj, body.profession)
    if not all(required):
        raise ServiceValidationError("Preencha todos os campos obrigatórios.")
    try:
        identity = await identities.create_user(body.email, body.password, email_confirm=True)
        password_hash = await anyio.to_thread.run_sync(
            hash_password, body.password, ctx.settings.bcrypt_rounds
        )
        # no compensation: if this insert fails the identity above stays behind
        profile = await store.insert_profile(
            name=body.name,
            email=body.email,
            password_hash=password_hash,
            cpf_cnpj=body.cpf_cnpj,
            profession=body.profession,
            crn=body.crn,
            identity_id=identity.id,
        )
    except ApiError:
        raise
    except Exception as exc:
        _LOG.exception("registration failed for %s", body.email)
        raise InternalError("Erro interno do servidor.") from exc

    return RegisterOut(
        user=RegisteredUserOut.model_validate(profile),
        message="Cadastro realizado com sucesso!",
    )
