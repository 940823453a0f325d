"""
core/plan_generator.py
────────────────────────────────────────────────────────────────────────
Turns an anamnesis into a structured meal plan.

  • build_prompt()       → Portuguese instruction with the intake data
  • extract_plan_json()  → first-to-last brace span of the reply, parsed
  • generate_plan()      → both of the above around one LLM call

The extraction is a heuristic, not a schema check: a reply holding two
top-level objects is captured greedily and usually fails to parse. Only
the failure contract is guaranteed, i.e. anything unusable raises
`InvalidAIResponse`.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

from core.errors import InvalidAIResponse
from services.gemini import TextGenerator

_LOG = logging.getLogger(__name__)

SYSTEM_PERSONA = "Você é um nutricionista especialista em planos alimentares."
MAX_OUTPUT_TOKENS = 1200
TEMPERATURE = 0.7

PARSE_FAILED = "Erro ao interpretar resposta da IA. Tente novamente."
NO_JSON = "A IA não retornou um JSON válido."

_JSON_SPAN = re.compile(r"\{[\s\S]*\}")

_PROMPT = """Gere um plano alimentar diário para o paciente abaixo, respondendo em JSON com os seguintes campos: resumo, tabela (array de refeições com os campos refeicao, horario, alimentos, observacoes), recomendacoes e notas.

IMPORTANTE: Para cada refeição na tabela, inclua um campo "horario" com um horário sugerido no formato "HH:MM" (ex: "08:00", "12:30", "15:00", "19:00"). Os horários devem ser realistas e adequados ao estilo de vida do paciente.

Não escreva nada fora do JSON.

Dados do paciente:
{anamnese}"""


def build_prompt(anamnese: Dict[str, Any]) -> str:
    return _PROMPT.format(anamnese=json.dumps(anamnese, indent=2, ensure_ascii=False))


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-JSON constant {name}")


def extract_plan_json(raw: str) -> Dict[str, Any]:
    match = _JSON_SPAN.search(raw or "")
    if not match:
        _LOG.warning("no JSON object in model reply (%d chars)", len(raw or ""))
        raise InvalidAIResponse(NO_JSON)

    try:
        data = json.loads(match.group(0), parse_constant=_reject_constant)
    except ValueError as e:  # includes JSONDecodeError
        _LOG.warning("model reply is not valid JSON: %s", e)
        raise InvalidAIResponse(PARSE_FAILED) from e

    if not data:
        raise InvalidAIResponse(NO_JSON)
    return data


async def generate_plan(generator: TextGenerator, anamnese: Dict[str, Any]) -> Dict[str, Any]:
    raw = await generator.generate(
        build_prompt(anamnese),
        system_instruction=SYSTEM_PERSONA,
        temperature=TEMPERATURE,
        max_output_tokens=MAX_OUTPUT_TOKENS,
    )
    return extract_plan_json(raw)
