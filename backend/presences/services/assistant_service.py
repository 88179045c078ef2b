"""
Service de l'assistant IA (Gemini) : analyse des risques et questions libres.

L'assistant reçoit uniquement le résumé compact de summary_service. Il ne lève jamais
d'exception vers l'appelant : clé absente, délai dépassé ou erreur du service
sont convertis en messages d'excuse fixes. Aucune nouvelle tentative n'est faite.
"""

import asyncio
import logging
from typing import List

from google import genai
from google.genai import types
from sqlalchemy.orm import Session

from presences.config import settings
from presences.exceptions import AssistantConfigurationError
from presences.schemas.assistant import ChatMessage
from presences.services.summary_service import attendance_summary, serialize_summary

logger = logging.getLogger(__name__)

SIGNATURE = "Cordialement : Assistant IA et aide au contrôle administratif"

CONFIGURATION_APOLOGY = "Erreur de configuration de l'établissement : la clé d'accès à l'assistant est absente."
CONNECTION_APOLOGY = (
    "Désolé, une erreur est survenue lors de la connexion à l'assistant. "
    "Vérifiez votre connexion ou réessayez plus tard."
)
QUESTION_APOLOGY = "Erreur lors du traitement de la demande administrative."
EMPTY_ANALYSIS = "L'analyse n'a pas pu aboutir. Veuillez réessayer."

ANALYSIS_INSTRUCTION = (
    "Tu es l'Assistant IA. Ton objectif est d'analyser les risques de décrochage scolaire "
    "et de proposer des protocoles administratifs conformes à la réglementation scolaire en vigueur. "
    "Sois professionnel, direct et synthétique. "
    f"Termine chaque réponse par la signature exacte : '{SIGNATURE}'."
)

QUESTION_INSTRUCTION = (
    "Tu es l'Assistant IA. Tu as accès à l'état actuel des présences : {summary}. "
    "Réponds aux questions sur les élèves, justifie les protocoles et aide l'enseignant "
    "dans sa gestion administrative. Garde un ton formel et institutionnel. "
    f"Termine chaque réponse par la signature exacte : '{SIGNATURE}'."
)


def _client() -> genai.Client:
    if not settings.GEMINI_API_KEY:
        raise AssistantConfigurationError("GEMINI_API_KEY non configurée")
    return genai.Client(api_key=settings.GEMINI_API_KEY)


async def _generate(contents, system_instruction: str, fallback: str) -> str:
    """Appel unique au modèle, borné par ASSISTANT_TIMEOUT_SECONDS."""
    try:
        client = _client()
    except AssistantConfigurationError as exc:
        logger.warning("Assistant IA indisponible : %s", exc)
        return CONFIGURATION_APOLOGY

    try:
        response = await asyncio.wait_for(
            client.aio.models.generate_content(
                model=settings.GEMINI_MODEL,
                contents=contents,
                config=types.GenerateContentConfig(system_instruction=system_instruction),
            ),
            timeout=settings.ASSISTANT_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.warning("Assistant IA : délai de %ss dépassé", settings.ASSISTANT_TIMEOUT_SECONDS)
        return fallback
    except Exception as exc:
        logger.error("Erreur de l'assistant IA : %s", exc, exc_info=True)
        return fallback

    return response.text or ""


async def analyze_attendance(db: Session) -> str:
    """Analyse globale des risques à partir du résumé des présences."""
    summary = serialize_summary(attendance_summary(db))
    text = await _generate(
        f"Analyse ce résumé des présences et des risques : {summary}",
        ANALYSIS_INSTRUCTION,
        CONNECTION_APOLOGY,
    )
    return text or EMPTY_ANALYSIS


async def ask_question(db: Session, question: str, history: List[ChatMessage]) -> str:
    """Question libre, avec l'historique de la conversation et le résumé en contexte."""
    summary = serialize_summary(attendance_summary(db))
    contents = [
        types.Content(
            role="user" if message.role == "user" else "model",
            parts=[types.Part(text=message.content)],
        )
        for message in history
    ]
    contents.append(types.Content(role="user", parts=[types.Part(text=question)]))

    text = await _generate(contents, QUESTION_INSTRUCTION.format(summary=summary), QUESTION_APOLOGY)
    return text or QUESTION_APOLOGY
