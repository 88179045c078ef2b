"""
Router de l'assistant IA.
Les erreurs de l'assistant ne produisent jamais d'erreur HTTP : le texte renvoyé
contient alors un message d'excuse.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from presences.database import get_db
from presences.schemas.assistant import AssistantReply, QuestionRequest
from presences.services import assistant_service
from presences.services.auth_service import SessionContext
from presences.session import get_session

router = APIRouter(prefix="/api/v1/assistant", tags=["Assistant IA"])


@router.post("/analysis", response_model=AssistantReply, summary="Analyse des risques")
async def analyze_attendance(db: Session = Depends(get_db), session: SessionContext = Depends(get_session)):
    return AssistantReply(content=await assistant_service.analyze_attendance(db))


@router.post("/question", response_model=AssistantReply, summary="Poser une question")
async def ask_question(
    data: QuestionRequest,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    return AssistantReply(content=await assistant_service.ask_question(db, data.question, data.history))
