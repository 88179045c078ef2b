"""
Schémas Pydantic pour l'assistant IA.
"""

from typing import List, Literal

from pydantic import BaseModel, field_validator


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class QuestionRequest(BaseModel):
    question: str
    history: List[ChatMessage] = []

    @field_validator("question")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("La question ne peut pas être vide.")
        return v.strip()


class AssistantReply(BaseModel):
    content: str
