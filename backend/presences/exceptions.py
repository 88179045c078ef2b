"""
Exceptions métier de l'application.
Les cas « pas de données » ne lèvent jamais : une liste vide est un résultat normal.
"""


class CorruptStateError(RuntimeError):
    """Une collection persistée est illisible (JSON invalide ou schéma inattendu)."""

    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(f"Collection '{collection}' corrompue : {reason}")


class AssistantConfigurationError(RuntimeError):
    """Clé d'accès à l'assistant IA absente."""


class AuthenticationError(Exception):
    """Identifiants invalides ou compte suspendu."""


class ForbiddenActionError(PermissionError):
    """Action refusée par les règles de gestion du personnel."""
