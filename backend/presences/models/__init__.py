# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant l'appel à create_all() au démarrage.

from presences.models.collection import StoredCollection  # noqa: F401
