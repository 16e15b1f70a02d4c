"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour que create_all les détecte.
Import all models here so create_all can detect them.
"""

from app.models.client import Client
from app.models.commande import Commande
from app.models.projet import Projet, projet_prestations, PLANNABLE_PROJET_STATUTS
from app.models.competence import Competence
from app.models.prestation import Prestation, PrestationCompetence
from app.models.consultant import Consultant, ConsultantCompetence, ConsultantStatut
from app.models.reservation import Reservation, ReservationStatut
from app.models.periode_eviter import PeriodeEviter, BLOCKING_PERIODE_TYPES, PREFERENCE_PERIODE_TYPE
from app.models.audit import AuditLog

__all__ = [
    "Client",
    "Commande",
    "Projet",
    "projet_prestations",
    "PLANNABLE_PROJET_STATUTS",
    "Competence",
    "Prestation",
    "PrestationCompetence",
    "Consultant",
    "ConsultantCompetence",
    "ConsultantStatut",
    "Reservation",
    "ReservationStatut",
    "PeriodeEviter",
    "BLOCKING_PERIODE_TYPES",
    "PREFERENCE_PERIODE_TYPE",
    "AuditLog",
]
