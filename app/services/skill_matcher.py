"""
Service de contrôle des compétences / Skill matching service.
Compare les niveaux de maîtrise d'un consultant aux compétences exigées
par une prestation. Les niveaux sont du texte libre saisi par différents
utilisateurs : ils sont ramenés à une échelle ordinale 1-5.
"""

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import store_error_message
from app.models.consultant import ConsultantCompetence
from app.schemas.planning import CompetenceRequirementRead
from app.schemas.reservation import ValidationOutcome
from app.utils.formatting import normalize_label

log = logging.getLogger(__name__)

# Mots-cles par rang, testes dans l'ordre / Keywords per rank, checked in order
LEVEL_KEYWORDS: list[tuple[tuple[str, ...], int]] = [
    (("debut", "junior", "apprenti"), 1),
    (("maitr", "inter"), 2),
    (("confirm",), 3),
    (("senior",), 4),
    (("expert",), 5),
]
DEFAULT_LEVEL_RANK = 2  # "intermediaire" si vide ou inconnu


def level_rank(level: str | None) -> int:
    """Rang ordinal d'un libellé de niveau / Ordinal rank of a level label.

    >>> level_rank("Débutant"), level_rank("Confirmé"), level_rank("")
    (1, 3, 2)
    """
    normalized = normalize_label(level)
    if not normalized:
        return DEFAULT_LEVEL_RANK
    for keywords, rank in LEVEL_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return rank
    return DEFAULT_LEVEL_RANK


def requirement_label(req: CompetenceRequirementRead) -> str:
    return f"{req.nom} ({req.niveau_requis})" if req.niveau_requis else req.nom


class SkillMatcherService:
    """Contrôle compétences consultant / prestation."""

    @staticmethod
    def evaluate(
        requirements: Iterable[CompetenceRequirementRead],
        consultant_levels: dict[int, str],
    ) -> ValidationOutcome:
        """Comparer exigences et niveaux connus / Compare requirements with known levels.

        consultant_levels : competence_id -> niveau_maitrise.
        La première erreur bloquante interrompt le contrôle.
        """
        outcome = ValidationOutcome()
        for req in requirements:
            label = requirement_label(req)
            if req.competence_id not in consultant_levels:
                if req.obligatoire:
                    outcome.blocking_error = f"Compétence requise manquante pour le consultant : {label}"
                    return outcome
                outcome.warnings.append(f"Compétence optionnelle non couverte : {label}")
                continue

            consultant_level = consultant_levels[req.competence_id]
            if level_rank(consultant_level) < level_rank(req.niveau_requis):
                msg = (
                    f'Niveau insuffisant : {req.nom} requis "{req.niveau_requis}", '
                    f'consultant "{consultant_level}"'
                )
                if req.obligatoire:
                    outcome.blocking_error = msg
                    return outcome
                outcome.warnings.append(msg)
        return outcome

    @staticmethod
    async def fetch_consultant_levels(
        db: AsyncSession, consultant_id: int, competence_ids: list[int]
    ) -> dict[int, str]:
        """Niveaux du consultant limités aux compétences demandées /
        Consultant levels restricted to the requested competencies.
        """
        result = await db.execute(
            select(ConsultantCompetence.competence_id, ConsultantCompetence.niveau_maitrise).where(
                ConsultantCompetence.consultant_id == consultant_id,
                ConsultantCompetence.competence_id.in_(competence_ids),
            )
        )
        return {row.competence_id: row.niveau_maitrise or "" for row in result.all()}

    @staticmethod
    async def check(
        db: AsyncSession,
        requirements: list[CompetenceRequirementRead],
        consultant_id: int,
    ) -> ValidationOutcome:
        if not requirements:
            return ValidationOutcome()
        competence_ids = [req.competence_id for req in requirements]
        try:
            levels = await SkillMatcherService.fetch_consultant_levels(db, consultant_id, competence_ids)
        except SQLAlchemyError as exc:
            log.error("Lecture consultant_competences impossible: %s", store_error_message(exc))
            return ValidationOutcome(
                blocking_error=store_error_message(exc, "Erreur lecture consultant_competences")
            )
        return SkillMatcherService.evaluate(requirements, levels)
