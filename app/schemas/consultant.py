"""Schémas Consultant / Consultant schemas."""

from pydantic import BaseModel, ConfigDict


class ConsultantRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    nom: str
    prenom: str
    statut: str


class PeriodeEviterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    consultant_id: int
    date_debut: str
    date_fin: str
    type: str
    motif: str | None = None
