"""Exceptions du moteur de réservation / Reservation engine exceptions."""


class ReservationError(Exception):
    """Base des erreurs métier / Base domain error."""


class ReservationNotFoundError(ReservationError):
    def __init__(self, reservation_id: int):
        super().__init__(f"Reservation {reservation_id} not found")
        self.reservation_id = reservation_id


class ReservationBlockedError(ReservationError):
    """Erreur bloquante : rien n'est enregistré / Blocking error: nothing persisted."""

    def __init__(self, message: str, warnings: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.warnings = list(warnings or [])


class ConfirmationRequiredError(ReservationError):
    """Action irréversible non confirmée / Irreversible action not confirmed."""

    def __init__(self, prompt: str):
        super().__init__(prompt)
        self.prompt = prompt


class ProjetNotFoundError(ReservationError):
    def __init__(self, projet_id: int):
        super().__init__(f"Projet {projet_id} not found")
        self.projet_id = projet_id


class InvalidTransitionError(ReservationError):
    """Transition interdite depuis le statut courant / Transition not allowed from current status."""

    def __init__(self, reservation_id: int, current: str, target: str):
        super().__init__(f"Réservation annulée : passage à {target} impossible")
        self.reservation_id = reservation_id
        self.current = current
        self.target = target
