class AdmissionError(ValueError):
    """A player could not be admitted to the session."""


class LobbyFull(AdmissionError):
    def __init__(self, capacity: int):
        super().__init__(f"Lobby is full! At most {capacity} players allowed.")
        self.capacity = capacity


class DuplicateName(AdmissionError):
    def __init__(self, name: str):
        super().__init__(f"Username {name} is already connected.")
        self.name = name


class BudgetExceeded(Exception):
    """A guess was refused because a per-player or round-wide cap was reached."""
