from dataclasses import dataclass
from enum import Enum
from typing import Optional


class UiStateKind(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


# Allowed kind changes; a new submission is the only way out of a terminal state
TRANSITIONS = {
    UiStateKind.IDLE: {UiStateKind.LOADING},
    UiStateKind.LOADING: {UiStateKind.SUCCESS, UiStateKind.ERROR},
    UiStateKind.SUCCESS: {UiStateKind.LOADING},
    UiStateKind.ERROR: {UiStateKind.LOADING},
}


@dataclass(frozen=True)
class UiState:
    """Outcome of the last submitted request.

    A tagged value: ``kind`` says which variant is current and only the
    matching payload field is set.
    """

    kind: UiStateKind
    output_text: Optional[str] = None
    error_message: Optional[str] = None
    placeholder: Optional[str] = None

    @classmethod
    def idle(cls, placeholder: str) -> "UiState":
        return cls(kind=UiStateKind.IDLE, placeholder=placeholder)

    @classmethod
    def loading(cls) -> "UiState":
        return cls(kind=UiStateKind.LOADING)

    @classmethod
    def success(cls, output_text: str) -> "UiState":
        return cls(kind=UiStateKind.SUCCESS, output_text=output_text)

    @classmethod
    def error(cls, error_message: str) -> "UiState":
        return cls(kind=UiStateKind.ERROR, error_message=error_message)

    @property
    def is_loading(self) -> bool:
        return self.kind is UiStateKind.LOADING

    @property
    def is_terminal(self) -> bool:
        return self.kind in (UiStateKind.SUCCESS, UiStateKind.ERROR)

    def can_transition_to(self, other: "UiState") -> bool:
        return other.kind in TRANSITIONS[self.kind]
