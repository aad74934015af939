"""Error taxonomy shared by every layer."""


class MnemoError(Exception):
    """Base class for all errors raised by mnemo."""


class ValidationError(MnemoError):
    """Input rejected before any state was touched."""


class NotFoundError(MnemoError):
    """An operation referenced a card id that does not exist."""

    def __init__(self, card_id: str):
        super().__init__(f"Card not found: {card_id}")
        self.card_id = card_id


class PersistenceError(MnemoError):
    """Reading or writing the state file failed."""


class IntegrityError(MnemoError):
    """The loaded state violates a collection-wide invariant."""

    def __init__(self, problems: list[str]):
        super().__init__("; ".join(problems))
        self.problems = problems
