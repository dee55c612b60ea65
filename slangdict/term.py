from dataclasses import dataclass, field


@dataclass
class Term:
    """
    A slang word/phrase and its ordered definitions.

    The definitions list is always copied on the way in, so a Term never
    shares a list with its caller, with the store's snapshot, or with another Term.
    """
    key: str
    definitions: list[str] = field(default_factory=list)

    def __post_init__(self):
        if self.key is None or not self.key.strip():
            raise ValueError("Term key must be a non-empty string")
        self.definitions = list(self.definitions) if self.definitions is not None else []

    def copy(self) -> "Term":
        return Term(self.key, self.definitions)

    def __str__(self):
        return f"{self.key} = {' | '.join(self.definitions)}"
