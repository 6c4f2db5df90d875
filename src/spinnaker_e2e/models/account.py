"""
Account records reported by a running Spinnaker instance.

Gate lists credentials as JSON objects carrying a ``name`` and either a single
``type`` or a list of ``types``. Only those fields take part in matching;
everything else in the payload is ignored.
"""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class Account(BaseModel):
    """An expected or observed account."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field("", description="Account name")
    type: str | None = Field(None, description="Single account type")
    types: list[str] | None = Field(None, description="Ordered account types")

    def matches(self, observed: "Account") -> bool:
        """
        Tolerant match of this expected account against an observed one.

        Names must be equal, and either the single types are equal or both
        type lists are non-empty and start with the same element.
        """
        if self.name != observed.name:
            return False
        if self.type and self.type == observed.type:
            return True
        return bool(self.types) and bool(observed.types) and (
            self.types[0] == observed.types[0]  # type: ignore[index]
        )

    def __str__(self) -> str:
        kind = self.type if self.type else self.types
        return f"{self.name}({kind})"


# Gate may answer with a JSON null when no account is loaded
AccountList = TypeAdapter(list[Account] | None)
