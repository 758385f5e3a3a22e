"""Bankforge - Pydantic models for the bank manifest.

The manifest (bank.toml) has a single [bank] table and an ordered array of
[[triggers]] tables. These models validate the parsed TOML document; the
on-disk text is never re-serialized from them.
"""

from pydantic import BaseModel, ConfigDict, Field

from bankforge.utils.paths import bank_identifier


class BankSection(BaseModel):
    """The [bank] table.

    Unknown keys are ignored so hand-added metadata does not break builds.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., description="Bank name, second half of the identifier")
    author: str = Field(..., description="Bank author, first half of the identifier")
    description: str | None = Field(default=None, description="Free-form description")
    version: str | None = Field(default=None, description="Bank version string")
    access: str | None = Field(default=None, description="Access level (public, private, ...)")


class TriggerEntry(BaseModel):
    """One [[triggers]] entry: a DSL-facing name bound to an audio file."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Identifier used by the DSL runtime")
    path: str = Field(..., description="'./'-prefixed forward-slash path under audio/")


class BankManifest(BaseModel):
    """A whole bank.toml document."""

    model_config = ConfigDict(extra="ignore")

    bank: BankSection
    triggers: list[TriggerEntry] = Field(default_factory=list)

    @property
    def identifier(self) -> str:
        """Bank identifier "<author>.<name>"."""
        return bank_identifier(self.bank.author, self.bank.name)


__all__ = [
    "BankSection",
    "TriggerEntry",
    "BankManifest",
]
