"""Request contract for the optional text-generation collaborator."""

from pydantic import BaseModel, ConfigDict, Field


class GenerationOptions(BaseModel):
    """Options recognised by every text generator.

    ``max_length`` caps the generated output (tokens or characters,
    depending on the backend); ``num_return_sequences`` is the number of
    candidates requested. Only the first candidate is ever used.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_length: int = Field(gt=0)
    num_return_sequences: int = Field(default=1, ge=1)
