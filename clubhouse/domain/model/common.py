"""Base model for all domain entities."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Base class for all domain models.

    Entities are frozen. A change is a new copy made with ``replace``, so
    the merge layer can hold on to the previous copy for rollback.
    """

    model_config = ConfigDict(frozen=True)

    def replace(self, **changes: Any) -> Self:
        """Copy with ``changes`` applied and all validators re-run."""
        return self.model_validate({**self.model_dump(), **changes})
