"""Emitter configuration.

Options are a strict, frozen pydantic model.  They can be built directly,
passed as keyword overrides to :class:`relayon.Emitter`, or read from the
``[tool.relayon]`` table of a project's ``pyproject.toml``::

    [tool.relayon]
    separator = "/"
    error_mode = "first"
"""

import tomllib
from pathlib import Path
from typing import Any, Self

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from relayon._types import ErrorMode
from relayon.exceptions import OptionsError

log = logger.bind(source=__name__)


class EmitterOptions(BaseModel):
    """Tunable behaviour of an emitter.

    Attributes:
        separator: Segment separator used by wildcard patterns.
        wildcard: Token that acts as a wildcard inside a pattern.
        error_mode: How concurrent dispatch reports listener failures.

    Raises:
        OptionsError: If fields fail pydantic validation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)

    separator: str = Field(default=".", min_length=1)
    wildcard: str = Field(default="*", min_length=1)
    error_mode: ErrorMode = "group"

    def __init__(self, **data: Any) -> None:
        """Wrap pydantic ValidationError into OptionsError."""
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise OptionsError(str(exc)) from exc

    @model_validator(mode="after")
    def _check_tokens(self) -> Self:
        if self.wildcard in self.separator or self.separator in self.wildcard:
            raise ValueError(
                f"wildcard {self.wildcard!r} and separator {self.separator!r} overlap"
            )
        return self

    @classmethod
    def from_pyproject(cls, pyproject_path: Path) -> Self:
        """Load options from the ``[tool.relayon]`` table of a ``pyproject.toml``.

        Args:
            pyproject_path: Path to the ``pyproject.toml`` file.

        Returns:
            Options built from the table, or defaults when it is absent.

        Raises:
            OptionsError: If the table holds invalid keys or values.
        """
        with open(pyproject_path, "rb") as fh:
            config = tomllib.load(fh)

        table: dict[str, Any] = config.get("tool", {}).get("relayon", {})
        if not table:
            log.debug("No [tool.relayon] table in {}, using defaults", pyproject_path)
        return cls(**table)
