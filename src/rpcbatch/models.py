import typing as t

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from rpcbatch.exceptions import ConfigurationError

log = structlog.get_logger(__name__)


class OutputOptions(BaseModel):
    """
    Request serialization options shared by a client and its namespaces.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    output_type: t.Literal["xml"] = "xml"
    verbosity: t.Literal["pretty", "newlines_only", "no_white_space"] = "pretty"
    escaping: tuple[t.Literal["markup", "non-ascii"], ...] = ("markup",)
    version: t.Literal["xmlrpc"] = "xmlrpc"
    encoding: str = "utf-8"
    allow_none: bool = False

    @field_validator("escaping")
    @classmethod
    def check_escaping(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if "markup" not in value:
            raise ValueError("markup escaping cannot be disabled")
        return value

    @field_validator("encoding")
    @classmethod
    def check_encoding(cls, value: str) -> str:
        try:
            "".encode(value)
        except LookupError as exc:
            raise ValueError(f"unknown encoding: {value}") from exc
        return value

    @classmethod
    def from_mapping(cls, options: t.Mapping[str, t.Any] | None = None) -> "OutputOptions":
        """
        Build options from a plain mapping, raising ``ConfigurationError`` on bad input.

        Parameters
        ----------
        options : typing.Mapping[str, typing.Any] | None
            Option names and values. ``None`` yields the defaults.

        Returns
        -------
        OutputOptions
            Validated options.
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        try:
            return cls.model_validate(dict(options))
        except ValidationError as exc:
            log.debug(event="Rejected output options", errors=exc.error_count())
            raise ConfigurationError(f"Invalid output options: {exc}") from exc


class BatchRequestItem(BaseModel):
    """Wire shape of one call inside a ``system.multicall`` request."""

    model_config = ConfigDict(populate_by_name=True)

    method_name: str = Field(alias="methodName", min_length=1)
    params: list[t.Any] = Field(default_factory=list)

    def as_wire(self) -> dict[str, t.Any]:
        return {"methodName": self.method_name, "params": list(self.params)}
