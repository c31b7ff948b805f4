"""
Client settings read from the environment.
"""

from __future__ import annotations

import os
import typing as t

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rpcbatch.exceptions import ConfigurationError
from rpcbatch.models import OutputOptions

ENV_PREFIX = "RPCBATCH_"


class ClientSettings(BaseModel):
    """
    Defaults applied by ``rpcbatch.client``.

    Parameters
    ----------
    throw_on_fault : bool
        Raise ``RemoteFault`` for fault responses.
    auto_decode : bool
        Decode ``base64`` and ``dateTime.iso8601`` results.
    timeout : float | None
        HTTP timeout in seconds for the default transport.
    output_options : OutputOptions
        Request serialization options.
    """

    model_config = ConfigDict(extra="forbid")

    throw_on_fault: bool = False
    auto_decode: bool = True
    timeout: float | None = Field(default=30.0, gt=0)
    output_options: OutputOptions = Field(default_factory=OutputOptions)

    @classmethod
    def from_env(cls, environ: t.Mapping[str, str] | None = None) -> ClientSettings:
        """
        Build settings from ``RPCBATCH_*`` environment variables.

        Parameters
        ----------
        environ : typing.Mapping[str, str] | None, optional
            Source mapping, defaults to ``os.environ``.

        Returns
        -------
        ClientSettings
            Validated settings.

        Raises
        ------
        ConfigurationError
            If a variable holds an invalid value.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, t.Any] = {}
        for name in ("throw_on_fault", "auto_decode", "timeout"):
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        encoding = environ.get(f"{ENV_PREFIX}ENCODING")
        if encoding:
            values["output_options"] = OutputOptions.from_mapping({"encoding": encoding})
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid {ENV_PREFIX}* environment settings: {exc}") from exc
