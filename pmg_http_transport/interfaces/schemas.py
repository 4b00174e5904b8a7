"""
Pydantic schemas for transport arguments and wire bodies.

These schemas enforce the argument contract shared by all transports:
construction options, listener options and outbound request options.
Validation failures surface as the transport's own ``ValidationError``
so callers never need to know pydantic is involved.
No business logic belongs here.
"""

from typing import Any, Callable, Literal, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationInfo,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from pmg_http_transport.domain.entities import HttpMethod
from pmg_http_transport.domain.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

PORT_MIN = 0
PORT_MAX = 65535


class TransportOptions(BaseModel):
    """Constructor options for ``HTTPTransport``. Unset values use settings.

    Attributes:
        port: Port the inbound server listens on.
        host: Address the inbound server binds to.
        serve_gzip: Compress inbound responses.
        send_gzip: Compress outbound request bodies.
    """

    model_config = ConfigDict(extra="forbid")

    port: Optional[StrictInt] = Field(None, ge=PORT_MIN, le=PORT_MAX)
    host: Optional[StrictStr] = None
    serve_gzip: Optional[StrictBool] = None
    send_gzip: Optional[StrictBool] = None


class ListenerOptions(BaseModel):
    """Arguments accepted by ``add_listener``."""

    callback: Callable[..., Any]
    method: HttpMethod = HttpMethod.GET

    @field_validator("method", mode="before")
    @classmethod
    def _parse_method(cls, value: Any) -> HttpMethod:
        try:
            return HttpMethod.parse(value)
        except ValidationError as exc:
            raise ValueError(exc.message) from exc


class RequestOptions(BaseModel):
    """Options accepted by ``publish`` and ``request``.

    Attributes:
        host: Target host. When omitted the topic itself names the host.
        port: Target port.
        protocol: ``http`` or ``https``.
        method: Outbound HTTP method.
        correlation_id: Tracing token; generated when omitted.
        initiator: Identifier of the originating actor.
        headers: Extra headers to send.
        timeout: Per-call timeout in seconds; settings default when omitted.
    """

    model_config = ConfigDict(extra="forbid")

    host: Optional[StrictStr] = None
    port: Optional[StrictInt] = Field(None, ge=PORT_MIN, le=PORT_MAX)
    protocol: Literal["http", "https"] = "http"
    method: Literal["GET", "POST", "PUT", "DELETE"] = "GET"
    correlation_id: Optional[StrictStr] = None
    initiator: Optional[StrictStr] = None
    headers: Optional[dict[StrictStr, StrictStr]] = None
    timeout: Optional[float] = Field(None, gt=0)

    @field_validator("protocol", "method", mode="before")
    @classmethod
    def _normalize_case(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, str):
            return value
        return value.upper() if info.field_name == "method" else value.lower()

    @field_validator("correlation_id", "initiator", "headers")
    @classmethod
    def _require_ascii(cls, value: Any) -> Any:
        """Header names and values must be ASCII to go on the wire."""
        texts = [value] if isinstance(value, str) else []
        if isinstance(value, dict):
            texts = [text for pair in value.items() for text in pair]
        for text in texts:
            if not text.isascii():
                raise ValueError(f"{text!r} is not an ASCII header value")
        return value


class ErrorResponse(BaseModel):
    """Body of every failed response. Extra fields are carried through."""

    model_config = ConfigDict(extra="allow")

    message: str


def parse_options(model: Type[ModelT], **values: Any) -> ModelT:
    """Validate ``values`` against ``model``.

    Raises:
        ValidationError: If any value has the wrong type or is out of range.
    """
    try:
        return model(**values)
    except PydanticValidationError as exc:
        raise ValidationError(_describe(exc)) from exc


def _describe(exc: PydanticValidationError) -> str:
    """Render pydantic errors as one readable line."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "options"
        problems.append(f'"{location}" {error["msg"]}')
    return "; ".join(problems)
