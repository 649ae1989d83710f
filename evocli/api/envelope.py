"""
Response Envelope.

Every endpoint answers with the same wrapper:

    {"status": 200, "message": "ok", "data": <endpoint-specific JSON>}

decode_envelope() unwraps it in two stages, each with its own error, and
validates "data" against a caller-supplied shape. Any type a pydantic
TypeAdapter accepts can be a shape: a model class, list[Model], or an
Annotated alias.
"""

from typing import Annotated, Any, get_args, get_origin

from pydantic import BaseModel, BeforeValidator, TypeAdapter, ValidationError

from evocli.core.exceptions import EnvelopeDecodeError, EnvelopeStatusError, PayloadDecodeError


class Envelope(BaseModel):
    """Outer response wrapper. "data" is kept undecoded."""

    status: int
    message: Annotated[str, BeforeValidator(lambda v: "" if v is None else v)] = ""
    data: Any = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


def shape_name(shape: Any) -> str:
    """Readable name of a payload shape, e.g. "list[Instance]"."""
    origin = get_origin(shape)
    if origin is Annotated:
        return shape_name(get_args(shape)[0])
    if origin is not None:
        args = ", ".join(shape_name(arg) for arg in get_args(shape))
        return f"{getattr(origin, '__name__', repr(origin))}[{args}]"
    return getattr(shape, "__name__", repr(shape))


def parse_envelope(body: bytes) -> Envelope:
    """
    Parse the outer envelope.

    Raises:
        EnvelopeDecodeError: The body is not JSON or lacks an integer status.
    """
    try:
        return Envelope.model_validate_json(body)
    except ValidationError as e:
        raise EnvelopeDecodeError(f"Malformed response envelope: {e}", cause=e) from e


def decode_envelope(body: bytes, shape: Any, *, enforce_status: bool = False) -> Any:
    """
    Decode a response body into the payload shape.

    The envelope status and message are passed to the shape as validation
    context, which is how message-only shapes receive the message.

    Args:
        body: Raw response body.
        shape: Expected type of the "data" member.
        enforce_status: Treat an embedded status outside 2xx as an error.

    Raises:
        EnvelopeDecodeError: The outer envelope could not be parsed.
        EnvelopeStatusError: enforce_status is set and the status is not 2xx.
        PayloadDecodeError: "data" does not fit the shape.
    """
    envelope = parse_envelope(body)

    if enforce_status and not envelope.is_success:
        raise EnvelopeStatusError(envelope.status, envelope.message)

    try:
        return TypeAdapter(shape).validate_python(
            envelope.data,
            context={"status": envelope.status, "message": envelope.message},
        )
    except ValidationError as e:
        raise PayloadDecodeError(shape_name(shape), cause=e) from e
