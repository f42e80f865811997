"""
Real-time comment protocol.

Every message on a post channel is a JSON envelope ``{"type": ..., "payload": ...}``.
Clients send the inbound vocabulary (``create_comment``, ``update_comment``,
``delete_comment``); the server broadcasts the outbound vocabulary
(``new_comment``, ``edit_comment``, ``remove_comment``) only after the comment
service accepted the mutation. ``error`` is sent back to the originating
connection and never broadcast.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import AwareDatetime, BaseModel, Field, TypeAdapter, ValidationError

from app.core.exceptions import CommentServiceError, InvalidArgument, UnknownEventType
from app.schemas.comment import Comment

CHANNEL_PREFIX = "post:"


def channel_name(post_id: str) -> str:
    return f"{CHANNEL_PREFIX}{post_id}"


class Envelope(BaseModel):
    type: str
    payload: dict[str, Any]


# ---------- inbound ----------


class CreateCommentPayload(BaseModel):
    post_id: str
    body: str


class UpdateCommentPayload(BaseModel):
    comment_id: str
    body: str


class DeleteCommentPayload(BaseModel):
    comment_id: str


class CreateCommentEvent(BaseModel):
    type: Literal["create_comment"] = "create_comment"
    payload: CreateCommentPayload


class UpdateCommentEvent(BaseModel):
    type: Literal["update_comment"] = "update_comment"
    payload: UpdateCommentPayload


class DeleteCommentEvent(BaseModel):
    type: Literal["delete_comment"] = "delete_comment"
    payload: DeleteCommentPayload


InboundEvent = Annotated[
    Union[CreateCommentEvent, UpdateCommentEvent, DeleteCommentEvent],
    Field(discriminator="type"),
]

INBOUND_TYPES = frozenset({"create_comment", "update_comment", "delete_comment"})


# ---------- outbound ----------


class EditCommentPayload(BaseModel):
    id: str
    body: str
    updated_at: AwareDatetime | None = None


class RemoveCommentPayload(BaseModel):
    comment_id: str


class ErrorPayload(BaseModel):
    code: str
    message: str
    request_type: str | None = None


class NewCommentEvent(BaseModel):
    type: Literal["new_comment"] = "new_comment"
    payload: Comment


class EditCommentEvent(BaseModel):
    type: Literal["edit_comment"] = "edit_comment"
    payload: EditCommentPayload


class RemoveCommentEvent(BaseModel):
    type: Literal["remove_comment"] = "remove_comment"
    payload: RemoveCommentPayload


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    payload: ErrorPayload


OutboundEvent = Annotated[
    Union[NewCommentEvent, EditCommentEvent, RemoveCommentEvent, ErrorEvent],
    Field(discriminator="type"),
]

OUTBOUND_TYPES = frozenset({"new_comment", "edit_comment", "remove_comment", "error"})

_inbound_adapter: TypeAdapter[Any] = TypeAdapter(InboundEvent)
_outbound_adapter: TypeAdapter[Any] = TypeAdapter(OutboundEvent)


def new_comment_event(comment: Comment) -> NewCommentEvent:
    return NewCommentEvent(payload=comment)


def edit_comment_event(comment: Comment) -> EditCommentEvent:
    return EditCommentEvent(
        payload=EditCommentPayload(
            id=comment.id, body=comment.body, updated_at=comment.updated_at
        )
    )


def remove_comment_event(comment_id: str) -> RemoveCommentEvent:
    return RemoveCommentEvent(payload=RemoveCommentPayload(comment_id=comment_id))


def error_event(error: CommentServiceError, request_type: str | None = None) -> ErrorEvent:
    return ErrorEvent(
        payload=ErrorPayload(
            code=error.code, message=error.message, request_type=request_type
        )
    )


def encode_event(event: BaseModel) -> str:
    return event.model_dump_json()


def parse_envelope(raw: str | bytes | dict[str, Any]) -> Envelope:
    try:
        if isinstance(raw, (str, bytes)):
            return Envelope.model_validate_json(raw)
        return Envelope.model_validate(raw)
    except ValidationError as e:
        raise InvalidArgument(
            f"Malformed event envelope ({e.error_count()} error(s))"
        ) from None


def _decode(
    raw: str | bytes | dict[str, Any],
    adapter: TypeAdapter[Any],
    vocabulary: frozenset[str],
) -> Any:
    envelope = parse_envelope(raw)
    if envelope.type not in vocabulary:
        raise UnknownEventType(envelope.type)

    try:
        return adapter.validate_python(envelope.model_dump())
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) for error in e.errors()
        )
        raise InvalidArgument(
            f"Invalid payload for '{envelope.type}': {fields}"
        ) from None


def decode_inbound(
    raw: str | bytes | dict[str, Any],
) -> CreateCommentEvent | UpdateCommentEvent | DeleteCommentEvent:
    return _decode(raw, _inbound_adapter, INBOUND_TYPES)


def decode_outbound(
    raw: str | bytes | dict[str, Any],
) -> NewCommentEvent | EditCommentEvent | RemoveCommentEvent | ErrorEvent:
    return _decode(raw, _outbound_adapter, OUTBOUND_TYPES)
