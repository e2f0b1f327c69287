"""Error definitions for the COM3D2 codecs."""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

E_TRUNCATED = "E_TRUNCATED"
E_MALFORMED = "E_MALFORMED"
E_SIGNATURE = "E_SIGNATURE"
E_UNKNOWN_TAG = "E_UNKNOWN_TAG"
E_UNSUPPORTED = "E_UNSUPPORTED"
E_IO = "E_IO"
E_DOCUMENT = "E_DOCUMENT"
E_TRANSCODE = "E_TRANSCODE"


@dataclass
class CodecError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    @property
    def field(self) -> str:
        return (self.context or {}).get("field", "")

    def push_field(self, name: str) -> None:
        """Prefix the field path with an enclosing field name."""
        ctx = self.context if self.context is not None else {}
        inner = ctx.get("field", "")
        if not inner:
            ctx["field"] = name
        elif inner.startswith("["):
            ctx["field"] = name + inner
        else:
            ctx["field"] = f"{name}.{inner}"
        self.context = ctx

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class MalformedStreamError(CodecError):
    pass


class SignatureMismatchError(CodecError):
    pass


class UnknownTagError(CodecError):
    pass


class UnsupportedOperationError(CodecError):
    pass


class StreamIOError(CodecError):
    pass


class DocumentError(CodecError):
    pass


class TranscodeError(CodecError):
    pass


def truncated(wanted: int, got: int) -> MalformedStreamError:
    return MalformedStreamError(
        code=E_TRUNCATED,
        message=f"unexpected end of stream: wanted {wanted} bytes, got {got}",
        context={"wanted": wanted, "got": got},
    )


def malformed(message: str, **context: Any) -> MalformedStreamError:
    return MalformedStreamError(
        code=E_MALFORMED, message=message, context=context or None
    )


def unknown_tag(
    kind: str, tag: str, index: Optional[int] = None
) -> UnknownTagError:
    ctx: Dict[str, Any] = {"tag": tag}
    where = ""
    if index is not None:
        ctx["index"] = index
        where = f" at index {index}"
    return UnknownTagError(
        code=E_UNKNOWN_TAG,
        message=f"unrecognized {kind} tag {tag!r}{where}",
        context=ctx,
    )


def unsupported(message: str, **context: Any) -> UnsupportedOperationError:
    return UnsupportedOperationError(
        code=E_UNSUPPORTED, message=message, context=context or None
    )


@contextmanager
def field_context(name: str) -> Iterator[None]:
    """Attach ``name`` to the field path of any error raised inside.

    ``OSError`` from the underlying stream is wrapped as ``StreamIOError``.
    """
    try:
        yield
    except CodecError as exc:
        exc.push_field(name)
        raise
    except OSError as exc:
        raise StreamIOError(
            code=E_IO, message=str(exc), context={"field": name}
        ) from exc


__all__ = [
    "CodecError",
    "MalformedStreamError",
    "SignatureMismatchError",
    "UnknownTagError",
    "UnsupportedOperationError",
    "StreamIOError",
    "DocumentError",
    "TranscodeError",
    "truncated",
    "malformed",
    "unknown_tag",
    "unsupported",
    "field_context",
    "E_TRUNCATED",
    "E_MALFORMED",
    "E_SIGNATURE",
    "E_UNKNOWN_TAG",
    "E_UNSUPPORTED",
    "E_IO",
    "E_DOCUMENT",
    "E_TRANSCODE",
]
