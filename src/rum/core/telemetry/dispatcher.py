"""Sending signed payloads and classifying the collector's answers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import BaseModel

from ..errors import (
    RUMAnswerError,
    RUMClientDestroyedError,
    RUMEmptyResponseError,
    RUMError,
    RUMTransportError,
)
from .attributes import Attr, Wire
from .transport import Answer, Quest

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer

    from ..serialization import PayloadCodec
    from .transport import Transport

logger = logging.getLogger(__name__)

INSTRUMENTING_MODULE_NAME = "rum.core.telemetry"

SendCallback = Callable[[BaseException | None, Any], None]


def classify(is_answer_error: bool, body: Any) -> BaseException | None:
    """Turn a decoded answer body into an error, or None on success.

    Args:
        is_answer_error: The frame was an answer with a non-zero status
        body: Decoded body, or the raw answer when it carried no payload

    Returns:
        The error to report, None if ``body`` is a successful result
    """
    if body is None:
        return RUMEmptyResponseError()

    if isinstance(body, BaseException):
        return body

    if is_answer_error and isinstance(body, Mapping):
        if "code" in body and "ex" in body:
            return RUMAnswerError(body["code"], body["ex"])

    return None


class RequestDispatcher:
    """Sends payloads through the current transport.

    Every :meth:`send` ends in exactly one ``callback(error, data)`` call and
    one finished ``rum.send`` span.

    Args:
        get_transport: Returns the live transport, None once destroyed
        codec: Payload codec for requests and answers
        project_id: Recorded on spans
        tracer: Tracer for send spans (defaults to the global provider's)
        host: Collector host recorded on spans
        port: Collector port recorded on spans
    """

    def __init__(
        self,
        get_transport: Callable[[], Transport | None],
        codec: PayloadCodec,
        project_id: int,
        tracer: Tracer | None = None,
        *,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        self._get_transport = get_transport
        self._codec = codec
        self._project_id = project_id
        self._endpoint_attributes: dict[str, Any] = {}
        if host is not None:
            self._endpoint_attributes[Attr.Connection.HOST] = host
        if port is not None:
            self._endpoint_attributes[Attr.Connection.PORT] = port
        self._tracer = tracer or trace.get_tracer(INSTRUMENTING_MODULE_NAME)

    def send(
        self,
        method: str,
        payload: BaseModel | Mapping[str, Any],
        timeout_ms: int,
        callback: SendCallback | None = None,
        *,
        dropped_count: int = 0,
    ) -> None:
        """Send ``payload`` as a ``method`` request.

        Fails fast with :class:`RUMClientDestroyedError`, before returning,
        when there is no transport. Otherwise the callback runs when the
        transport answers.

        Args:
            method: Collector method name
            payload: Signed payload, or an already wire-shaped mapping
            timeout_ms: Request timeout
            callback: Receives ``(error, data)`` exactly once
            dropped_count: Malformed entries left out of ``payload``
        """
        span = self._tracer.start_span(
            "rum.send",
            attributes={
                Attr.Rum.METHOD: method,
                Attr.Rum.PROJECT_ID: self._project_id,
                Attr.Rum.TIMEOUT_MS: timeout_ms,
                Attr.Rum.DROPPED_COUNT: dropped_count,
                **self._endpoint_attributes,
            },
        )
        finished = False

        def finish(error: BaseException | None, data: Any) -> None:
            nonlocal finished
            if finished:
                logger.debug("Ignoring duplicate answer for %s", method)
                return
            finished = True
            _end_span(span, error)
            _invoke(callback, error, data)

        transport = self._get_transport()
        if transport is None:
            finish(RUMClientDestroyedError(), None)
            return

        try:
            body = payload.to_wire() if hasattr(payload, "to_wire") else payload
            encoded = self._codec.encode(body)
        except (TypeError, ValueError, OverflowError) as e:
            logger.debug("Cannot encode %s payload", method, exc_info=True)
            finish(RUMTransportError("payload encoding failed", str(e)), None)
            return

        if isinstance(body, Mapping) and "events" in body:
            span.set_attribute(Attr.Rum.EVENT_COUNT, len(body["events"]))
            span.set_attribute(Attr.Rum.SALT, str(body.get("salt", "")))

        quest = Quest(method=method, payload=encoded, flag=Wire.QUEST_FLAG)

        def on_answer(raw: Any) -> None:
            error, data = self._interpret(raw)
            finish(error, data)

        try:
            transport.send_quest(quest, on_answer, timeout_ms)
        except Exception as e:
            logger.debug("Transport rejected %s quest", method, exc_info=True)
            finish(RUMTransportError("send failed", str(e)), None)

    def _interpret(self, raw: Any) -> tuple[BaseException | None, Any]:
        if isinstance(raw, Answer) and raw.payload:
            try:
                body = self._codec.decode(raw.payload)
            except Exception as e:
                logger.debug("Failed to decode answer payload", exc_info=True)
                return RUMTransportError("answer decoding failed", str(e)), None

            error = classify(raw.is_error, body)
            return (error, None) if error else (None, body)

        error = classify(False, raw)
        return (error, None) if error else (None, raw)


def _end_span(span: Span, error: BaseException | None) -> None:
    if error is None:
        span.set_status(Status(StatusCode.OK))
    else:
        span.record_exception(error)
        span.set_attribute(Attr.Error.TYPE, type(error).__name__)
        if isinstance(error, RUMError):
            span.set_attribute(Attr.Error.CATEGORY, error.category.value)
        span.set_status(Status(StatusCode.ERROR, str(error)))
    span.end()


def _invoke(
    callback: SendCallback | None, error: BaseException | None, data: Any
) -> None:
    if callback is None:
        return
    try:
        callback(error, data)
    except Exception:
        logger.exception("RUM send callback raised")
