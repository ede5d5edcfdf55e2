"""Span attribute helpers so Phoenix shows span kind, input/output columns and thread previews."""

import json
from typing import Any, Optional, Union

from openinference.semconv.trace import OpenInferenceSpanKindValues, SpanAttributes

from court_export.models.email import Thread

PREVIEW_MAX_CHARS = 2000
PREVIEW_BODY_CHARS = 300

Summary = Union[dict[str, Any], str]


def _as_json(value: Summary) -> str:
    return value if isinstance(value, str) else json.dumps(value, default=str)


def _io_attributes(input_summary: Optional[Summary], output_summary: Optional[Summary]) -> dict[str, str]:
    attrs = {}
    if input_summary is not None:
        attrs[SpanAttributes.INPUT_VALUE] = _as_json(input_summary)
        attrs[SpanAttributes.INPUT_MIME_TYPE] = "application/json"
    if output_summary is not None:
        attrs[SpanAttributes.OUTPUT_VALUE] = _as_json(output_summary)
        attrs[SpanAttributes.OUTPUT_MIME_TYPE] = "application/json"
    return attrs


def span_attributes_for_workflow_step(
    openinference_kind: str,
    input_summary: Optional[Summary] = None,
    output_summary: Optional[Summary] = None,
) -> dict[str, Any]:
    """Attributes for start_as_current_span(attributes=...).

    openinference_kind is a member name of OpenInferenceSpanKindValues (CHAIN, LLM, ...).
    Summaries should stay small: ids, counts, scores.
    """
    kind = getattr(OpenInferenceSpanKindValues, openinference_kind, None)
    attrs: dict[str, Any] = {
        SpanAttributes.OPENINFERENCE_SPAN_KIND: kind.value if kind is not None else openinference_kind,
    }
    attrs.update(_io_attributes(input_summary, output_summary))
    return attrs


def set_span_input_output(
    span: Any,
    input_summary: Optional[Summary] = None,
    output_summary: Optional[Summary] = None,
) -> None:
    span.set_attributes(_io_attributes(input_summary, output_summary))


def thread_preview_for_observability(thread: Thread) -> str:
    """Sender, subject and body head of each message, capped at PREVIEW_MAX_CHARS."""
    blocks = [
        f"From: {m.from_}\nSubject: {m.subject}\n{(m.body.plain or '').strip()[:PREVIEW_BODY_CHARS]}"
        for m in thread.messages
    ]
    preview = "\n\n---\n\n".join(blocks)
    if len(preview) > PREVIEW_MAX_CHARS:
        return preview[:PREVIEW_MAX_CHARS] + "\n\n[Preview truncated...]"
    return preview
