"""
Plain-text and HTML serialization of Prismic structured text.

A structured text field is a list of blocks such as::

    {"type": "paragraph", "text": "Hello world", "spans": [
        {"start": 0, "end": 5, "type": "strong"}
    ]}

Only known block and span types are emitted; all text is escaped, so the
HTML produced here is safe to mark as such in templates.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlsplit

from markupsafe import Markup, escape

logger = logging.getLogger(__name__)

Block = Dict[str, Any]

_BLOCK_TAGS = {
    "heading1": "h1",
    "heading2": "h2",
    "heading3": "h3",
    "heading4": "h4",
    "heading5": "h5",
    "heading6": "h6",
    "paragraph": "p",
    "preformatted": "pre",
}
_LIST_TAGS = {"list-item": "ul", "o-list-item": "ol"}
_SAFE_SCHEMES = ("http", "https", "mailto", "")


def as_text(blocks: Optional[Iterable[Block]], separator: str = " ") -> str:
    if not blocks:
        return ""
    return separator.join(block.get("text") or "" for block in blocks)


def as_html(blocks: Optional[Iterable[Block]]) -> Markup:
    if not blocks:
        return Markup("")

    parts: List[str] = []
    open_list: Optional[str] = None
    for block in blocks:
        block_type = block.get("type", "paragraph")
        list_tag = _LIST_TAGS.get(block_type)

        if open_list and list_tag != open_list:
            parts.append(f"</{open_list}>")
            open_list = None
        if list_tag and not open_list:
            parts.append(f"<{list_tag}>")
            open_list = list_tag

        if list_tag:
            parts.append(f"<li>{_serialize_text(block)}</li>")
        elif block_type in _BLOCK_TAGS:
            tag = _BLOCK_TAGS[block_type]
            parts.append(f"<{tag}>{_serialize_text(block)}</{tag}>")
        elif block_type == "image":
            parts.append(_serialize_image(block))
        elif block_type == "embed":
            parts.append(_serialize_embed(block))
        else:
            logger.debug(f"Skipping unsupported rich text block {block_type}")

    if open_list:
        parts.append(f"</{open_list}>")
    return Markup("".join(parts))


def _serialize_text(block: Block) -> str:
    text = block.get("text") or ""
    offsets = _code_point_offsets(text)
    last = len(offsets) - 1
    spans = [
        {
            **span,
            "start": offsets[min(max(span["start"], 0), last)],
            "end": offsets[min(max(span["end"], 0), last)],
        }
        for span in block.get("spans") or []
        if isinstance(span.get("start"), int) and isinstance(span.get("end"), int)
    ]
    return _serialize_spans(text, spans, 0, len(text))


def _code_point_offsets(text: str) -> List[int]:
    """
    Span offsets count UTF-16 code units, as JavaScript strings do.
    Returns the code point index for every code unit offset in `text`.
    """
    offsets = []
    for index, char in enumerate(text):
        offsets.append(index)
        if ord(char) > 0xFFFF:
            # low surrogate: an offset inside the pair lands after the character
            offsets.append(index + 1)
    offsets.append(len(text))
    return offsets


def _span_order(span: Dict[str, Any]):
    return span["start"], -span["end"]


def _serialize_spans(text: str, spans: List[Dict[str, Any]], start: int, end: int) -> str:
    parts = []
    cursor = start
    remaining = sorted(spans, key=_span_order)

    while remaining:
        span = remaining.pop(0)
        span_start = max(span["start"], cursor)
        span_end = min(span["end"], end)
        if span_end <= span_start:
            continue

        # spans opening inside this one become its children, clipped to it;
        # whatever runs past its end goes back in the queue
        children = []
        rest = []
        for other in remaining:
            if other["start"] >= span_end:
                rest.append(other)
                continue
            children.append(
                {
                    **other,
                    "start": max(other["start"], span_start),
                    "end": min(other["end"], span_end),
                }
            )
            if other["end"] > span_end:
                rest.append({**other, "start": span_end})
        remaining = sorted(rest, key=_span_order)

        parts.append(_escape_text(text[cursor:span_start]))
        inner = _serialize_spans(text, children, span_start, span_end)
        parts.append(_wrap_span(span, inner))
        cursor = span_end

    parts.append(_escape_text(text[cursor:end]))
    return "".join(parts)


def _wrap_span(span: Dict[str, Any], inner: str) -> str:
    span_type = span.get("type")
    if span_type == "strong":
        return f"<strong>{inner}</strong>"
    if span_type == "em":
        return f"<em>{inner}</em>"
    if span_type == "label":
        label = (span.get("data") or {}).get("label", "")
        return f'<span class="{escape(label)}">{inner}</span>'
    if span_type == "hyperlink":
        href = _safe_url((span.get("data") or {}).get("url"))
        if not href:
            return inner
        return f'<a href="{escape(href)}" rel="noopener noreferrer">{inner}</a>'
    return inner


def _serialize_image(block: Block) -> str:
    src = _safe_url(block.get("url"))
    if not src:
        return ""
    alt = block.get("alt") or ""
    return f'<p class="block-img"><img src="{escape(src)}" alt="{escape(alt)}" /></p>'


def _serialize_embed(block: Block) -> str:
    oembed = block.get("oembed") or {}
    url = _safe_url(oembed.get("embed_url"))
    if not url:
        return ""
    title = oembed.get("title") or url
    return (
        f'<div class="embed"><a href="{escape(url)}" rel="noopener noreferrer">'
        f"{escape(title)}</a></div>"
    )


def _escape_text(text: str) -> str:
    return str(escape(text)).replace("\n", "<br />")


def _safe_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    if urlsplit(url).scheme.lower() not in _SAFE_SCHEMES:
        return None
    return url
