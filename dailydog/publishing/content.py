"""
Article body normalization for rendering

Stored article content is either HTML written by the generator/editor or plain
text pasted into the admin form. ``normalize_content`` turns both into safe,
renderable markup: copy-paste artifacts are removed, plain text is wrapped in
paragraphs, external links open in a new tab without leaking the referrer,
and ``[n]`` citation markers link to the references list when there is one.
"""

import html
import re

# U+FFFC OBJECT REPLACEMENT CHARACTER, U+FFFD REPLACEMENT CHARACTER
_ARTIFACTS = re.compile("[\ufffc\ufffd]")

_BLOCK_TAG = re.compile(
    r"<(?:p|h[1-6]|ul|ol|li|blockquote|img|a|div|section)\b",
    re.IGNORECASE,
)
_BLANK_LINE = re.compile(r"\n[ \t]*\n")

_ANCHOR_TAG = re.compile(r"<a\b([^>]*)>", re.IGNORECASE)
# Attribute values may be double-quoted, single-quoted or unquoted
_ATTR_VALUE = r"""\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'=<>`]+))"""
_TARGET_ATTR = re.compile(r"(^|\s)target" + _ATTR_VALUE, re.IGNORECASE)
_REL_ATTR = re.compile(r"(^|\s)rel" + _ATTR_VALUE, re.IGNORECASE)
SAFE_REL_TOKENS = ("noopener", "noreferrer")

_ORDERED_LIST = re.compile(r"<ol\b.*?</ol>", re.IGNORECASE | re.DOTALL)
_REF_ID = re.compile(r"""\bid\s*=\s*["']ref-\d+["']""", re.IGNORECASE)
_CITATION = re.compile(r"\[(\d+)\]")


def strip_artifacts(content: str) -> str:
    return _ARTIFACTS.sub("", content)


def is_plain_text(content: str) -> bool:
    """Heuristic: no block-level tag names at all means plain text"""
    return _BLOCK_TAG.search(content) is None


def plain_text_to_html(text: str) -> str:
    """Escape plain text and wrap blank-line separated blocks in <p>"""
    escaped = html.escape(text.replace("\r\n", "\n").replace("\r", "\n"))
    paragraphs = [p.strip() for p in _BLANK_LINE.split(escaped)]
    return "\n".join(
        "<p>" + p.replace("\n", "<br />") + "</p>"
        for p in paragraphs
        if p
    )


def _secure_anchor(match: re.Match) -> str:
    attrs = match.group(1)
    self_closing = attrs.rstrip().endswith("/")
    if self_closing:
        attrs = attrs.rstrip()[:-1]

    if _TARGET_ATTR.search(attrs):
        attrs = _TARGET_ATTR.sub(lambda m: f'{m.group(1)}target="_blank"', attrs, count=1)
    else:
        attrs = attrs.rstrip() + ' target="_blank"'

    rel = _REL_ATTR.search(attrs)
    if rel:
        value = next((v for v in rel.group(2, 3, 4) if v is not None), "")
        tokens = value.split()
        lowered = {t.lower() for t in tokens}
        tokens += [t for t in SAFE_REL_TOKENS if t not in lowered]
        attrs = attrs[:rel.start()] + f'{rel.group(1)}rel="{" ".join(tokens)}"' + attrs[rel.end():]
    else:
        attrs = attrs.rstrip() + ' rel="' + " ".join(SAFE_REL_TOKENS) + '"'

    return f"<a{attrs}{' /' if self_closing else ''}>"


def secure_links(content: str) -> str:
    """Every link opens in a new tab and drops the referrer"""
    return _ANCHOR_TAG.sub(_secure_anchor, content)


def has_reference_list(content: str) -> bool:
    return any(_REF_ID.search(block) for block in _ORDERED_LIST.findall(content))


def link_citations(content: str) -> str:
    """Turn ``[n]`` markers into links to ``#ref-n`` if a references list exists"""
    if not has_reference_list(content):
        return content
    return _CITATION.sub(
        lambda m: f'<sup class="citation"><a href="#ref-{m.group(1)}">[{m.group(1)}]</a></sup>',
        content,
    )


def normalize_content(content: str) -> str:
    """Stored article content -> renderable HTML"""
    if not content:
        return ""

    content = strip_artifacts(content)
    if is_plain_text(content):
        content = plain_text_to_html(content)
    content = secure_links(content)
    return link_citations(content)
