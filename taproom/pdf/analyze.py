"""Introspection of a template's AcroForm fields."""

from __future__ import annotations

import io
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from pypdf import PdfReader
from pypdf.generic import DictionaryObject

FF_RADIO = 1 << 15
FF_PUSHBUTTON = 1 << 16
FF_COMBO = 1 << 17


@dataclass(frozen=True)
class FormField:
    name: str
    kind: str
    obj: DictionaryObject


def _inherited(obj: DictionaryObject, key: str) -> Any:
    node: Any = obj
    while node is not None:
        if key in node:
            return node[key]
        parent = node.get("/Parent")
        node = parent.get_object() if parent is not None else None
    return None


def field_kind(obj: DictionaryObject) -> str:
    ft = _inherited(obj, "/FT")
    flags = int(_inherited(obj, "/Ff") or 0)
    if ft == "/Tx":
        return "text"
    if ft == "/Btn":
        if flags & FF_PUSHBUTTON:
            return "button"
        if flags & FF_RADIO:
            return "radio"
        return "checkbox"
    if ft == "/Ch":
        return "dropdown" if flags & FF_COMBO else "list"
    if ft == "/Sig":
        return "signature"
    return "unknown"


def _walk(node: Any, prefix: str) -> Iterator[FormField]:
    obj = node.get_object()
    partial = obj.get("/T")
    name = f"{prefix}.{partial}" if prefix and partial else str(partial or prefix)
    kids = [k.get_object() for k in obj.get("/Kids", [])]
    # Kids without a /T of their own are widget annotations of this field.
    named_kids = [k for k in kids if "/T" in k]
    if named_kids:
        for kid in named_kids:
            yield from _walk(kid, name)
        return
    if name:
        yield FormField(name=name, kind=field_kind(obj), obj=obj)


def iter_form_fields(reader: PdfReader) -> Iterator[FormField]:
    root = reader.trailer["/Root"]
    acro = root.get("/AcroForm")
    if acro is None:
        return
    for ref in acro.get_object().get("/Fields", []):
        yield from _walk(ref, "")


def form_field_kinds(reader: PdfReader) -> dict[str, str]:
    return {f.name: f.kind for f in iter_form_fields(reader)}


def _plain(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    return str(value)


def analyze_template(template_bytes: bytes) -> dict[str, Any]:
    """Summarize the form fields of a PDF for the admin analysis endpoint."""
    reader = PdfReader(io.BytesIO(template_bytes))
    fields = list(iter_form_fields(reader))
    details: dict[str, dict[str, Any]] = {}
    for f in fields:
        details[f.name] = {
            "type": f.kind,
            "fieldFlags": int(_inherited(f.obj, "/Ff") or 0),
            "defaultAppearance": _plain(_inherited(f.obj, "/DA")),
            "defaultValue": _plain(_inherited(f.obj, "/DV")),
            "hasAppearanceStream": "/AP" in f.obj
            or any("/AP" in k.get_object() for k in f.obj.get("/Kids", [])),
        }
    return {
        "totalFields": len(fields),
        "fieldsByType": dict(Counter(f.kind for f in fields)),
        "fieldDetails": details,
    }
