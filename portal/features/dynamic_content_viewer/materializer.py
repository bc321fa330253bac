"""
Typed field materializer.

Copies submitted form values onto the fields of a content part, converting
each raw string to the type its field definition declares. Nested parts are
addressed with "/"-joined field names, matching the input names emitted by
the edit templates (e.g. "Address/City").
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import structlog
from markupsafe import escape

from portal.features.dynamic_content.content import ContentPart, Field, FieldKind, SCALAR_DEFAULTS
from portal.features.dynamic_content.exceptions import ContentDefinitionError

from .exceptions import FieldCoercionError

logger = structlog.get_logger(__name__)

PATH_SEPARATOR = "/"
VALUE_SEPARATOR = ";"

# ASCII digits with an optional sign; no digit separators
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

FormValues = Union[Mapping[str, Union[str, Sequence[str]]], Any]

# (value, error message or None)
Coerced = Tuple[Any, Optional[str]]


def read_raw_value(form: FormValues, key: str) -> Optional[str]:
    """
    Every value posted under key, joined with ";".

    A checked checkbox followed by its hidden input therefore reads
    "true;false". Returns None when the key was not posted.
    """
    if hasattr(form, "getlist"):
        values = [value for value in form.getlist(key) if isinstance(value, str)]
        if not values:
            return None
        return VALUE_SEPARATOR.join(values)

    value = form.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return VALUE_SEPARATOR.join(str(item) for item in value)


def _coerce_boolean(raw: Optional[str]) -> Coerced:
    return raw is not None and "true" in raw, None


def _coerce_integer(raw: Optional[str]) -> Coerced:
    if not raw:
        return SCALAR_DEFAULTS[FieldKind.INTEGER], None
    text = raw.strip()
    if not INTEGER_PATTERN.fullmatch(text):
        return SCALAR_DEFAULTS[FieldKind.INTEGER], f"'{raw}' is not a whole number"
    return int(text), None


def _coerce_float(raw: Optional[str]) -> Coerced:
    if not raw:
        return SCALAR_DEFAULTS[FieldKind.FLOAT], None
    try:
        value = float(raw.strip())
    except ValueError:
        return SCALAR_DEFAULTS[FieldKind.FLOAT], f"'{raw}' is not a number"
    # nan and infinities cannot be stored as JSON
    if not math.isfinite(value):
        return SCALAR_DEFAULTS[FieldKind.FLOAT], f"'{raw}' is not a finite number"
    return value, None


def _coerce_text(raw: Optional[str]) -> Coerced:
    return raw if raw is not None else "", None


def _coerce_rich_text(raw: Optional[str]) -> Coerced:
    if not raw:
        return "", None
    return str(escape(raw)), None


def _coerce_markdown(raw: Optional[str]) -> Coerced:
    return raw or "", None


COERCERS: Dict[FieldKind, Callable[[Optional[str]], Coerced]] = {
    FieldKind.BOOLEAN: _coerce_boolean,
    FieldKind.INTEGER: _coerce_integer,
    FieldKind.FLOAT: _coerce_float,
    FieldKind.TEXT: _coerce_text,
    FieldKind.RICH_TEXT: _coerce_rich_text,
    FieldKind.MARKDOWN: _coerce_markdown,
}


def process_fields(
    part: ContentPart,
    form: FormValues,
    prefix: str = "",
    *,
    strict: bool = False,
) -> None:
    """
    Fill every field value in the part's subtree from the submitted form.

    Missing keys and unparseable numbers fall back to the field type's default
    (False, 0, 0.0 or ""). With strict=True the walk still completes, then a
    FieldCoercionError listing every unparseable key is raised.

    Reference fields without a nested part are skipped; no part is created.
    """
    errors: Dict[str, List[str]] = {}
    updated = _walk(part, form, prefix, errors)

    logger.debug("Materialized form fields", prefix=prefix or None, fields=updated, invalid=len(errors))

    if strict and errors:
        raise FieldCoercionError(errors)


def _walk(part: ContentPart, form: FormValues, prefix: str, errors: Dict[str, List[str]]) -> int:
    updated = 0
    for field in part:
        if field.definition.is_reference_type:
            if isinstance(field.value, ContentPart):
                updated += _walk(field.value, form, prefix + field.name + PATH_SEPARATOR, errors)
            continue

        key = prefix + field.name
        _set_scalar(field, key, read_raw_value(form, key), errors)
        updated += 1
    return updated


def _set_scalar(field: Field, key: str, raw: Optional[str], errors: Dict[str, List[str]]) -> None:
    kind = field.definition.kind
    coercer = COERCERS.get(kind)
    if coercer is None:
        raise ContentDefinitionError(f"No form coercion for field '{key}' of kind '{kind.value}'")

    value, error = coercer(raw)
    if error:
        logger.warning("Unparseable form value replaced by default", key=key, kind=kind.value, default=value)
        errors.setdefault(key, []).append(error)
    field.value = value
