"""Record codecs.

Two explicit, field-by-field encodings:

- **JSON object form** (camelCase keys) used by the local fallback cache
  and by export/import snapshots.
- **Wire form** used by remote adapters: ``recordType`` + ``recordName``
  (the record id) + a ``fields`` mapping, one entry per record field.

Decoding is defaulting rather than catch-and-ignore: a field that older
data may lack gets an explicit default (``lastModified`` falls back to
``date``), while a missing identity or creation date is an error.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Type

from notestoself.protocols import RecordDecodeError
from notestoself.types import (
    RECORD_TYPES,
    CBTEntry,
    Person,
    Record,
    Reminder,
    TodoItem,
    Note,
    format_datetime,
    normalize_id,
    parse_datetime,
)

logger = logging.getLogger(__name__)

# Classes whose only content field is ``text``
_TEXT_RECORDS = (Note, Reminder, Person)


# === JSON object form ===


def record_to_dict(record: Record) -> Dict[str, Any]:
    """Encode a record as a JSON-ready dict."""
    data: Dict[str, Any] = {
        "id": record.id,
        "date": format_datetime(record.date),
        "lastModified": format_datetime(record.last_modified or record.date),
    }
    if isinstance(record, _TEXT_RECORDS):
        data["text"] = record.text
    elif isinstance(record, CBTEntry):
        data["situation"] = record.situation
        data["distortionIds"] = list(record.distortion_ids)
        data["challenge"] = record.challenge
        data["alternative"] = record.alternative
        data["notes"] = record.notes
    elif isinstance(record, TodoItem):
        data["text"] = record.text
        data["isCompleted"] = record.is_completed
    else:
        raise TypeError(f"Unsupported record type: {type(record).__name__}")
    return data


def _require_str(data: Dict[str, Any], key: str, *, default: Optional[str] = None) -> str:
    value = data.get(key, default)
    if value is None:
        raise RecordDecodeError(f"missing required field '{key}'")
    if not isinstance(value, str):
        raise RecordDecodeError(f"field '{key}' must be a string, got {type(value).__name__}")
    return value


def _decode_time(data: Dict[str, Any], key: str):
    try:
        return parse_datetime(data.get(key))
    except ValueError as e:
        raise RecordDecodeError(f"field '{key}' is not an ISO-8601 date: {e}") from e


def record_from_dict(cls: Type[Record], data: Any) -> Record:
    """Decode a JSON object into a record of ``cls``.

    Raises:
        RecordDecodeError: If required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise RecordDecodeError(f"{cls.__name__} must be a JSON object")

    try:
        record_id = normalize_id(_require_str(data, "id"))
    except ValueError as e:
        raise RecordDecodeError(f"invalid id {data.get('id')!r}") from e

    date = _decode_time(data, "date")
    if date is None:
        raise RecordDecodeError("missing required field 'date'")
    last_modified = _decode_time(data, "lastModified") or date

    if cls in _TEXT_RECORDS:
        return cls(
            id=record_id,
            date=date,
            last_modified=last_modified,
            text=_require_str(data, "text"),
        )

    if cls is CBTEntry:
        raw_ids = data.get("distortionIds", [])
        if not isinstance(raw_ids, list):
            raise RecordDecodeError("field 'distortionIds' must be a list")
        try:
            distortion_ids = [normalize_id(d) for d in raw_ids]
        except ValueError as e:
            raise RecordDecodeError(f"invalid distortion id in {raw_ids!r}") from e
        return CBTEntry(
            id=record_id,
            date=date,
            last_modified=last_modified,
            situation=_require_str(data, "situation", default=""),
            distortion_ids=distortion_ids,
            challenge=_require_str(data, "challenge", default=""),
            alternative=_require_str(data, "alternative", default=""),
            notes=_require_str(data, "notes", default=""),
        )

    if cls is TodoItem:
        completed = data.get("isCompleted", False)
        if not isinstance(completed, bool):
            raise RecordDecodeError("field 'isCompleted' must be a boolean")
        return TodoItem(
            id=record_id,
            date=date,
            last_modified=last_modified,
            text=_require_str(data, "text"),
            is_completed=completed,
        )

    raise TypeError(f"Unsupported record type: {cls.__name__}")


def encode_records(records: Iterable[Record]) -> bytes:
    """Serialize a collection as a JSON array."""
    payload = [record_to_dict(r) for r in records]
    return json.dumps(payload, sort_keys=True, ensure_ascii=False).encode("utf-8")


def decode_records(cls: Type[Record], blob: bytes) -> List[Record]:
    """Deserialize a JSON array of records.

    Raises:
        RecordDecodeError: On malformed JSON or any malformed record.
    """
    try:
        payload = json.loads(blob.decode("utf-8") if isinstance(blob, bytes) else blob)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RecordDecodeError(f"not valid JSON: {e}") from e
    if not isinstance(payload, list):
        raise RecordDecodeError("expected a JSON array of records")
    return [record_from_dict(cls, item) for item in payload]


# === Wire form ===


def record_to_wire(record: Record) -> Dict[str, Any]:
    """Convert a record to the remote wire format."""
    fields: Dict[str, Any] = {
        "date": format_datetime(record.date),
        "lastModified": format_datetime(record.last_modified or record.date),
    }
    if isinstance(record, _TEXT_RECORDS):
        fields["text"] = record.text
    elif isinstance(record, CBTEntry):
        fields["situation"] = record.situation
        fields["challenge"] = record.challenge
        fields["alternative"] = record.alternative
        fields["notes"] = record.notes
        # Relationship field travels as a list of id strings
        fields["distortionIds"] = [str(d) for d in record.distortion_ids]
    elif isinstance(record, TodoItem):
        fields["text"] = record.text
        fields["isCompleted"] = 1 if record.is_completed else 0
    else:
        raise TypeError(f"Unsupported record type: {type(record).__name__}")

    return {
        "recordType": record.RECORD_TYPE,
        "recordName": record.id,
        "fields": fields,
    }


def _parse_ids(values: Any) -> List[str]:
    """Parse a list of id strings, silently dropping any that fail."""
    if not isinstance(values, list):
        return []
    parsed = []
    for value in values:
        try:
            parsed.append(normalize_id(value))
        except ValueError:
            continue
    return parsed


def record_from_wire(wire: Dict[str, Any]) -> Optional[Record]:
    """Convert a wire record back to a record.

    Returns None if the record is of an unknown type or is missing a
    required field, so a fetch can skip it without failing.
    """
    try:
        cls = RECORD_TYPES.get(wire.get("recordType", ""))
        if cls is None:
            return None
        record_id = normalize_id(wire["recordName"])
        fields = wire.get("fields") or {}
        date = parse_datetime(fields["date"])
        if date is None:
            return None

        if cls is TodoItem:
            # Older todo records carry no lastModified
            last_modified = parse_datetime(fields.get("lastModified")) or date
            text = fields["text"]
            completed = fields["isCompleted"]
            if not isinstance(text, str) or not isinstance(completed, int):
                return None
            return TodoItem(
                id=record_id,
                date=date,
                last_modified=last_modified,
                text=text,
                is_completed=completed == 1,
            )

        last_modified = parse_datetime(fields["lastModified"])
        if last_modified is None:
            return None

        if cls is CBTEntry:
            strings = [fields[k] for k in ("situation", "challenge", "alternative", "notes")]
            if not all(isinstance(s, str) for s in strings):
                return None
            situation, challenge, alternative, notes = strings
            return CBTEntry(
                id=record_id,
                date=date,
                last_modified=last_modified,
                situation=situation,
                distortion_ids=_parse_ids(fields.get("distortionIds")),
                challenge=challenge,
                alternative=alternative,
                notes=notes,
            )

        text = fields["text"]
        if not isinstance(text, str):
            return None
        return cls(id=record_id, date=date, last_modified=last_modified, text=text)

    except (AttributeError, KeyError, TypeError, ValueError) as e:
        name = wire.get("recordName") if isinstance(wire, dict) else None
        logger.debug("Undecodable wire record %r: %s", name, e)
        return None
