"""
Record kinds kept by the registry and the schema typing applied to them.

Every kind is a flat mapping of named fields to strings or numbers. The
field types are the only thing checked on insert: values are cast the way a
document store casts against its schema, undeclared fields are dropped and
nothing else is validated.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

Record = Dict[str, Any]

DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class CastError(ValueError):
    """A value could not be cast to its field type."""

    def __init__(self, field: str, value: Any, expected: str):
        self.field = field
        self.value = value
        self.expected = expected
        super().__init__(f"Cast to {expected} failed for value {value!r} at path {field!r}")


class FieldType(str, Enum):
    """Primitive field types."""
    STRING = "String"
    NUMBER = "Number"


def format_number(value: float) -> str:
    """Render a number the way it is shown to users: 25.0 -> '25'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_number(value: Optional[float]) -> Optional[float]:
    """Return integral floats as ints so listings read 25, not 25.0."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def parse_number(text: str) -> Optional[float]:
    """Parse a plain decimal string. Returns None for anything else."""
    text = text.strip()
    if not DECIMAL_PATTERN.fullmatch(text):
        return None
    number = float(text)
    return number if math.isfinite(number) else None


def _cast_string(field: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    raise CastError(field, value, FieldType.STRING.value)


def _cast_number(field: str, value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        number = parse_number(text)
        if number is None:
            raise CastError(field, value, FieldType.NUMBER.value)
    else:
        raise CastError(field, value, FieldType.NUMBER.value)

    if isinstance(number, float) and not math.isfinite(number):
        raise CastError(field, value, FieldType.NUMBER.value)
    return number


@dataclass(frozen=True)
class FieldSpec:
    """A declared field of a record kind."""
    name: str
    type: FieldType = FieldType.STRING

    def cast(self, value: Any) -> Any:
        if value is None:
            return None
        if self.type is FieldType.NUMBER:
            return _cast_number(self.name, value)
        return _cast_string(self.name, value)


@dataclass(frozen=True)
class RecordKind:
    """One category of record and everything needed to store and serve it."""
    name: str
    slug: str
    collection: str
    plural: str
    fields: Tuple[FieldSpec, ...]
    created_message: str
    failed_message: str

    @property
    def key_field(self) -> str:
        """Application-level identifier field. Not enforced unique."""
        return self.fields[0].name

    @property
    def field_names(self) -> List[str]:
        return [spec.name for spec in self.fields]

    @property
    def number_fields(self) -> List[str]:
        return [spec.name for spec in self.fields if spec.type is FieldType.NUMBER]

    @property
    def list_failed_message(self) -> str:
        return f"Failed to fetch {self.plural}"

    def cast(self, fields: Record) -> Record:
        """
        Cast a submitted mapping against the kind's schema.

        Undeclared keys are dropped, and declared keys that are missing or
        cast to None are left out of the result.

        Raises:
            CastError: a declared value cannot be cast to its field type
        """
        record = {}
        for spec in self.fields:
            if spec.name not in fields:
                continue
            value = spec.cast(fields[spec.name])
            if value is not None:
                record[spec.name] = value
        return record


def _strings(*names: str) -> Tuple[FieldSpec, ...]:
    return tuple(FieldSpec(name) for name in names)


BLOOD_TYPE = RecordKind(
    name="BloodType",
    slug="blood-types",
    collection="bloodtypes",
    plural="blood types",
    fields=_strings("Blood_Type_ID", "Name"),
    created_message="Blood Type saved",
    failed_message="Failed to save blood type",
)

HOSPITAL = RecordKind(
    name="Hospital",
    slug="hospitals",
    collection="hospitals",
    plural="hospitals",
    fields=_strings("Hospital_ID", "Name", "Address", "Contact"),
    created_message="Hospital added successfully",
    failed_message="Failed to add hospital",
)

DONOR = RecordKind(
    name="Donor",
    slug="donors",
    collection="donors",
    plural="donors",
    fields=_strings("Donor_ID", "Name", "Contact") + (
        FieldSpec("Age", FieldType.NUMBER),
    ) + _strings("Blood_Type", "Card_ID"),
    created_message="Donor added successfully",
    failed_message="Failed to add donor",
)

RECIPIENT = RecordKind(
    name="Recipient",
    slug="recipients",
    collection="recipients",
    plural="recipients",
    fields=_strings("Recipient_ID", "Name", "Contact") + (
        FieldSpec("Age", FieldType.NUMBER),
    ) + _strings("Blood_Type", "Card_ID"),
    created_message="Recipient added successfully",
    failed_message="Failed to add recipient",
)

DONOR_TRANSACTION = RecordKind(
    name="DonorTransaction",
    slug="donor-transactions",
    collection="donortransactions",
    plural="donor transactions",
    fields=_strings(
        "Transaction_ID", "Donor_ID", "Hospital_ID", "Date",
        "Confirmation_Code", "Health_Status"
    ),
    created_message="Donor transaction saved",
    failed_message="Failed to save donor transaction",
)

RECIPIENT_TRANSACTION = RecordKind(
    name="RecipientTransaction",
    slug="recipient-transactions",
    collection="recipienttransactions",
    plural="recipient transactions",
    fields=_strings("Transaction_ID", "Recipient_ID", "Hospital_ID", "Date", "Blood_Type"),
    created_message="Recipient transaction saved",
    failed_message="Failed to save recipient transaction",
)

KINDS: Tuple[RecordKind, ...] = (
    BLOOD_TYPE,
    HOSPITAL,
    DONOR,
    RECIPIENT,
    DONOR_TRANSACTION,
    RECIPIENT_TRANSACTION,
)

_BY_SLUG = {kind.slug: kind for kind in KINDS}
_BY_NAME = {kind.name: kind for kind in KINDS}


def get_kind(slug: str) -> RecordKind:
    """Look a kind up by its URL slug, falling back to its name."""
    try:
        return _BY_SLUG[slug]
    except KeyError:
        return _BY_NAME[slug]
