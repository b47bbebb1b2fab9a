"""
Client data layer for the registry API.

Lists and creates records over HTTP, keeps the last loaded arrays as an
explicit ``RegistryState`` value and turns records into table rows. There is
no caching beyond that state, no retry and no optimistic update: after a
successful write the affected kind is simply reloaded.
"""

import httpx
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
import structlog

from ..core.config import settings
from ..models.records import KINDS, Record, RecordKind, format_number, get_kind, parse_number

logger = structlog.get_logger()

KindRef = Union[RecordKind, str]


class RecordSaveError(Exception):
    """The server refused to store a record."""

    def __init__(self, kind: RecordKind, status_code: int, error: str):
        self.kind = kind
        self.status_code = status_code
        self.error = error
        super().__init__(f"{kind.name}: {error} (HTTP {status_code})")


def _resolve(kind: KindRef) -> RecordKind:
    return kind if isinstance(kind, RecordKind) else get_kind(kind)


def coerce_form(kind: KindRef, form: Mapping[str, Any]) -> Record:
    """
    Shallow numeric coercion of submitted form values.

    Numeric strings in the kind's number fields become ints or floats.
    Everything else, including blank or non-numeric text, passes through
    untouched and is left for the server to cast.
    """
    kind = _resolve(kind)
    record = dict(form)
    for name in kind.number_fields:
        value = record.get(name)
        if not isinstance(value, str):
            continue
        number = parse_number(value)
        if number is None:
            continue
        record[name] = int(number) if number.is_integer() else number
    return record


def render_rows(kind: KindRef, records: Iterable[Record]) -> List[List[str]]:
    """Render records as table rows in the kind's column order."""
    kind = _resolve(kind)
    rows = []
    for record in records:
        row = []
        for name in kind.field_names:
            value = record.get(name)
            if value is None:
                row.append("")
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                row.append(format_number(value))
            else:
                row.append(str(value))
        rows.append(row)
    return rows


@dataclass(frozen=True)
class RegistryState:
    """The last loaded records of each kind, keyed by kind name."""
    records: Dict[str, List[Record]] = field(default_factory=dict)

    def get(self, kind: KindRef) -> List[Record]:
        return self.records.get(_resolve(kind).name, [])

    def with_records(self, loaded: Mapping[str, List[Record]]) -> "RegistryState":
        """Return a new state with the given kinds' arrays replaced wholesale."""
        return replace(self, records={**self.records, **loaded})

    def rows(self, kind: KindRef) -> List[List[str]]:
        return render_rows(kind, self.get(kind))


class RegistryClient:
    """HTTP client for the registry record endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url or settings.CLIENT_BASE_URL
        self.api_prefix = settings.API_PREFIX
        self.timeout = timeout or settings.CLIENT_TIMEOUT
        self.transport = transport
        self.session: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Async context manager entry."""
        self.session = httpx.AsyncClient(
            base_url=f"{self.base_url.rstrip('/')}{self.api_prefix}",
            timeout=self.timeout,
            transport=self.transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json"
            }
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session:
            await self.session.aclose()

    async def list_records(self, kind: KindRef) -> List[Record]:
        """Fetch every stored record of a kind."""
        kind = _resolve(kind)
        try:
            response = await self.session.get(f"/{kind.slug}")
            response.raise_for_status()
            return response.json()
        except Exception as e:
            logger.error("Failed to fetch records", kind=kind.name, error=str(e))
            raise

    async def create_record(self, kind: KindRef, fields: Mapping[str, Any]) -> str:
        """
        Submit a record and return the server's confirmation message.

        Raises:
            RecordSaveError: the server answered with a non-success status
        """
        kind = _resolve(kind)
        response = await self.session.post(f"/{kind.slug}", json=coerce_form(kind, fields))

        if response.is_success:
            message = response.json().get("message", "")
            logger.info("Record saved", kind=kind.name, message=message)
            return message

        try:
            body = response.json()
            error = body.get("error") or body.get("detail") or response.reason_phrase
        except ValueError:
            error = response.reason_phrase
        logger.error("Failed to save record", kind=kind.name, status_code=response.status_code, error=error)
        raise RecordSaveError(kind, response.status_code, str(error))

    async def reload(
        self,
        state: RegistryState,
        kinds: Optional[Iterable[KindRef]] = None
    ) -> RegistryState:
        """Fetch the given kinds (all by default) into a new state."""
        targets = [_resolve(kind) for kind in kinds] if kinds is not None else list(KINDS)
        loaded = {}
        for kind in targets:
            loaded[kind.name] = await self.list_records(kind)
        return state.with_records(loaded)

    async def submit(
        self,
        state: RegistryState,
        kind: KindRef,
        fields: Mapping[str, Any]
    ) -> RegistryState:
        """Create a record, then reload its kind."""
        await self.create_record(kind, fields)
        return await self.reload(state, [kind])
