"""CSV buyer import - parsing, field mapping, coercion, and batched inserts."""

import csv
import io
import re
from typing import Any, Awaitable, Callable, Optional, Union
from pydantic import BaseModel, Field
from realty_crm.models.buyer_import import (
    DuplicatePolicy,
    FieldType,
    ImportField,
    ImportResult,
    ImportState,
)
from realty_crm.services.buyer_service import insert_buyers, list_buyers
from realty_crm.services.store import CRMStore
from realty_crm.utils.config import CRMConfig
from realty_crm.utils.errors import (
    BuyerImportError,
    CSVParseError,
    ImportInProgressError,
    MappingError,
    StoreError,
)
from realty_crm.utils.logging import (
    correlation_context,
    get_structured_logger,
    log_timing,
    mask_sensitive_data,
)

logger = get_structured_logger(__name__)

FIELD_MAPPINGS: list[ImportField] = [
    ImportField(db="fname", label="First Name"),
    ImportField(db="lname", label="Last Name"),
    ImportField(db="email", label="Email"),
    ImportField(db="phone", label="Phone 1"),
    ImportField(db="phone2", label="Phone 2"),
    ImportField(db="phone3", label="Phone 3"),
    ImportField(db="company", label="Company"),
    ImportField(db="score", label="Score", type=FieldType.NUMBER),
    ImportField(db="notes", label="Notes"),
    ImportField(db="mailing_address", label="Mailing Address"),
    ImportField(db="mailing_city", label="Mailing City"),
    ImportField(db="mailing_state", label="Mailing State"),
    ImportField(db="mailing_zip", label="Mailing Zip"),
    ImportField(db="locations", label="Geotag/Locations", type=FieldType.LIST),
    ImportField(db="tags", label="Tags", type=FieldType.LIST),
    ImportField(db="vetted", label="Is Vetted?", type=FieldType.BOOL),
    ImportField(db="vip", label="Is VIP?", type=FieldType.BOOL),
    ImportField(db="can_receive_sms", label="Can Receive Text?", type=FieldType.BOOL),
    ImportField(db="can_receive_email", label="Can Receive Email?", type=FieldType.BOOL),
    ImportField(db="property_type", label="Property Types", type=FieldType.LIST),
    ImportField(db="budget_min", label="Budget Min", type=FieldType.NUMBER),
    ImportField(db="budget_max", label="Budget Max", type=FieldType.NUMBER),
    ImportField(db="timeline", label="Timeline"),
    ImportField(db="source", label="Source"),
    ImportField(db="status", label="Status"),
]

FIELDS_BY_DB = {field.db: field for field in FIELD_MAPPINGS}

PHONE_FIELDS = ("phone", "phone2", "phone3")

TRUTHY_VALUES = {"yes", "true", "1", "y", "t", "on"}

RECORD_DEFAULTS = {
    "score": 0,
    "status": "lead",
    "vip": False,
    "vetted": False,
    "can_receive_email": True,
    "can_receive_sms": True,
}

NOT_MAPPED = "none"

_LIST_SEPARATORS = re.compile(r"[,;|]")
_CANDIDATE_DELIMITERS = ",;\t|"

ProgressCallback = Callable[[int], Any]
SuccessCallback = Callable[[], Awaitable[Any]]


class ParsedCSV(BaseModel):
    """Header and data rows of an uploaded file."""
    headers: list[str] = Field(default_factory=list)
    rows: list[dict[str, Optional[str]]] = Field(default_factory=list)


def parse_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if not isinstance(value, str):
        return False
    return value.strip().lower() in TRUTHY_VALUES


def parse_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        return [item for item in value if item]
    return [piece.strip() for piece in _LIST_SEPARATORS.split(str(value)) if piece.strip()]


def parse_number(value: Any) -> Optional[Union[int, float]]:
    """Numeric value of a cell, or None when empty or not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if value == value else None
    text = str(value).strip()
    if not text:
        return None
    if "_" in text or not text.isascii():
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return int(number) if number.is_integer() else number


def coerce_value(value: Any, field_type: FieldType) -> Any:
    if field_type is FieldType.BOOL:
        return parse_boolean(value)
    if field_type is FieldType.LIST:
        return parse_list(value)
    if field_type is FieldType.NUMBER:
        return parse_number(value)
    if value is None:
        return None
    return str(value).strip()


def build_buyer_record(row: dict[str, Any], mapping: dict[str, str]) -> dict[str, Any]:
    """Map one CSV row onto buyer columns.

    Unmapped fields and absent values are left out of the record; defaults
    then fill score, status and the contact flags.
    """
    record: dict[str, Any] = {}
    for field in FIELD_MAPPINGS:
        column = mapping.get(field.db)
        if not column or column == NOT_MAPPED:
            continue
        value = coerce_value(row.get(column), field.type)
        if value is not None:
            record[field.db] = value

    for phone_field in PHONE_FIELDS:
        if phone_field in record and not isinstance(record[phone_field], str):
            record[phone_field] = str(record[phone_field])

    for column, default in RECORD_DEFAULTS.items():
        if record.get(column) is None:
            record[column] = default
    if not record["status"]:
        record["status"] = RECORD_DEFAULTS["status"]
    return record


def detect_delimiter(header_line: str) -> str:
    """Most frequent candidate delimiter in the header line, comma on ties."""
    counts = {delimiter: header_line.count(delimiter) for delimiter in _CANDIDATE_DELIMITERS}
    best = max(_CANDIDATE_DELIMITERS, key=lambda delimiter: counts[delimiter])
    return best if counts[best] else ","


def parse_csv(content: Union[str, bytes]) -> ParsedCSV:
    """Parse delimited text with a header row.

    Blank lines are skipped, and so are rows whose cells are all empty
    (``",,,"``); such rows never reach the importer.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CSVParseError(f"File is not valid UTF-8 text: {e}") from e
    content = content.lstrip("\ufeff")

    header_line = next((line for line in content.splitlines() if line.strip()), None)
    if header_line is None:
        raise CSVParseError("File is empty or has no header row")

    reader = csv.reader(io.StringIO(content), delimiter=detect_delimiter(header_line), strict=True)
    try:
        rows = [values for values in reader if any(value.strip() for value in values)]
    except csv.Error as e:
        raise CSVParseError(f"Failed to parse CSV file: {e}") from e

    headers = [header.strip() for header in rows[0]] if rows else []
    if not any(headers):
        raise CSVParseError("File is empty or has no header row")

    records = []
    for values in rows[1:]:
        record: dict[str, Optional[str]] = {}
        for index, header in enumerate(headers):
            if header:
                record[header] = values[index] if index < len(values) else None
        records.append(record)

    return ParsedCSV(headers=[header for header in headers if header], rows=records)


def template_csv() -> str:
    """Header-only CSV listing every importable field label."""
    return ",".join(field.label for field in FIELD_MAPPINGS) + "\n"


def auto_map(headers: list[str]) -> dict[str, str]:
    """Pre-fill mappings for headers equal to a field label or column name."""
    by_name = {header.strip().lower(): header for header in headers}
    mapping = {}
    for field in FIELD_MAPPINGS:
        header = by_name.get(field.label.lower()) or by_name.get(field.db.lower())
        if header:
            mapping[field.db] = header
    return mapping


def progress_percent(done: int, total: int) -> int:
    """``done / total`` as a whole percent, halves rounded up."""
    if total <= 0:
        return 100
    return (done * 200 + total) // (total * 2)


def _phone_key(value: Any) -> Optional[str]:
    digits = re.sub(r"\D", "", str(value or ""))
    return digits or None


def _duplicate_keys(record: dict[str, Any]) -> set[str]:
    keys = set()
    email = (record.get("email") or "").strip().lower()
    if email:
        keys.add(f"email:{email}")
    phone = _phone_key(record.get("phone"))
    if phone:
        keys.add(f"phone:{phone}")
    return keys


class BuyerImporter:
    """Drives one CSV upload from file selection to batched insert.

    ``IDLE -> PARSED -> MAPPING -> IMPORTING -> DONE -> IDLE``, with
    ``ERROR`` reachable from parsing and importing. Records committed by
    earlier batches stay in the store when a later batch fails.
    """

    def __init__(
        self,
        store: CRMStore,
        batch_size: Optional[int] = None,
        duplicate_policy: Optional[DuplicatePolicy] = None,
        on_success: Optional[SuccessCallback] = None,
    ):
        self.store = store
        self.batch_size = batch_size or CRMConfig.IMPORT_BATCH_SIZE
        if self.batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.duplicate_policy = duplicate_policy or DuplicatePolicy(CRMConfig.IMPORT_DUPLICATE_POLICY)
        self.on_success = on_success
        self._clear()

    def _clear(self) -> None:
        self.state = ImportState.IDLE
        self.headers: list[str] = []
        self.rows: list[dict[str, Optional[str]]] = []
        self.mapping: dict[str, str] = {}
        self.progress = 0
        self.error: Optional[str] = None

    def load(self, content: Union[str, bytes]) -> ParsedCSV:
        """Parse an uploaded file, replacing any previously loaded one."""
        if self.state is ImportState.IMPORTING:
            raise ImportInProgressError("An import is already running")
        self._clear()
        try:
            parsed = parse_csv(content)
        except CSVParseError as e:
            self.state = ImportState.ERROR
            self.error = str(e)
            logger.warning("CSV parse failed", error=mask_sensitive_data(str(e)))
            raise
        self.headers = parsed.headers
        self.rows = parsed.rows
        self.state = ImportState.PARSED
        logger.info("CSV parsed", rows=len(parsed.rows), columns=len(parsed.headers))
        return parsed

    def _require_rows(self) -> None:
        if self.state is ImportState.IMPORTING:
            raise ImportInProgressError("An import is already running")
        if not self.headers:
            raise MappingError("No file loaded")

    def set_mapping(self, field: str, column: Optional[str]) -> None:
        """Map ``column`` onto target ``field``; ``None``/``"none"`` clears it."""
        self._require_rows()
        if field not in FIELDS_BY_DB:
            raise MappingError(f"Unknown import field: {field}")
        if not column or column == NOT_MAPPED:
            self.mapping.pop(field, None)
        elif column not in self.headers:
            raise MappingError(f"Column not found in file: {column}")
        else:
            self.mapping[field] = column
        self.state = ImportState.MAPPING

    def apply_mapping(self, mapping: dict[str, Optional[str]]) -> None:
        for field, column in mapping.items():
            self.set_mapping(field, column)

    def auto_map(self) -> dict[str, str]:
        self.apply_mapping(auto_map(self.headers))
        return dict(self.mapping)

    @property
    def mapped_fields(self) -> list[str]:
        return [field.db for field in FIELD_MAPPINGS if self.mapping.get(field.db)]

    @property
    def can_import(self) -> bool:
        return (
            self.state in (ImportState.PARSED, ImportState.MAPPING, ImportState.ERROR)
            and bool(self.rows or self.headers)
            and bool(self.mapped_fields)
        )

    def preview(self, field: str, max_length: int = 30) -> Optional[str]:
        """First row's raw value for a mapped field, shortened for display."""
        column = self.mapping.get(field)
        if not column or not self.rows:
            return None
        text = str(self.rows[0].get(column) or "")
        return text[:max_length] + ("..." if len(text) > max_length else "")

    def retry(self) -> None:
        """Leave ERROR: back to mapping when rows are held, else idle."""
        if self.state is not ImportState.ERROR:
            return
        self.error = None
        self.progress = 0
        if self.headers:
            self.state = ImportState.MAPPING
        else:
            self._clear()

    def reset(self) -> None:
        if self.state is ImportState.IMPORTING:
            raise ImportInProgressError("An import is already running")
        self._clear()

    def build_records(self) -> list[dict[str, Any]]:
        return [build_buyer_record(row, self.mapping) for row in self.rows]

    async def _drop_duplicates(self, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        seen: set[str] = set()
        for existing in await list_buyers(self.store):
            seen |= _duplicate_keys(existing.model_dump())
        kept = []
        for record in records:
            keys = _duplicate_keys(record)
            if keys & seen:
                continue
            seen |= keys
            kept.append(record)
        return kept

    async def run(self, on_progress: Optional[ProgressCallback] = None) -> ImportResult:
        """Insert all mapped rows in sequential batches.

        Raises BuyerImportError on the first failing batch; later batches
        are not attempted.
        """
        if self.state is ImportState.IMPORTING:
            raise ImportInProgressError("An import is already running")
        if not self.can_import:
            raise MappingError("Map at least one field before importing")

        self.state = ImportState.IMPORTING
        self.progress = 0
        self.error = None

        with correlation_context(prefix="imp") as import_id:
            try:
                result = await self._run_batches(import_id, on_progress)
            except Exception as e:
                self.state = ImportState.ERROR
                self.error = str(e)
                raise

        self.state = ImportState.DONE
        try:
            if self.on_success is not None:
                await self.on_success()
        finally:
            self._clear()
        return result

    async def _run_batches(self, import_id: str, on_progress: Optional[ProgressCallback]) -> ImportResult:
        records = self.build_records()
        total_rows = len(records)
        skipped = 0
        if self.duplicate_policy is DuplicatePolicy.SKIP_EXISTING:
            records = await self._drop_duplicates(records)
            skipped = total_rows - len(records)

        total = len(records)
        batches = [records[i:i + self.batch_size] for i in range(0, total, self.batch_size)]
        logger.info(
            "Buyer import started",
            rows=total_rows,
            records=total,
            skipped_duplicates=skipped,
            batch_size=self.batch_size,
            batches=len(batches),
            mapped_fields=self.mapped_fields,
        )

        inserted = 0
        inserted_ids: list[str] = []
        for index, batch in enumerate(batches, start=1):
            try:
                with log_timing("insert_buyer_batch", logger=logger, batch=index, size=len(batch)):
                    stored = await insert_buyers(self.store, batch)
            except StoreError as e:
                logger.error(
                    "Buyer import batch failed",
                    batch=index,
                    batches=len(batches),
                    inserted_count=inserted,
                    error=mask_sensitive_data(str(e)),
                )
                raise BuyerImportError(
                    str(e),
                    inserted_count=inserted,
                    failed_batch=index,
                    total_batches=len(batches),
                ) from e

            inserted += len(batch)
            inserted_ids.extend(str(row["id"]) for row in stored if row.get("id") is not None)
            self.progress = progress_percent(inserted, total)
            if on_progress is not None:
                on_progress(self.progress)

        self.progress = 100
        logger.info("Buyer import completed", inserted_count=inserted, batches=len(batches))
        return ImportResult(
            import_id=import_id,
            total_rows=total_rows,
            inserted_count=inserted,
            skipped_duplicates=skipped,
            batches=len(batches),
            progress=100,
            inserted_ids=inserted_ids,
        )
