"""CSV import endpoints."""

import csv
import io
from typing import Any
from uuid import UUID

import orjson
import structlog
from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from pydantic import HttpUrl, TypeAdapter, ValidationError

from adminkit.api.deps import CurrentUser, DbSession
from adminkit.config import settings
from adminkit.imports import Importer, get_registered_importer, importer_path, registered_importers
from adminkit.imports.dispatcher import dispatch_import_chunks
from adminkit.imports.reader import build_example_csv, guess_column_map, missing_required_mappings, read_csv
from adminkit.models.import_ import Import
from adminkit.repositories.import_repo import ImportRepository
from adminkit.schemas.common import page_count
from adminkit.schemas.import_ import (
    FailedImportRowListResponse,
    FailedImportRowResponse,
    ImportColumnSchema,
    ImportCreateResponse,
    ImporterSchema,
    ImportListResponse,
    ImportResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter()

_url_adapter = TypeAdapter(HttpUrl)


def _parse_json_field(name: str, raw: str | None) -> dict[str, Any] | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = orjson.loads(raw)
    except orjson.JSONDecodeError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{name} must be valid JSON",
        )
    if not isinstance(value, dict):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{name} must be a JSON object",
        )
    return value


async def _get_import_or_404(repo: ImportRepository, import_id: UUID, user_id: UUID) -> Import:
    import_ = await repo.get(import_id, user_id=user_id)
    if not import_:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Import {import_id} not found",
        )
    return import_


def _describe_importer(name: str, importer_cls: type[Importer]) -> ImporterSchema:
    return ImporterSchema(
        name=name,
        path=importer_path(importer_cls),
        chunk_size=importer_cls.get_chunk_size(),
        options=importer_cls.get_options_defaults(),
        columns=[
            ImportColumnSchema(
                name=column.get_name(),
                label=column.get_label(),
                guesses=column.get_guesses(),
                required_mapping=column.is_mapping_required(),
                sensitive=column.is_sensitive(),
                rules=[rule if isinstance(rule, str) else getattr(rule, "__name__", "callback") for rule in column.get_rules()],
                example_header=column.get_example_header(),
                examples=column.get_examples(),
            )
            for column in importer_cls.get_columns()
        ],
    )


@router.get("/importers", response_model=list[ImporterSchema])
async def list_importers(current_user: CurrentUser) -> list[ImporterSchema]:
    """List registered importers and the columns they accept."""
    return [_describe_importer(name, importer_cls) for name, importer_cls in registered_importers().items()]


@router.get("/importers/{name}/example")
async def download_example_csv(name: str, current_user: CurrentUser) -> Response:
    """Download a CSV template for an importer."""
    importer_cls = get_registered_importer(name)
    return Response(
        content=build_example_csv(importer_cls),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{name}-example.csv"'},
    )


@router.post("", response_model=ImportCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_import(
    db: DbSession,
    current_user: CurrentUser,
    file: UploadFile = File(...),
    importer: str = Form(...),
    column_map: str | None = Form(None),
    options: str | None = Form(None),
    webhook_url: str | None = Form(None),
) -> ImportCreateResponse:
    """Upload a CSV file and queue it for import."""
    importer_cls = get_registered_importer(importer)

    parsed_map = _parse_json_field("column_map", column_map)
    parsed_options = _parse_json_field("options", options) or {}

    if webhook_url:
        try:
            _url_adapter.validate_python(webhook_url)
        except ValidationError:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="webhook_url must be a valid URL",
            )

    content = await file.read()
    if len(content) > settings.import_max_file_size_mb * 1024 * 1024:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.import_max_file_size_mb} MB",
        )

    document = read_csv(content, delimiter=importer_cls.csv_delimiter)
    if not document.headers:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The uploaded file is empty",
        )

    if settings.import_max_rows is not None and document.total_rows > settings.import_max_rows:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"The file has {document.total_rows:,} rows; at most {settings.import_max_rows:,} can be imported",
        )

    if parsed_map is None:
        parsed_map = guess_column_map(importer_cls, document.headers)
    else:
        parsed_map = {str(key): str(value) for key, value in parsed_map.items() if value}

    missing = missing_required_mappings(importer_cls, parsed_map, document.headers)
    if missing:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Required columns are not mapped", "missing": missing},
        )

    repo = ImportRepository(db)
    import_ = await repo.create(
        user_id=current_user.id,
        file_name=file.filename or "import.csv",
        importer=importer_path(importer_cls),
        total_rows=document.total_rows,
        webhook_url=webhook_url,
    )

    # Chunk tasks load the import by id
    await db.commit()

    dispatch_import_chunks(import_, document.rows, parsed_map, parsed_options)

    logger.info(
        "Import queued",
        import_id=str(import_.id),
        importer=import_.importer,
        total_rows=import_.total_rows,
    )

    return ImportCreateResponse(
        **ImportResponse.model_validate(import_).model_dump(),
        column_map=parsed_map,
        options=parsed_options,
    )


@router.get("", response_model=ImportListResponse)
async def list_imports(
    db: DbSession,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    completed: bool | None = None,
) -> ImportListResponse:
    """List the current user's imports."""
    repo = ImportRepository(db)
    imports, total = await repo.list_imports(
        page=page,
        per_page=per_page,
        user_id=current_user.id,
        completed=completed,
    )

    return ImportListResponse(
        items=[ImportResponse.model_validate(import_) for import_ in imports],
        total=total,
        page=page,
        per_page=per_page,
        pages=page_count(total, per_page),
    )


@router.get("/{import_id}", response_model=ImportResponse)
async def get_import(import_id: UUID, db: DbSession, current_user: CurrentUser) -> ImportResponse:
    """Get import progress."""
    import_ = await _get_import_or_404(ImportRepository(db), import_id, current_user.id)
    return ImportResponse.model_validate(import_)


@router.get("/{import_id}/failed-rows", response_model=FailedImportRowListResponse)
async def list_failed_rows(
    import_id: UUID,
    db: DbSession,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=500),
) -> FailedImportRowListResponse:
    """List rows of an import that failed."""
    repo = ImportRepository(db)
    await _get_import_or_404(repo, import_id, current_user.id)

    rows, total = await repo.list_failed_rows(import_id, page=page, per_page=per_page)

    return FailedImportRowListResponse(
        items=[FailedImportRowResponse.model_validate(row) for row in rows],
        total=total,
        page=page,
        per_page=per_page,
        pages=page_count(total, per_page),
    )


@router.get("/{import_id}/failed-rows/download")
async def download_failed_rows(import_id: UUID, db: DbSession, current_user: CurrentUser) -> Response:
    """Download failed rows as CSV with an extra ``error`` column."""
    repo = ImportRepository(db)
    import_ = await _get_import_or_404(repo, import_id, current_user.id)
    rows = await repo.all_failed_rows(import_id)

    headers: list[str] = []
    for row in rows:
        for header in row.data:
            if header not in headers:
                headers.append(header)

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([*headers, "error"])
    for row in rows:
        writer.writerow([*(row.data.get(header, "") for header in headers), row.validation_error or ""])

    file_name = import_.file_name.rsplit(".", 1)[0] or "import"

    return Response(
        content=output.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{file_name}-failed-rows.csv"'},
    )
