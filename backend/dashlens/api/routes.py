import logging
from typing import Any, Dict, List
from fastapi import APIRouter, Body, File, HTTPException, Request, Response, UploadFile, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from dashlens.core.config import get_settings
from dashlens.core.errors import ErrorCodes, get_error_response
from dashlens.core.sanitization import sanitize_filename, sanitize_for_logging
from dashlens.core.schemas import (
    AnalyzeRequest,
    CSVRequest,
    DataAnalysis,
    DataSourceCreate,
    DataSourceOption,
    LoadResult,
)
from dashlens.services.analyzer import analyze, load_csv, load_file, load_json
from dashlens.services.data_store import get_data_store

logger = logging.getLogger(__name__)

router = APIRouter()

# Shared with main.py, which registers it on app.state
limiter = Limiter(key_func=get_remote_address)

UPLOAD_CHUNK_SIZE = 1024 * 1024


def _upload_rate_limit() -> str:
    return f"{get_settings().rate_limit_per_minute}/minute"


def _error(request: Request, status_code: int, error_code: str, detail: str = None) -> HTTPException:
    error_info = get_error_response(error_code, detail)
    error_info['correlation_id'] = getattr(request.state, 'correlation_id', 'unknown')
    return HTTPException(status_code=status_code, detail=error_info)


async def _check_file_size_streaming(file: UploadFile, limit_bytes: int) -> int:
    """
    Measure an upload in chunks, stopping early once it exceeds the limit.
    The file position is rewound afterwards.
    """
    file_size = 0
    await file.seek(0)

    while True:
        chunk = await file.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        file_size += len(chunk)
        if file_size > limit_bytes:
            break

    await file.seek(0)
    return file_size


@router.get("/health")
async def health_check():
    return {"status": "ok"}


@router.post("/analyze", response_model=DataAnalysis)
async def analyze_rows(payload: AnalyzeRequest):
    """Profile plain rows and recommend charts."""
    return analyze(payload.rows)


@router.post("/load/json", response_model=LoadResult)
async def load_json_payload(payload: Any = Body(...)):
    """
    Analyze an arbitrary JSON value.

    Box-plot series, admixture matrices and trees are detected before the
    value is read as rows. Unusable input is reported in the `error` field.
    """
    return load_json(payload)


@router.post("/load/csv", response_model=LoadResult)
async def load_csv_payload(payload: CSVRequest):
    return load_csv(payload.text)


@router.post("/upload", response_model=LoadResult)
@limiter.limit(_upload_rate_limit)
async def upload_file(request: Request, file: UploadFile = File(...)):
    """
    Upload a .json or .csv file and analyze it.

    Files with another extension are read as JSON when they parse, as CSV
    otherwise. Rate limited per client IP (RATE_LIMIT_PER_MINUTE).
    """
    settings = get_settings()
    file_size = await _check_file_size_streaming(file, settings.max_file_size_bytes)

    if file_size > settings.max_file_size_bytes:
        raise _error(
            request,
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            ErrorCodes.FILE_TOO_LARGE,
            f"Maximum size is {settings.max_file_size_mb}MB."
        )

    if file_size == 0:
        raise _error(request, status.HTTP_400_BAD_REQUEST, ErrorCodes.FILE_EMPTY)

    result = await load_file(file)

    safe_filename = sanitize_for_logging(sanitize_filename(file.filename))
    if result.error:
        logger.info(f"Upload {safe_filename} could not be analyzed: {result.error}")
    else:
        logger.info(f"Upload {safe_filename} analyzed: {result.analysis.row_count} rows")
    return result


@router.post("/sources", response_model=DataSourceOption, status_code=status.HTTP_201_CREATED)
async def create_data_source(payload: DataSourceCreate):
    store = get_data_store()
    source_id = store.add_data_source(payload.name, payload.rows)
    source = store.get_data_source(source_id)
    return DataSourceOption(id=source.id, name=source.name, row_count=len(source.rows))


@router.get("/sources", response_model=List[DataSourceOption])
async def list_data_sources():
    return get_data_store().data_source_options()


@router.get("/sources/{source_id}/keys")
async def get_data_source_keys(source_id: str, request: Request) -> Dict[str, List[str]]:
    store = get_data_store()
    if store.get_data_source(source_id) is None:
        raise _error(request, status.HTTP_404_NOT_FOUND, ErrorCodes.DATA_SOURCE_NOT_FOUND)
    return {"keys": store.get_data_keys(source_id)}


@router.get("/sources/{source_id}/analysis", response_model=DataAnalysis)
async def analyze_data_source(source_id: str, request: Request):
    source = get_data_store().get_data_source(source_id)
    if source is None:
        raise _error(request, status.HTTP_404_NOT_FOUND, ErrorCodes.DATA_SOURCE_NOT_FOUND)
    return analyze(source.rows)


@router.delete("/sources/{source_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_data_source(source_id: str, request: Request):
    if not get_data_store().remove_data_source(source_id):
        raise _error(request, status.HTTP_404_NOT_FOUND, ErrorCodes.DATA_SOURCE_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
