"""Handlers for the ``meshctl model`` subcommands.

Each handler receives its collaborators explicitly: an ``HTTPClient`` bound
to the current context and a ``Presenter`` for terminal output. Errors are
raised for the caller to report; an empty result is not an error.
"""

from __future__ import annotations

import base64
import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from ..models import ModelListResponse
from ..utils.errors import APIError, InvalidArgumentError, OutputFormatError
from ..utils.http import HTTPClient
from .output import Presenter

logger = logging.getLogger(__name__)

MODELS_PATH = "/api/meshmodels/models"
REGISTER_PATH = "/api/meshmodels/register"

TABLE_HEADER = ("Model", "Category", "Version")
OUTPUT_FORMATS = ("yaml", "json")
NO_MODELS_MESSAGE = "No model(s) found"


def model_rows(response: ModelListResponse) -> list[tuple[str, str, str]]:
    """Table rows for the models of a listing that have a display name."""
    return [(m.name, m.category.name, m.version) for m in response.displayable()]


def fetch_models(http: HTTPClient, path: str, params: dict[str, Any]) -> ModelListResponse:
    """GET a model listing and decode it.

    Raises:
        APIError: On transport, HTTP status or decode failure.
    """
    try:
        data = http.get_json(path, params=params)
        return ModelListResponse.model_validate(data)
    except APIError as e:
        logger.error(str(e))
        raise
    except ValidationError as e:
        logger.error(f"Unexpected response from {http.url(path)}: {e}")
        raise APIError(f"unable to decode models response from {http.url(path)}") from e


def list_models(
    http: HTTPClient,
    presenter: Presenter,
    page: int | None = None,
    count_only: bool = False,
) -> None:
    """List models page by page.

    Args:
        http: Client bound to the current context.
        presenter: Output target.
        page: Explicit page number. When given, exactly one table is printed;
            when None, page 1 is fetched and shown through the pagination flow.
        count_only: Print only the total count.
    """
    if page is not None and page < 1:
        raise InvalidArgumentError(f"page must be a positive number, got {page}")

    response = fetch_models(http, MODELS_PATH, {"page": page or 1})
    rows = model_rows(response)
    if not rows:
        presenter.notice(NO_MODELS_MESSAGE)
        return

    presenter.display_count("models", response.count)
    if count_only:
        return

    if page is not None:
        presenter.print_table(TABLE_HEADER, rows)
    else:
        presenter.paginate(TABLE_HEADER, rows)


def search_models(http: HTTPClient, presenter: Presenter, query: str) -> None:
    """Print every model matching a free-text query in a single table."""
    query = query.strip()
    if not query:
        raise InvalidArgumentError("[search term] isn't specified. Please enter a model name to search")

    response = fetch_models(http, MODELS_PATH, {"search": query, "pagesize": "all"})
    rows = model_rows(response)
    if not rows:
        presenter.notice(NO_MODELS_MESSAGE)
        return

    presenter.display_count("models", response.count)
    presenter.print_table(TABLE_HEADER, rows)


def view_model(
    http: HTTPClient,
    presenter: Presenter,
    name: str | None,
    output_format: str = "yaml",
) -> None:
    """Show one model in detail, prompting for a choice when the name is ambiguous."""
    output_format = (output_format or "").strip().lower()
    if output_format not in OUTPUT_FORMATS:
        raise OutputFormatError(
            f"output-format choice '{output_format}' is invalid. Please choose from [{'|'.join(OUTPUT_FORMATS)}]"
        )
    if not name or not name.strip():
        raise InvalidArgumentError("[model-name] isn't specified. Please enter a model name to view")

    name = name.strip()
    response = fetch_models(http, f"{MODELS_PATH}/{quote(name, safe='')}", {"pagesize": "all"})
    models = response.models
    if not models:
        presenter.notice(f"No model(s) found for the given name {name}")
        return

    if len(models) == 1:
        selected = models[0]
    else:
        selected = presenter.select_model(models)

    if output_format == "json":
        presenter.output_json(selected)
    else:
        presenter.output_yaml(selected)


def build_import_payload(source: str, register: bool = True) -> dict[str, Any]:
    """Request body for registering a model from a local file or a URL."""
    if source.startswith(("http://", "https://")):
        return {
            "importBody": {"url": source},
            "uploadType": "url",
            "register": register,
        }

    path = Path(source).expanduser()
    if not path.is_file():
        raise InvalidArgumentError(f"file {source} does not exist or is not a regular file")
    try:
        content = path.read_bytes()
    except OSError as e:
        raise InvalidArgumentError(f"unable to read {source}: {e}") from e

    return {
        "importBody": {
            "modelFile": base64.b64encode(content).decode("ascii"),
            "fileName": os.path.basename(path),
        },
        "uploadType": "file",
        "register": register,
    }


def import_model(http: HTTPClient, presenter: Presenter, source: str | None, register: bool = True) -> None:
    """Upload a model definition to the server's registry."""
    if not source:
        raise InvalidArgumentError("[file | URL] isn't specified. Use -f to pass a model file or URL")

    payload = build_import_payload(source, register=register)
    logger.info(f"Importing model from {source} ({payload['uploadType']})")
    try:
        result = http.post_json(REGISTER_PATH, payload)
    except APIError as e:
        logger.error(str(e))
        raise

    message = result.get("message") if isinstance(result, dict) else None
    presenter.success(str(message or "Model imported successfully"))
