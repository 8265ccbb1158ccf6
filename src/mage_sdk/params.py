import base64
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from mage_sdk.errors import MageFileError, MageSerializationError
from mage_sdk.types import (
    ContractCompareBody,
    DocBody,
    FileBase64Body,
    FlowQueryBody,
    FlowSubmitBody,
    ImageBase64Body,
    ImageListBody,
    TaskQueryBody,
    TextBody,
)


def serialize(params: Mapping[str, Any]) -> bytes:
    try:
        return json.dumps(params, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise MageSerializationError(f"parameters are not JSON serializable: {exc}") from exc


def read_file_base64(path: str | Path) -> str:
    try:
        content = Path(path).read_bytes()
    except OSError as exc:
        raise MageFileError(str(path), exc.strerror or str(exc)) from exc
    return base64.b64encode(content).decode("ascii")


def text_body(text: str) -> TextBody:
    return {"text": text}


def doc_body(doc: str) -> DocBody:
    return {"doc": doc}


def task_query_body(task_id: str) -> TaskQueryBody:
    return {"task_id": task_id}


def file_body(path: str | Path) -> FileBase64Body:
    return {"file_base64": read_file_base64(path)}


def image_body(path: str | Path) -> ImageBase64Body:
    return {"img_base64": read_file_base64(path)}


def image_list_body(path: str | Path) -> ImageListBody:
    # table and general OCR take a one-element list instead of a bare string
    return {"img_base64": [read_file_base64(path)]}


def contract_compare_body(base_path: str | Path, compare_path: str | Path) -> ContractCompareBody:
    return {
        "file_base": read_file_base64(base_path),
        "file_compare": read_file_base64(compare_path),
    }


def flow_submit_body(path: str | Path, name: str | None = None) -> FlowSubmitBody:
    return {
        "file": {
            "base64": read_file_base64(path),
            "name": name if name is not None else Path(path).name,
        }
    }


def flow_query_body(task_id: str, with_ocr_general: bool = False) -> FlowQueryBody:
    return {"task_id": task_id, "with_ocr_general": with_ocr_general}
