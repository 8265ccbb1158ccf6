import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path
from time import perf_counter
from typing import Any

import httpx
from pydantic import ValidationError

from mage_sdk import params
from mage_sdk.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, MageSettings
from mage_sdk.errors import (
    MageConfigurationError,
    MageDecodeError,
    MageError,
    MageHTTPStatusError,
    MageTimeoutError,
    MageTransportError,
)
from mage_sdk.signer import sign_headers
from mage_sdk.types import Credential, EndpointGroup, MageResponse, RequestBody, SignedHeaders

logger = logging.getLogger("mage.http")

FilePath = str | Path


class _BaseMageClient:
    def __init__(
        self,
        *,
        credentials: Mapping[EndpointGroup, Credential],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._credentials = dict(credentials)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _prepare(
        self, path: str, body: Mapping[str, Any], group: EndpointGroup
    ) -> tuple[str, bytes, SignedHeaders]:
        credential = self._credentials.get(group)
        if credential is None:
            raise MageConfigurationError(f"no credential configured for endpoint group {group.value!r}")
        content = params.serialize(body)
        return self._url(path), content, sign_headers(credential)

    def _decode(self, path: str, group: EndpointGroup, response: httpx.Response, start: float) -> MageResponse:
        if response.is_error:
            try:
                envelope = MageResponse.model_validate_json(response.content)
            except ValidationError:
                envelope = None
            raise MageHTTPStatusError(path, response.status_code, response.text, response=envelope)
        try:
            result = MageResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise MageDecodeError(f"{path}: malformed response envelope") from exc

        logger.info(
            "mage_request",
            extra={
                "event_name": "mage_request",
                "endpoint": path,
                "endpoint_group": group.value,
                "status": response.status_code,
                "code": result.code,
                "task_id": result.task_id,
                "latency_ms": round((perf_counter() - start) * 1000, 2),
            },
        )
        return result

    def _log_failure(self, path: str, group: EndpointGroup, start: float) -> None:
        logger.warning(
            "mage_request_failed",
            extra={
                "event_name": "mage_request_failed",
                "endpoint": path,
                "endpoint_group": group.value,
                "latency_ms": round((perf_counter() - start) * 1000, 2),
            },
            exc_info=True,
        )


class MageClient(_BaseMageClient):
    """Synchronous client; every method performs exactly one signed POST."""

    def __init__(
        self,
        *,
        credentials: Mapping[EndpointGroup, Credential],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(credentials=credentials, base_url=base_url, timeout=timeout)
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: MageSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> "MageClient":
        settings = settings or MageSettings()
        return cls(
            credentials=settings.credentials(),
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    def _post(self, path: str, body: RequestBody, group: EndpointGroup) -> MageResponse:
        start = perf_counter()
        try:
            url, content, headers = self._prepare(path, body, group)
            try:
                with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                    response = client.post(url, content=content, headers=dict(headers))
            except httpx.TimeoutException as exc:
                raise MageTimeoutError(path, "request timed out") from exc
            except httpx.RequestError as exc:
                raise MageTransportError(path, str(exc) or type(exc).__name__) from exc
            return self._decode(path, group, response, start)
        except MageError:
            self._log_failure(path, group, start)
            raise

    # NLP

    def normalize_address(self, address: str) -> MageResponse:
        return self._post("/mage/nlp/geoextract", params.text_body(address), EndpointGroup.GEO_EXTRACT)

    def classify_document(self, doc: str) -> MageResponse:
        return self._post("/document/classify", params.doc_body(doc), EndpointGroup.DOC_CLASSIFY)

    def match_text(self, text: str) -> MageResponse:
        return self._post("/mage/nlp/textmatch", params.text_body(text), EndpointGroup.TEXT_MATCH)

    def extract_document_info(self, doc: str) -> MageResponse:
        return self._post("/document/extract", params.doc_body(doc), EndpointGroup.DOC_CONTENT_EXTRACT)

    def submit_document(self, path: FilePath) -> MageResponse:
        """Start a document extraction task; the response carries ``task_id``."""
        return self._post("/mage/nlp/docextract/create", params.file_body(path), EndpointGroup.DOC_EXTRACT)

    def query_document(self, task_id: str) -> MageResponse:
        return self._post(
            "/mage/nlp/docextract/query", params.task_query_body(task_id), EndpointGroup.DOC_EXTRACT
        )

    # OCR

    def ocr_captcha(self, path: FilePath) -> MageResponse:
        return self._post("/document/ocr/verification", params.image_body(path), EndpointGroup.OCR_CAPTCHA)

    def ocr_license(self, path: FilePath) -> MageResponse:
        return self._post("/document/ocr/license", params.image_body(path), EndpointGroup.OCR_LICENSE)

    def ocr_stamp(self, path: FilePath) -> MageResponse:
        return self._post("/document/ocr/stamp", params.image_body(path), EndpointGroup.OCR_STAMP)

    def ocr_bill(self, path: FilePath) -> MageResponse:
        return self._post("/document/ocr/bills", params.image_body(path), EndpointGroup.OCR_BILL)

    def ocr_table(self, path: FilePath) -> MageResponse:
        return self._post("/document/ocr/table", params.image_list_body(path), EndpointGroup.OCR_TABLE)

    def ocr_template(self, path: FilePath) -> MageResponse:
        return self._post("/document/ocr/template", params.image_body(path), EndpointGroup.OCR_TEMPLATE)

    def ocr_general(self, path: FilePath) -> MageResponse:
        return self._post("/document/ocr/general", params.image_list_body(path), EndpointGroup.OCR_GENERAL)

    # Contract

    def submit_contract(self, base_path: FilePath, compare_path: FilePath) -> MageResponse:
        return self._post(
            "/mage/solution/contract/compare",
            params.contract_compare_body(base_path, compare_path),
            EndpointGroup.CONTRACT,
        )

    def query_contract(self, task_id: str) -> MageResponse:
        return self._post(
            "/mage/solution/contract/detail", params.task_query_body(task_id), EndpointGroup.CONTRACT
        )

    def download_contract(self, task_id: str) -> MageResponse:
        """Fetch download links for the files of a finished comparison."""
        return self._post(
            "/mage/solution/contract/files", params.task_query_body(task_id), EndpointGroup.CONTRACT
        )

    # IDP flow

    def submit_flow(self, path: FilePath, name: str | None = None) -> MageResponse:
        return self._post(
            "/mage/idp/flow/task/create", params.flow_submit_body(path, name), EndpointGroup.IDP_FLOW
        )

    def query_flow(self, task_id: str, with_ocr_general: bool = False) -> MageResponse:
        return self._post(
            "/mage/idp/flow/task/query",
            params.flow_query_body(task_id, with_ocr_general),
            EndpointGroup.IDP_FLOW,
        )


class MageAsyncClient(_BaseMageClient):
    """Async twin of :class:`MageClient`.

    File adapters read and encode their inputs in a worker thread.
    """

    def __init__(
        self,
        *,
        credentials: Mapping[EndpointGroup, Credential],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(credentials=credentials, base_url=base_url, timeout=timeout)
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: MageSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "MageAsyncClient":
        settings = settings or MageSettings()
        return cls(
            credentials=settings.credentials(),
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    async def _post(self, path: str, body: RequestBody, group: EndpointGroup) -> MageResponse:
        start = perf_counter()
        try:
            url, content, headers = self._prepare(path, body, group)
            try:
                async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                    response = await client.post(url, content=content, headers=dict(headers))
            except httpx.TimeoutException as exc:
                raise MageTimeoutError(path, "request timed out") from exc
            except httpx.RequestError as exc:
                raise MageTransportError(path, str(exc) or type(exc).__name__) from exc
            return self._decode(path, group, response, start)
        except MageError:
            self._log_failure(path, group, start)
            raise

    async def normalize_address(self, address: str) -> MageResponse:
        return await self._post("/mage/nlp/geoextract", params.text_body(address), EndpointGroup.GEO_EXTRACT)

    async def classify_document(self, doc: str) -> MageResponse:
        return await self._post("/document/classify", params.doc_body(doc), EndpointGroup.DOC_CLASSIFY)

    async def match_text(self, text: str) -> MageResponse:
        return await self._post("/mage/nlp/textmatch", params.text_body(text), EndpointGroup.TEXT_MATCH)

    async def extract_document_info(self, doc: str) -> MageResponse:
        return await self._post("/document/extract", params.doc_body(doc), EndpointGroup.DOC_CONTENT_EXTRACT)

    async def submit_document(self, path: FilePath) -> MageResponse:
        body = await asyncio.to_thread(params.file_body, path)
        return await self._post("/mage/nlp/docextract/create", body, EndpointGroup.DOC_EXTRACT)

    async def query_document(self, task_id: str) -> MageResponse:
        return await self._post(
            "/mage/nlp/docextract/query", params.task_query_body(task_id), EndpointGroup.DOC_EXTRACT
        )

    async def ocr_captcha(self, path: FilePath) -> MageResponse:
        body = await asyncio.to_thread(params.image_body, path)
        return await self._post("/document/ocr/verification", body, EndpointGroup.OCR_CAPTCHA)

    async def ocr_license(self, path: FilePath) -> MageResponse:
        body = await asyncio.to_thread(params.image_body, path)
        return await self._post("/document/ocr/license", body, EndpointGroup.OCR_LICENSE)

    async def ocr_stamp(self, path: FilePath) -> MageResponse:
        body = await asyncio.to_thread(params.image_body, path)
        return await self._post("/document/ocr/stamp", body, EndpointGroup.OCR_STAMP)

    async def ocr_bill(self, path: FilePath) -> MageResponse:
        body = await asyncio.to_thread(params.image_body, path)
        return await self._post("/document/ocr/bills", body, EndpointGroup.OCR_BILL)

    async def ocr_table(self, path: FilePath) -> MageResponse:
        body = await asyncio.to_thread(params.image_list_body, path)
        return await self._post("/document/ocr/table", body, EndpointGroup.OCR_TABLE)

    async def ocr_template(self, path: FilePath) -> MageResponse:
        body = await asyncio.to_thread(params.image_body, path)
        return await self._post("/document/ocr/template", body, EndpointGroup.OCR_TEMPLATE)

    async def ocr_general(self, path: FilePath) -> MageResponse:
        body = await asyncio.to_thread(params.image_list_body, path)
        return await self._post("/document/ocr/general", body, EndpointGroup.OCR_GENERAL)

    async def submit_contract(self, base_path: FilePath, compare_path: FilePath) -> MageResponse:
        body = await asyncio.to_thread(params.contract_compare_body, base_path, compare_path)
        return await self._post("/mage/solution/contract/compare", body, EndpointGroup.CONTRACT)

    async def query_contract(self, task_id: str) -> MageResponse:
        return await self._post(
            "/mage/solution/contract/detail", params.task_query_body(task_id), EndpointGroup.CONTRACT
        )

    async def download_contract(self, task_id: str) -> MageResponse:
        return await self._post(
            "/mage/solution/contract/files", params.task_query_body(task_id), EndpointGroup.CONTRACT
        )

    async def submit_flow(self, path: FilePath, name: str | None = None) -> MageResponse:
        body = await asyncio.to_thread(params.flow_submit_body, path, name)
        return await self._post("/mage/idp/flow/task/create", body, EndpointGroup.IDP_FLOW)

    async def query_flow(self, task_id: str, with_ocr_general: bool = False) -> MageResponse:
        return await self._post(
            "/mage/idp/flow/task/query",
            params.flow_query_body(task_id, with_ocr_general),
            EndpointGroup.IDP_FLOW,
        )
