from enum import StrEnum
from typing import Any, TypedDict, TypeVar

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from mage_sdk.errors import MageAPIError, MageDecodeError

T = TypeVar("T")


class EndpointGroup(StrEnum):
    GEO_EXTRACT = "geo_extract"
    DOC_CLASSIFY = "doc_classify"
    TEXT_MATCH = "text_match"
    DOC_CONTENT_EXTRACT = "doc_content_extract"
    DOC_EXTRACT = "doc_extract"
    OCR_CAPTCHA = "ocr_captcha"
    OCR_LICENSE = "ocr_license"
    OCR_STAMP = "ocr_stamp"
    OCR_BILL = "ocr_bill"
    OCR_TABLE = "ocr_table"
    OCR_TEMPLATE = "ocr_template"
    OCR_GENERAL = "ocr_general"
    CONTRACT = "contract"
    IDP_FLOW = "idp_flow"


class Credential(BaseModel):
    model_config = ConfigDict(frozen=True)

    public_key: str
    secret_key: str

    def __repr__(self) -> str:
        return f"Credential(public_key={self.public_key!r}, secret_key='***')"


SignedHeaders = TypedDict(
    "SignedHeaders",
    {
        "Api-Auth-nonce": str,
        "Api-Auth-pubkey": str,
        "Api-Auth-timestamp": str,
        "Api-Auth-sign": str,
        "Content-Type": str,
    },
)


class TextBody(TypedDict):
    text: str


class DocBody(TypedDict):
    doc: str


class TaskQueryBody(TypedDict):
    task_id: str


class FileBase64Body(TypedDict):
    file_base64: str


class ImageBase64Body(TypedDict):
    img_base64: str


class ImageListBody(TypedDict):
    img_base64: list[str]


class ContractCompareBody(TypedDict):
    file_base: str
    file_compare: str


class FlowFile(TypedDict):
    base64: str
    name: str


class FlowSubmitBody(TypedDict):
    file: FlowFile


class FlowQueryBody(TypedDict):
    task_id: str
    with_ocr_general: bool


RequestBody = (
    TextBody
    | DocBody
    | TaskQueryBody
    | FileBase64Body
    | ImageBase64Body
    | ImageListBody
    | ContractCompareBody
    | FlowSubmitBody
    | FlowQueryBody
)


class MageResponse(BaseModel):
    """Uniform response envelope returned by every endpoint.

    ``data`` is vendor-defined and passed through untouched. Use
    :meth:`data_as` to validate it against a caller-supplied type.
    """

    model_config = ConfigDict(extra="ignore")

    code: int
    message: str
    data: Any | None = None
    task_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.code == 0

    def raise_for_code(self) -> "MageResponse":
        if self.code != 0:
            raise MageAPIError(code=self.code, message=self.message, response=self)
        return self

    def data_as(self, type_: type[T]) -> T:
        try:
            return TypeAdapter(type_).validate_python(self.data)
        except ValidationError as exc:
            raise MageDecodeError(f"response data does not match {type_!r}") from exc
