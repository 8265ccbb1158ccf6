from pydantic_settings import BaseSettings, SettingsConfigDict

from mage_sdk.errors import MageConfigurationError
from mage_sdk.types import Credential, EndpointGroup

DEFAULT_BASE_URL = "https://mage.uibot.com.cn/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0


class MageSettings(BaseSettings):
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"

    geo_extract_public_key: str | None = None
    geo_extract_secret_key: str | None = None
    doc_classify_public_key: str | None = None
    doc_classify_secret_key: str | None = None
    text_match_public_key: str | None = None
    text_match_secret_key: str | None = None
    doc_content_extract_public_key: str | None = None
    doc_content_extract_secret_key: str | None = None
    doc_extract_public_key: str | None = None
    doc_extract_secret_key: str | None = None

    ocr_captcha_public_key: str | None = None
    ocr_captcha_secret_key: str | None = None
    ocr_license_public_key: str | None = None
    ocr_license_secret_key: str | None = None
    ocr_stamp_public_key: str | None = None
    ocr_stamp_secret_key: str | None = None
    ocr_bill_public_key: str | None = None
    ocr_bill_secret_key: str | None = None
    ocr_table_public_key: str | None = None
    ocr_table_secret_key: str | None = None
    ocr_template_public_key: str | None = None
    ocr_template_secret_key: str | None = None
    ocr_general_public_key: str | None = None
    ocr_general_secret_key: str | None = None

    contract_public_key: str | None = None
    contract_secret_key: str | None = None
    idp_flow_public_key: str | None = None
    idp_flow_secret_key: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="MAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def credentials(self) -> dict[EndpointGroup, Credential]:
        """Credential pairs for every group that has both keys configured.

        A group with only one of its two keys set is a configuration error.
        """
        result: dict[EndpointGroup, Credential] = {}
        for group in EndpointGroup:
            public_key = getattr(self, f"{group.value}_public_key")
            secret_key = getattr(self, f"{group.value}_secret_key")
            if public_key and secret_key:
                result[group] = Credential(public_key=public_key, secret_key=secret_key)
            elif public_key or secret_key:
                missing = "secret" if public_key else "public"
                env_name = f"MAGE_{group.value.upper()}_{missing.upper()}_KEY"
                raise MageConfigurationError(
                    f"endpoint group {group.value!r} has no {missing} key; set {env_name}"
                )
        return result
