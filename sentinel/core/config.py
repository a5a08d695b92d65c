from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "ADGSentinel Report"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "server"

    # Report routing
    INFOSEC_EMAIL: str = "infosec@company.com"
    SPAM_REPORT_EMAIL: str = "spam-report@company.com"
    SUPPORT_EMAIL: str = "support@company.com"

    # Simulated phishing platform
    GOPHISH_URL: str = "https://saskaatoon.ca"
    GOPHISH_LISTENER_PORT: int = 3333
    GOPHISH_CUSTOM_HEADER: str = "X-SENTINEL-AJSMN"

    # Host interaction deadline, applied to every mail host call
    HOST_CALL_TIMEOUT_SECONDS: float = 30.0

    # Server bootstrap
    PORT: int = 3000
    BASE_URL: str = "https://localhost:3000" # public URL the manifest points hosts at
    ASSET_DIR: str = "public"
    CERT_DIR: str = "certs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


settings = Settings()


class AddinConfig(BaseModel):
    """
    Explicit configuration handed to the report pipeline at construction.
    Mirrors the payload served at /api/config plus the pipeline-only settings.
    """
    infosec_email: str = "infosec@company.com"
    spam_report_email: str = "spam-report@company.com"
    support_email: str = "support@company.com"
    gophish_url: str = "https://saskaatoon.ca"
    version: str = "1.0.0"
    product_name: str = "ADGSentinel Report"
    gophish_listener_port: int = 3333
    gophish_custom_header: str = "X-SENTINEL-AJSMN"
    host_call_timeout: float = 30.0

    @classmethod
    def from_settings(cls, source: Settings = None) -> "AddinConfig":
        source = source or settings
        return cls(
            infosec_email=source.INFOSEC_EMAIL,
            spam_report_email=source.SPAM_REPORT_EMAIL,
            support_email=source.SUPPORT_EMAIL,
            gophish_url=source.GOPHISH_URL,
            version=source.VERSION,
            product_name=source.PROJECT_NAME,
            gophish_listener_port=source.GOPHISH_LISTENER_PORT,
            gophish_custom_header=source.GOPHISH_CUSTOM_HEADER,
            host_call_timeout=source.HOST_CALL_TIMEOUT_SECONDS,
        )

    def to_payload(self) -> dict:
        """The public /api/config payload (camelCase, no pipeline-only keys)."""
        return {
            "infosecEmail": self.infosec_email,
            "spamReportEmail": self.spam_report_email,
            "supportEmail": self.support_email,
            "gophishUrl": self.gophish_url,
            "version": self.version,
        }

    def merge_payload(self, payload: dict) -> "AddinConfig":
        """Overlay a remote /api/config payload; absent or empty keys keep their current value."""
        mapping = {
            "infosecEmail": "infosec_email",
            "spamReportEmail": "spam_report_email",
            "supportEmail": "support_email",
            "gophishUrl": "gophish_url",
            "version": "version",
        }
        update = {}
        for key, field in mapping.items():
            value = payload.get(key)
            if isinstance(value, str) and value:
                update[field] = value
        return self.model_copy(update=update)
