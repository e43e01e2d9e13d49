from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class DocumentIntelligenceSettings(BaseModel):
    endpoint: str | None = Field(default=None, alias="Endpoint")
    key: str | None = Field(default=None, alias="Key")

    model_config = ConfigDict(populate_by_name=True)


class Settings(BaseSettings):
    # Azure Document Intelligence
    document_intelligence: DocumentIntelligenceSettings = Field(
        default_factory=DocumentIntelligenceSettings, alias="DocumentIntelligence"
    )

    # Output
    output_dir: str = Field(".", alias="OUTPUT_DIR")

    # Polling (seconds)
    poll_interval: float = Field(1.0, alias="POLL_INTERVAL")
    poll_timeout: float = Field(300.0, alias="POLL_TIMEOUT")

    # Observability
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    sdk_trace: bool = Field(True, alias="SDK_TRACE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        # Later files win, merged key by key
        json_file=("appsettings.json", "appsettings.Development.json"),
        json_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls, deep_merge=True),
            file_secret_settings,
        )

    @property
    def az_di_endpoint(self) -> str | None:
        return self.document_intelligence.endpoint

    @property
    def az_di_api_key(self) -> str | None:
        return self.document_intelligence.key
