from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from app.llm.config import LLMProvider

_CREDENTIAL_FIELDS = {
    LLMProvider.GEMINI: "gemini_api_key",
    LLMProvider.OPENAI: "openai_api_key",
    LLMProvider.ANTHROPIC: "anthropic_api_key",
}


class Settings(BaseSettings):
    model_config = {"env_prefix": "SA_", "env_file": ".env", "env_file_encoding": "utf-8"}

    llm_provider: LLMProvider = Field(default=LLMProvider.GEMINI)
    llm_model: str = Field(default="gemini-2.5-flash", min_length=1)
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    gemini_api_key: str = Field(default="")
    openai_api_key: str = Field(default="")
    anthropic_api_key: str = Field(default="")
    use_response_schema: bool = Field(default=True)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    cors_origins: str = Field(default="http://localhost:3000")
    max_sessions: int = Field(default=1000, ge=1)

    @model_validator(mode="after")
    def _require_provider_credential(self) -> "Settings":
        field_name = _CREDENTIAL_FIELDS[self.llm_provider]
        if not getattr(self, field_name).strip():
            env_name = f"{self.model_config['env_prefix']}{field_name.upper()}"
            raise ValueError(f"{env_name} must be set when llm_provider is '{self.llm_provider}'")
        return self

    @property
    def api_key(self) -> str:
        return getattr(self, _CREDENTIAL_FIELDS[self.llm_provider])

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
