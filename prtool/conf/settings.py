from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .github import GitHubSettings


class Settings(GitHubSettings):
    model_config = SettingsConfigDict(env_prefix="PRTOOL_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    project_name: str = "prtool"

    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL of the Ollama server used by the ollama summarizer",
    )
    default_config_path: str = Field(
        default="~/.prtool.yaml",
        description="Configuration file read when --config is not given",
    )
