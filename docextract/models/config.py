from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from docextract.models.batch import BatchConfig
from docextract.models.queue import QueueConfig
from docextract.models.vertex import DEFAULT_PROMPT, DEFAULT_SYSTEM_INSTRUCTION


class VertexSettings(BaseModel):
    """Remote inference endpoint settings"""

    project_id: str = Field(..., min_length=1)
    location: str = Field(default="us-central1", pattern=r"^[a-z0-9-]+$")
    model_id: str = Field(default="gemini-2.0-flash-exp", min_length=1)
    prompt: str = DEFAULT_PROMPT
    system_instruction: Optional[str] = DEFAULT_SYSTEM_INSTRUCTION
    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=8192, ge=1, le=65536)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    request_timeout_seconds: float = Field(default=300.0, gt=0.0, le=3600.0)
    access_token: Optional[str] = Field(
        default=None,
        description="Static bearer token; fetched from gcloud when unset",
    )

    @field_validator("project_id")
    @classmethod
    def validate_project_id(cls, v: str) -> str:
        """Reject unsubstituted ${VAR} placeholders"""
        if v.startswith("${") or v in ["YOUR_PROJECT_ID", "PLACEHOLDER"]:
            raise ValueError(
                "project_id must be set, e.g. via VERTEX_AI_PROJECT_ID"
            )
        return v

    @property
    def endpoint(self) -> str:
        return (
            f"https://{self.location}-aiplatform.googleapis.com/v1/projects/"
            f"{self.project_id}/locations/{self.location}/publishers/google/"
            f"models/{self.model_id}:generateContent"
        )


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = False


class AppConfig(BaseModel):
    """Top-level configuration file model"""

    vertex: VertexSettings
    queue: QueueConfig = Field(default_factory=QueueConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
