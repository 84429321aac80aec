"""Project setup and environment check models"""

from typing import Optional

from pydantic import BaseModel


class EnvironmentStatus(BaseModel):
    """What the current shell provides for talking to Vertex AI"""

    project_id: Optional[str] = None
    credentials_path: Optional[str] = None
    credentials_file_exists: bool = False
    access_token_available: bool = False
    access_token_error: Optional[str] = None

    @property
    def ready(self) -> bool:
        """A project is configured and a bearer token can be obtained"""
        return bool(self.project_id) and self.access_token_available
