"""Vertex AI generateContent request models

Typed representation of the request body so prompts, generation settings and
safety settings can be customized without hand-building dictionaries.
Serialize with ``model_dump(by_alias=True, exclude_none=True)``.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_PROMPT = (
    "Read this file and return all of its data in JSON format. Choose "
    "meaningful keys and include a field with an accuracy score. Contracts "
    "may contain information about different people, such as the address of "
    "a company or of an individual who signed the contract; keep those "
    "separated."
)

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a data extractor specializing in insurance-related documents. "
    "You are an expert at extracting all data which can be extracted from any "
    "PDF, including data accessible through Optical Character Recognition (OCR)."
)

HARM_CATEGORIES = [
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_HARASSMENT",
]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InlineData(_CamelModel):
    mime_type: str
    data: str


class TextPart(_CamelModel):
    text: str


class InlineDataPart(_CamelModel):
    inline_data: InlineData


class ContentItem(_CamelModel):
    role: str = "user"
    parts: List[Union[InlineDataPart, TextPart]]


class SystemInstruction(_CamelModel):
    parts: List[TextPart]


class GenerationConfig(_CamelModel):
    response_modalities: List[str] = Field(default_factory=lambda: ["TEXT"])
    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=8192, ge=1)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)


class SafetySetting(_CamelModel):
    category: str
    threshold: str = "OFF"


class GenerateContentRequest(_CamelModel):
    """Complete request body for the generateContent endpoint"""

    contents: List[ContentItem]
    system_instruction: Optional[SystemInstruction] = None
    generation_config: GenerationConfig = Field(default_factory=GenerationConfig)
    safety_settings: List[SafetySetting] = Field(default_factory=list)

    @classmethod
    def for_document(
        cls,
        document_base64: str,
        prompt: str = DEFAULT_PROMPT,
        system_instruction: Optional[str] = DEFAULT_SYSTEM_INSTRUCTION,
        mime_type: str = "application/pdf",
    ) -> "GenerateContentRequest":
        """Build a request that sends one inline document plus a prompt."""
        return cls(
            contents=[
                ContentItem(
                    parts=[
                        InlineDataPart(
                            inline_data=InlineData(
                                mime_type=mime_type, data=document_base64
                            )
                        ),
                        TextPart(text=prompt),
                    ]
                )
            ],
            system_instruction=(
                SystemInstruction(parts=[TextPart(text=system_instruction)])
                if system_instruction
                else None
            ),
            safety_settings=[SafetySetting(category=c) for c in HARM_CATEGORIES],
        )

    @classmethod
    def for_text(cls, prompt: str) -> "GenerateContentRequest":
        """Build a text-only request, used to check the endpoint is reachable."""
        return cls(contents=[ContentItem(parts=[TextPart(text=prompt)])])

    def with_temperature(self, temperature: float) -> "GenerateContentRequest":
        self.generation_config.temperature = temperature
        return self

    def with_max_tokens(self, max_tokens: int) -> "GenerateContentRequest":
        self.generation_config.max_output_tokens = max_tokens
        return self

    def with_top_p(self, top_p: float) -> "GenerateContentRequest":
        self.generation_config.top_p = top_p
        return self

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class VertexModel(_CamelModel):
    """One entry of ``gcloud ai models list --format=json``"""

    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    @property
    def model_id(self) -> str:
        return self.name.rsplit("/", 1)[-1]
