"""Pydantic models shared by the server session and the stream client."""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ProviderOverride(BaseModel):
    """Caller supplied backend settings; never persisted server-side."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    provider: Optional[str] = None
    api_key: Optional[str] = Field(default=None, alias="apiKey")
    model_id: Optional[str] = Field(default=None, alias="modelId")
    base_url: Optional[str] = Field(default=None, alias="baseUrl")
    use_default: bool = Field(default=True, alias="useDefault")


class EffectiveProviderConfig(BaseModel):
    """Fully resolved connection parameters for exactly one backend call."""

    base_url: Optional[str] = None
    api_key: str
    model: str
    temperature: float
    max_tokens: int
    provider: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return bool(self.api_key)


class BackendRequestPlan(BaseModel):
    """Per-provider negotiated request parameters."""

    system_prompt: str
    response_format: Dict[str, Any]
    max_tokens: int
    temperature: float
    use_json_schema: bool


class AnalysisRequest(BaseModel):
    """Validated inbound analysis request."""

    model_config = ConfigDict(protected_namespaces=())

    mode: Literal["text", "file"]
    text_content: Optional[str] = None
    file_blob: Optional[bytes] = None
    file_media_type: Optional[str] = None
    file_name: Optional[str] = None
    options: Dict[str, bool] = Field(default_factory=dict)
    model_override: Optional[ProviderOverride] = None

    @property
    def has_image(self) -> bool:
        return bool(self.file_blob) and (self.file_media_type or "").startswith("image/")


class Dimension(BaseModel):
    """One evaluation axis."""

    name: str
    score: int = Field(ge=1, le=5)
    description: str = ""


class MermaidDiagram(BaseModel):
    type: str
    title: str
    code: str


class AnalysisResult(BaseModel):
    """Merged analysis result handed to presentation and export code.

    Field names follow the wire payload produced by the backend.
    """

    overallScore: float = 0.0
    overallAssessment: str = "No overall assessment"
    title: str = "Analysis result"
    ratingTag: str = "Unknown"
    dimensions: List[Dimension] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    comment: Optional[str] = None
    structural_analysis: List[str] = Field(default_factory=list)
    mermaid_diagrams: List[MermaidDiagram] = Field(default_factory=list)


# =============================================================================
# STREAM FRAMES
# =============================================================================


class HeartbeatFrame(BaseModel):
    type: Literal["heartbeat"] = "heartbeat"
    timestamp: int


class ProgressFrame(BaseModel):
    type: Literal["progress"] = "progress"
    message: str


class ResultFrame(BaseModel):
    type: Literal["result"] = "result"
    success: Literal[True] = True
    data: Dict[str, Any]


class ErrorFrame(BaseModel):
    type: Literal["error"] = "error"
    success: Literal[False] = False
    error: str


StreamFrame = Annotated[
    Union[HeartbeatFrame, ProgressFrame, ResultFrame, ErrorFrame],
    Field(discriminator="type"),
]

TERMINAL_FRAME_TYPES = (ResultFrame, ErrorFrame)

_FRAME_ADAPTER: TypeAdapter = TypeAdapter(StreamFrame)


def parse_frame(line: Union[str, bytes]) -> Union[HeartbeatFrame, ProgressFrame, ResultFrame, ErrorFrame]:
    """Parse one wire line; unknown ``type`` tags raise ``pydantic.ValidationError``."""
    return _FRAME_ADAPTER.validate_json(line)


def encode_frame(frame: BaseModel) -> bytes:
    """Serialize a frame as one UTF-8, newline terminated line."""
    return (frame.model_dump_json() + "\n").encode("utf-8")


def is_terminal(frame: BaseModel) -> bool:
    return isinstance(frame, TERMINAL_FRAME_TYPES)


__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "BackendRequestPlan",
    "Dimension",
    "EffectiveProviderConfig",
    "ErrorFrame",
    "HeartbeatFrame",
    "MermaidDiagram",
    "ProgressFrame",
    "ProviderOverride",
    "ResultFrame",
    "StreamFrame",
    "encode_frame",
    "is_terminal",
    "parse_frame",
]
