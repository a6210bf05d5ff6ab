from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalysisResult(_CamelModel):
    """Categorical voice metrics plus derived 0-100 ratings for one recording."""

    tone: str
    speed: str
    clarity: str
    volume: str
    pauses: str
    modulation: str
    ratings: Dict[str, int]
    suggestions: List[str] = Field(default_factory=list)
    confidence_score: int
    duration: float
    timestamp: str


class Recording(_CamelModel):
    id: str
    analysis: AnalysisResult
    timestamp: str


class Session(_CamelModel):
    id: str
    recordings: List[Recording] = Field(default_factory=list)
    created_at: str


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class AnalyzeVoiceResponse(_CamelModel):
    success: bool = True
    analysis: AnalysisResult
    session_id: str


class MentorChatRequest(_CamelModel):
    message: Optional[str] = None
    session_id: Optional[str] = None


class MentorChatResponse(_CamelModel):
    success: bool = True
    response: str


class ErrorResponse(BaseModel):
    error: str
