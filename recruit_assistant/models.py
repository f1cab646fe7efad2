from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict

class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    thread_id: Optional[str] = Field(default=None, alias="threadId")

class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    thread_id: str = Field(alias="threadId")
    scroll_to_form: bool = Field(alias="scrollToForm")
    cached: bool
    success: bool = True

class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    success: bool = False

class QuestionCount(BaseModel):
    question: str
    count: int
    category: str
    icon: str

class AnalyticsStats(BaseModel):
    totalQuestions: int
    uniqueQuestions: int
    mostPopularCount: int
    categories: Dict[str, int]

class AnalyticsResponse(BaseModel):
    success: bool = True
    stats: AnalyticsStats
    questions: List[QuestionCount]
    timestamp: str

class ClearAnalyticsResponse(BaseModel):
    success: bool = True
    message: str
