# site_analyser/models.py
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    # Field names stay snake_case in Python, the JSON keys follow the public API.
    model_config = ConfigDict(populate_by_name=True)


class AnalysisRequest(BaseModel):
    url: Optional[str] = None


class ScoreSet(CamelModel):
    performance: int = Field(ge=0, le=100)
    accessibility: int = Field(ge=0, le=100)
    best_practices: int = Field(ge=0, le=100, alias="bestPractices")
    seo: int = Field(ge=0, le=100)
    url: str


class Issue(BaseModel):
    title: str
    description: str
    score: int = Field(ge=0, le=100)


class AuditResult(BaseModel):
    scores: ScoreSet
    issues: List[Issue] = []


class ScriptAnalysis(BaseModel):
    cdns: List[str] = []
    libraries: List[str] = []
    analytics: List[str] = []
    advertising: List[str] = []


class ServerInfo(CamelModel):
    server: str = "Unknown"
    powered_by: str = Field(default="Unknown", alias="poweredBy")
    content_type: str = Field(default="Unknown", alias="contentType")


class TechnicalSnapshot(CamelModel):
    technologies: List[str] = []
    meta: Dict[str, str] = {}
    scripts: List[str] = []
    script_analysis: ScriptAnalysis = Field(default_factory=ScriptAnalysis, alias="scriptAnalysis")
    server_info: ServerInfo = Field(default_factory=ServerInfo, alias="serverInfo")


class AnalysisReport(CamelModel):
    scores: ScoreSet
    technical_data: Optional[TechnicalSnapshot] = Field(default=None, alias="technicalData")
    ai_report: str = Field(alias="aiReport")


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    timestamp: str
    uptime: float
