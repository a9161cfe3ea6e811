from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

AnalysisType = Literal["clothing", "activity", "health"]
RiskLevel = Literal["low", "medium", "high"]


class ClothingAdvice(BaseModel):
    main: str
    items: list[str] = Field(default_factory=list)
    extras: list[str] = Field(default_factory=list)


class ActivityAdvice(BaseModel):
    suitable: list[str] = Field(default_factory=list)
    avoid: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)


class HealthAdvice(BaseModel):
    warnings: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
    risk_level: RiskLevel = "low"


class WeatherAnalysis(BaseModel):
    type: AnalysisType
    city: str
    temperature: float
    condition: str
    summary: str
    clothing: ClothingAdvice | None = None
    activity: ActivityAdvice | None = None
    health: HealthAdvice | None = None
    timestamp: str
