from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

ReportFormat = Literal["txt", "json", "md"]


class ReportDescriptor(BaseModel):
    file_path: str
    file_url: str
    file_name: str
    file_size: int
    format: ReportFormat
    timestamp: str
