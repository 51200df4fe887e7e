"""
Pydantic models for validating structured Gemini output.

The Gemini-side schema lives in config.TableExtractionSchema; this model checks
what actually came back before it is turned into CSV.
"""
from typing import Any, List

from pydantic import BaseModel, Field


class TableResponse(BaseModel):
    """Response of a table extraction request.

    { "table": [[cell, ...], ...] }
    """
    table: List[List[Any]] = Field(
        description="Extracted table rows; the first row is the header"
    )
