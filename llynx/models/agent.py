"""
Agent preset models.

An agent bundles a base model, an optional system prompt and the sampling
options sent to the local inference server.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SamplingOptions(BaseModel):
    """Sampling options forwarded as the upstream `options` record."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    mirostat: int = Field(0, ge=0, le=2, description="0 = disabled, 1 = Mirostat, 2 = Mirostat 2.0")
    mirostat_eta: float = Field(0.1, ge=0, le=1, allow_inf_nan=False)
    mirostat_tau: float = Field(5.0, ge=0, le=10, allow_inf_nan=False)
    num_ctx: int = Field(2048, gt=0, description="Context window size")
    repeat_last_n: int = Field(64, ge=-1, description="Repeat-penalty lookback, -1 = num_ctx")
    repeat_penalty: float = Field(1.1, ge=0, le=3, allow_inf_nan=False)
    temperature: float = Field(0.8, ge=0, le=2, allow_inf_nan=False)
    seed: int = 0
    num_predict: int = Field(-1, ge=-1, description="Max tokens, -1 = unlimited")
    top_k: int = Field(40, ge=0, le=10000)
    top_p: float = Field(0.9, ge=0, le=1, allow_inf_nan=False)
    min_p: float = Field(0.0, ge=0, le=1, allow_inf_nan=False)

    @field_validator(
        "mirostat", "num_ctx", "repeat_last_n", "seed", "num_predict", "top_k", mode="before"
    )
    @classmethod
    def _truncate_integral(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("must be a number")
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError("must be a finite number")
            return math.trunc(value)
        return value

    def to_upstream(self) -> dict[str, Any]:
        """Options record in the local inference server's naming."""
        return self.model_dump()


class AgentBase(BaseModel):
    """Base agent fields."""

    name: str = Field(..., min_length=1, max_length=80)
    base_model: str = Field(..., min_length=1, max_length=200)
    system_prompt: Optional[str] = Field(None, description="Overrides the default system prompt")
    settings: SamplingOptions = Field(default_factory=SamplingOptions)


class AgentCreate(AgentBase):
    """Schema for creating an agent."""

    @field_validator("name", "base_model", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class Agent(AgentBase):
    """Agent model."""

    id: str
    user_id: str = Field(..., description="Owner user ID")
    created_at: datetime
    updated_at: datetime
