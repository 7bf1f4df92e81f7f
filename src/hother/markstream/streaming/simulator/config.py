"""Configuration for simulated LLM streams."""

from pydantic import BaseModel, Field, model_validator


class StreamConfig(BaseModel):
    """Shape of a simulated network stream."""

    min_chunk_size: int = Field(default=1, ge=1, description="Smallest chunk in characters")
    max_chunk_size: int = Field(default=10, ge=1, description="Largest chunk in characters")
    base_delay: float = Field(default=0.0, ge=0, description="Delay before each chunk in seconds")
    jitter: float = Field(default=0.0, ge=0, description="Maximum random delay deviation")
    jitter_probability: float = Field(default=0.0, ge=0, le=1)
    stall_probability: float = Field(default=0.0, ge=0, le=1, description="Chance of a stall before a chunk")
    stall_duration: float = Field(default=0.0, ge=0)
    burst_probability: float = Field(default=0.0, ge=0, le=1, description="Chance of a burst of undelayed chunks")
    burst_size: int = Field(default=3, ge=1)
    seed: int | None = Field(default=None, description="Seed for reproducible chunking")

    @model_validator(mode="after")
    def _check_chunk_bounds(self) -> "StreamConfig":
        if self.min_chunk_size > self.max_chunk_size:
            raise ValueError("min_chunk_size must not exceed max_chunk_size")
        return self
