"""Configuration models."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RuntimeConfig(BaseModel):
    """Container runtime configuration."""
    binary: str = Field(default="docker")
    command_timeout: int = Field(default=600, ge=1)


class RetryConfig(BaseModel):
    """Retry budgets for flaky runtime operations."""
    pull_attempts: int = Field(default=3, ge=1)
    start_attempts: int = Field(default=3, ge=1)
    stop_timeout: int = Field(default=30, ge=0)


class PortConfig(BaseModel):
    """Port conflict resolution configuration."""
    auto_assign: bool = Field(default=True)
    max_port: int = Field(default=65535, ge=1, le=65535)
    increment: int = Field(default=1, ge=1)
    host: str = Field(default="localhost")


class UDSConfig(BaseModel):
    """Main configuration model."""
    log_level: str = Field(default="INFO")
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    ports: PortConfig = Field(default_factory=PortConfig)
    
    model_config = ConfigDict(extra="ignore")
    
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()
