from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class StoreConfig(BaseModel):
    """Configuration for the remote flow store."""
    backend: str = "http"
    base_url: str = "http://localhost:5000"
    timeout: float = 30.0
    max_retries: int = 3

    @field_validator('base_url')
    def strip_trailing_slash(cls, v):
        return v.rstrip('/')

    @field_validator('backend')
    def validate_backend(cls, v):
        if v not in ("http", "memory"):
            raise ValueError(f"Unknown store backend: {v}")
        return v


class EditorDefaults(BaseModel):
    """Defaults applied to newly added question nodes."""
    default_label: str = "New Question?"
    default_responses: List[str] = Field(default_factory=lambda: ["Yes", "No", "Other"])
    node_id_prefix: str = "node_"
    canvas_width: float = 400.0
    canvas_height: float = 400.0


class PlaceholderConfig(BaseModel):
    """The node shown when a flow has no questions yet."""
    id: str = "start-node"
    label: str = "Start your flow"
    x: float = 300.0
    y: float = 200.0


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file_path: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "7 days"


class EditorConfig(BaseModel):
    """Root configuration for the editor."""
    store: StoreConfig = StoreConfig()
    editor: EditorDefaults = EditorDefaults()
    placeholder: PlaceholderConfig = PlaceholderConfig()
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def default(cls):
        """Get default configuration."""
        return cls(
            store=StoreConfig(),
            editor=EditorDefaults(),
            placeholder=PlaceholderConfig(),
            logging=LoggingConfig()
        )
