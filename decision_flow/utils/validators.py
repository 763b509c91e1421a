from urllib.parse import urlparse

from ..config.schemas import EditorConfig
from ..core.exceptions import ConfigurationError

def validate_config_dependencies(config: EditorConfig):
    """
    Performs post-load validation of the configuration to check for logical
    dependencies and inconsistencies.

    Args:
        config: The fully loaded EditorConfig object.

    Raises:
        ConfigurationError: If a validation check fails.
    """
    # 1. The HTTP store needs an absolute http(s) origin
    if config.store.backend == "http":
        parsed = urlparse(config.store.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"Store base URL '{config.store.base_url}' must be an absolute http(s) URL."
            )

    if config.store.timeout <= 0:
        raise ConfigurationError("Store 'timeout' must be positive.")
    if config.store.max_retries < 1:
        raise ConfigurationError("Store 'max_retries' must be at least 1.")

    # 2. Generated node ids must never collide with the placeholder
    prefix = config.editor.node_id_prefix
    if not prefix:
        raise ConfigurationError("Editor 'node_id_prefix' must not be empty.")
    suffix = config.placeholder.id[len(prefix):]
    if config.placeholder.id.startswith(prefix) and suffix.isdigit():
        raise ConfigurationError(
            f"Placeholder id '{config.placeholder.id}' can be generated as a node id."
        )

    # 3. Canvas used for random placement of new nodes
    if config.editor.canvas_width <= 0 or config.editor.canvas_height <= 0:
        raise ConfigurationError("Editor canvas dimensions must be positive.")

    return True
