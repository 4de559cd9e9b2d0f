"""Router configuration.

One frozen dataclass per router. Values are validated once, at construction,
so a bad limit fails before the first navigation.
"""

from dataclasses import dataclass

from wren.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(max_redirects=10, stack_mode=True)
    """

    # Redirects
    max_redirects: int = 50

    # History
    stack_mode: bool = False  # Treat history as a stack (back instead of push)
    history_storage_key: str = "rhistory"  # Session storage key for stack mode

    # Outlets
    outlet_tag: str = "div"
    outlet_attribute: str = "data-wren-outlet"
    static_attribute: str = "data-static"  # Set on pre-rendered outlets
    keep_alive_default_size: int = 10

    # Soft failures
    not_found_text: str = "Route not found: {path}"

    def __post_init__(self) -> None:
        if self.max_redirects < 0:
            msg = f"max_redirects must be >= 0, got {self.max_redirects}"
            raise ConfigurationError(msg)
        if self.keep_alive_default_size < 1:
            msg = f"keep_alive_default_size must be >= 1, got {self.keep_alive_default_size}"
            raise ConfigurationError(msg)
