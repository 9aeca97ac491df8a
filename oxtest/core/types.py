"""
Core data models and types for the OXTest command language.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)


class CommandType(str, Enum):
    """Canonical OXTest command names."""

    # Navigation
    NAVIGATE = "navigate"
    GO_BACK = "goBack"
    GO_FORWARD = "goForward"
    RELOAD = "reload"
    # Interaction
    CLICK = "click"
    FILL = "fill"
    TYPE = "type"
    PRESS = "press"
    CHECK = "check"
    UNCHECK = "uncheck"
    SELECT_OPTION = "selectOption"
    HOVER = "hover"
    FOCUS = "focus"
    BLUR = "blur"
    CLEAR = "clear"
    # Assertions
    ASSERT_VISIBLE = "assertVisible"
    ASSERT_HIDDEN = "assertHidden"
    ASSERT_TEXT = "assertText"
    ASSERT_VALUE = "assertValue"
    ASSERT_ENABLED = "assertEnabled"
    ASSERT_DISABLED = "assertDisabled"
    ASSERT_CHECKED = "assertChecked"
    ASSERT_UNCHECKED = "assertUnchecked"
    ASSERT_URL = "assertUrl"
    ASSERT_TITLE = "assertTitle"
    # Utility
    WAIT = "wait"
    WAIT_FOR_SELECTOR = "waitForSelector"
    SCREENSHOT = "screenshot"
    SET_VIEWPORT = "setViewport"

    @classmethod
    def is_valid(cls, name: str) -> bool:
        """Check whether a name is a canonical command type."""
        return name in _COMMAND_VALUES


_COMMAND_VALUES: FrozenSet[str] = frozenset(member.value for member in CommandType)


class SelectorStrategy(str, Enum):
    """Ways of locating a UI element."""

    CSS = "css"
    XPATH = "xpath"
    TEXT = "text"
    PLACEHOLDER = "placeholder"
    LABEL = "label"
    ROLE = "role"
    TESTID = "testid"


INTERACTION_COMMANDS: FrozenSet[CommandType] = frozenset({
    CommandType.CLICK,
    CommandType.FILL,
    CommandType.TYPE,
    CommandType.PRESS,
    CommandType.CHECK,
    CommandType.UNCHECK,
    CommandType.SELECT_OPTION,
    CommandType.HOVER,
    CommandType.FOCUS,
    CommandType.BLUR,
    CommandType.CLEAR,
})

ASSERTION_COMMANDS: FrozenSet[CommandType] = frozenset({
    CommandType.ASSERT_VISIBLE,
    CommandType.ASSERT_HIDDEN,
    CommandType.ASSERT_TEXT,
    CommandType.ASSERT_VALUE,
    CommandType.ASSERT_ENABLED,
    CommandType.ASSERT_DISABLED,
    CommandType.ASSERT_CHECKED,
    CommandType.ASSERT_UNCHECKED,
    CommandType.ASSERT_URL,
    CommandType.ASSERT_TITLE,
})

# Page-level assertions inspect the page, not an element.
PAGE_ASSERTIONS: FrozenSet[CommandType] = frozenset({
    CommandType.ASSERT_URL,
    CommandType.ASSERT_TITLE,
})

SELECTOR_REQUIRED_COMMANDS: FrozenSet[CommandType] = (
    INTERACTION_COMMANDS
    | (ASSERTION_COMMANDS - PAGE_ASSERTIONS)
    | {CommandType.WAIT_FOR_SELECTOR}
)

REQUIRED_PARAMS: Mapping[CommandType, Tuple[str, ...]] = {
    CommandType.NAVIGATE: ("url",),
    CommandType.FILL: ("value",),
}


def missing_params(command_type: CommandType, params: Mapping[str, str]) -> List[str]:
    """Return required parameter names that are absent or empty."""
    return [key for key in REQUIRED_PARAMS.get(command_type, ()) if not params.get(key)]


class SelectorSpec(BaseModel):
    """How to locate a UI element, with ordered alternatives."""

    model_config = ConfigDict(frozen=True)

    strategy: SelectorStrategy
    value: str = Field(..., min_length=1, description="Strategy-specific locator value")
    fallbacks: Tuple["SelectorSpec", ...] = Field(
        default=(), description="Alternatives tried in order after the primary"
    )

    @field_validator("value")
    @classmethod
    def validate_value(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Selector value cannot be blank")
        return value

    @field_validator("fallbacks")
    @classmethod
    def validate_fallbacks(
        cls, fallbacks: Tuple["SelectorSpec", ...]
    ) -> Tuple["SelectorSpec", ...]:
        """Fallback chains are stored flat."""
        for fallback in fallbacks:
            if fallback.fallbacks:
                raise ValueError("Fallback selectors cannot carry their own fallbacks")
        return fallbacks

    def candidates(self) -> List["SelectorSpec"]:
        """Primary selector followed by each fallback, in the order to try them."""
        primary = SelectorSpec(strategy=self.strategy, value=self.value)
        return [primary, *self.fallbacks]

    def matches(self, other: "SelectorSpec") -> bool:
        """Compare strategy and value, ignoring fallbacks."""
        return self.strategy == other.strategy and self.value == other.value

    def to_playwright_selector(self) -> str:
        """Render as a Playwright selector-engine string."""
        if self.strategy == SelectorStrategy.CSS:
            return self.value
        if self.strategy in (SelectorStrategy.TEXT, SelectorStrategy.ROLE, SelectorStrategy.XPATH):
            return f"{self.strategy.value}={self.value}"
        attribute = {
            SelectorStrategy.TESTID: "data-testid",
            SelectorStrategy.PLACEHOLDER: "placeholder",
            SelectorStrategy.LABEL: "aria-label",
        }[self.strategy]
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'[{attribute}="{escaped}"]'

    def __str__(self) -> str:
        return f"{self.strategy.value}={self.value}"


class Command(BaseModel):
    """One parsed OXTest instruction."""

    model_config = ConfigDict(frozen=True)

    type: CommandType
    params: Mapping[str, str] = Field(default_factory=dict)
    selector: Optional[SelectorSpec] = None

    @field_validator("params")
    @classmethod
    def freeze_params(cls, params: Mapping[str, str]) -> Mapping[str, str]:
        """Store params as a read-only view over a private copy."""
        return MappingProxyType(dict(params))

    @field_serializer("params")
    def serialize_params(self, params: Mapping[str, str]) -> Dict[str, str]:
        return dict(params)

    @model_validator(mode="after")
    def check_requirements(self) -> "Command":
        """Reject commands missing their target or required parameters."""
        if self.type in SELECTOR_REQUIRED_COMMANDS and self.selector is None:
            raise ValueError(f"Selector is required for {self.type.value} commands")
        missing = missing_params(self.type, self.params)
        if missing:
            raise ValueError(
                f"{missing[0]} parameter is required for {self.type.value} commands"
            )
        return self

    def is_interaction(self) -> bool:
        return self.type in INTERACTION_COMMANDS

    def is_assertion(self) -> bool:
        return self.type in ASSERTION_COMMANDS

    def requires_selector(self) -> bool:
        return self.type in SELECTOR_REQUIRED_COMMANDS

    def __hash__(self) -> int:
        return hash((self.type, frozenset(self.params.items()), self.selector))

    def __str__(self) -> str:
        parts = [str(self.selector)] if self.selector else []
        parts.extend(f"{key}={value}" for key, value in self.params.items())
        if not parts:
            return self.type.value
        return f"{self.type.value}({', '.join(parts)})"
