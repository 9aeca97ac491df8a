"""
OXTest to Playwright conversion.

Renders parsed OXTest commands as a ``@playwright/test`` TypeScript file.
Fallback selectors become chained ``.or(...)`` locators.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence

from jinja2 import Environment
from pydantic import BaseModel, Field

from oxtest.config.settings import get_settings
from oxtest.core.types import Command, CommandType, SelectorSpec, SelectorStrategy
from oxtest.error_handling.exceptions import ParseError
from oxtest.parsing.script import OxtestParser

logger = logging.getLogger(__name__)


PLAYWRIGHT_TEST_TEMPLATE = """import { test, expect } from '@playwright/test';

test('{{ test_name | ts }}', async ({ page }) => {
  // Generated from OXTest
{% for step in steps %}

  // {{ step.label }}
  {{ step.code }}
{% endfor %}
});
"""

FALLBACK_TEST_TEMPLATE = """import { test, expect } from '@playwright/test';

test('{{ test_name | ts }}', async ({ page }) => {
  // Conversion failed; steps must be written by hand
  await page.goto('{{ base_url | ts }}');
});
"""

_REGEX_SPECIALS = re.compile(r"[.*+?^${}()|\[\]\\/]")

_LOCATOR_FACTORIES: Dict[SelectorStrategy, str] = {
    SelectorStrategy.CSS: "page.locator('{value}')",
    SelectorStrategy.XPATH: "page.locator('xpath={value}')",
    SelectorStrategy.TEXT: "page.getByText('{value}')",
    SelectorStrategy.ROLE: "page.getByRole('{value}')",
    SelectorStrategy.TESTID: "page.getByTestId('{value}')",
    SelectorStrategy.PLACEHOLDER: "page.getByPlaceholder('{value}')",
    SelectorStrategy.LABEL: "page.getByLabel('{value}')",
}

# Commands rendered as a bare locator method call
_LOCATOR_ACTIONS: Dict[CommandType, str] = {
    CommandType.CLICK: "click",
    CommandType.HOVER: "hover",
    CommandType.CHECK: "check",
    CommandType.UNCHECK: "uncheck",
    CommandType.FOCUS: "focus",
    CommandType.BLUR: "blur",
    CommandType.CLEAR: "clear",
}

# Element assertions that take no expected value
_LOCATOR_STATE_ASSERTIONS: Dict[CommandType, str] = {
    CommandType.ASSERT_VISIBLE: "toBeVisible()",
    CommandType.ASSERT_HIDDEN: "toBeHidden()",
    CommandType.ASSERT_ENABLED: "toBeEnabled()",
    CommandType.ASSERT_DISABLED: "toBeDisabled()",
    CommandType.ASSERT_CHECKED: "toBeChecked()",
    CommandType.ASSERT_UNCHECKED: "not.toBeChecked()",
}

_PAGE_ACTIONS: Dict[CommandType, str] = {
    CommandType.GO_BACK: "goBack",
    CommandType.GO_FORWARD: "goForward",
    CommandType.RELOAD: "reload",
}


def escape_ts(text: str) -> str:
    """Escape a string for a single-quoted TypeScript literal."""
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def escape_regex(text: str) -> str:
    """Escape a string for a JavaScript regex literal."""
    return _REGEX_SPECIALS.sub(lambda match: "\\" + match.group(0), text)


def locator_expression(selector: SelectorSpec) -> str:
    """Build a Playwright locator expression, chaining fallbacks with ``.or``."""
    expressions = [
        _LOCATOR_FACTORIES[candidate.strategy].format(value=escape_ts(candidate.value))
        for candidate in selector.candidates()
    ]
    primary, *alternatives = expressions
    return primary + "".join(f".or({alternative})" for alternative in alternatives)


class ConversionOptions(BaseModel):
    """Options for Playwright conversion."""

    test_name: str = Field(..., min_length=1, description="Name of the generated test")
    base_url: Optional[str] = Field(
        None, description="URL used by placeholder code (defaults to settings)"
    )


class ConversionResult(BaseModel):
    """Result of converting an OXTest script."""

    code: str
    commands_converted: int = Field(0, ge=0)
    warnings: List[str] = Field(default_factory=list)


class PlaywrightConverter:
    """Converts OXTest scripts to Playwright TypeScript."""

    def __init__(self, parser: Optional[OxtestParser] = None) -> None:
        self.parser = parser or OxtestParser(error_policy="abort")
        self.environment = Environment(
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.environment.filters["ts"] = escape_ts
        self._renderers: Dict[CommandType, Callable[[Command, List[str]], Optional[str]]] = {
            CommandType.NAVIGATE: self._render_navigate,
            CommandType.FILL: self._render_fill,
            CommandType.TYPE: self._render_fill,
            CommandType.PRESS: self._render_press,
            CommandType.SELECT_OPTION: self._render_select_option,
            CommandType.WAIT: self._render_wait,
            CommandType.WAIT_FOR_SELECTOR: self._render_wait_for_selector,
            CommandType.ASSERT_TEXT: self._render_assert_text,
            CommandType.ASSERT_VALUE: self._render_assert_value,
            CommandType.ASSERT_URL: self._render_assert_url,
            CommandType.ASSERT_TITLE: self._render_assert_title,
            CommandType.SCREENSHOT: self._render_screenshot,
            CommandType.SET_VIEWPORT: self._render_set_viewport,
        }

    def convert(self, content: str, options: ConversionOptions) -> ConversionResult:
        """
        Convert OXTest content to Playwright TypeScript code.

        A script that fails to parse does not raise: the result carries
        placeholder code and a warning instead.

        Args:
            content: OXTest script text
            options: Conversion options

        Returns:
            Generated code, number of converted commands and warnings
        """
        try:
            script = self.parser.parse_content(content)
        except ParseError as exc:
            logger.warning(f"Conversion failed: {exc.message}", extra={"line_number": exc.line_number})
            return ConversionResult(
                code=self._render_fallback(options),
                commands_converted=0,
                warnings=[f"Conversion error: {exc.message}"],
            )

        result = self.convert_commands(script.commands, options)
        result.warnings.extend(f"Skipped {issue}" for issue in script.issues)
        return result

    def convert_commands(
        self, commands: Sequence[Command], options: ConversionOptions
    ) -> ConversionResult:
        """Render already-parsed commands."""
        warnings: List[str] = []
        steps = []

        if not commands:
            warnings.append("No commands found in OXTest")

        for command in commands:
            code = self.convert_command(command, warnings)
            if code is not None:
                steps.append({"label": str(command), "code": code})

        template = self.environment.from_string(PLAYWRIGHT_TEST_TEMPLATE)
        code = template.render(test_name=options.test_name, steps=steps)

        logger.info(
            f"Converted {len(steps)} OXTest commands to Playwright",
            extra={"commands": len(steps)},
        )
        return ConversionResult(code=code, commands_converted=len(steps), warnings=warnings)

    def convert_command(self, command: Command, warnings: List[str]) -> Optional[str]:
        """
        Convert a single command to one Playwright statement.

        Returns None, after appending a warning, when the command lacks
        something the generated code needs.
        """
        if command.type in _PAGE_ACTIONS:
            return f"await page.{_PAGE_ACTIONS[command.type]}();"

        if command.type in _LOCATOR_ACTIONS:
            return f"await {self._locator(command)}.{_LOCATOR_ACTIONS[command.type]}();"

        if command.type in _LOCATOR_STATE_ASSERTIONS:
            matcher = _LOCATOR_STATE_ASSERTIONS[command.type]
            return f"await expect({self._locator(command)}).{matcher};"

        renderer = self._renderers.get(command.type)
        if renderer is None:
            return f"// Unsupported command: {command.type.value}"
        return renderer(command, warnings)

    def _locator(self, command: Command) -> str:
        return locator_expression(command.selector)

    def _require(
        self, command: Command, keys: Sequence[str], warnings: List[str]
    ) -> Optional[str]:
        """First non-empty param among keys, warning when there is none."""
        for key in keys:
            if command.params.get(key):
                return command.params[key]
        warnings.append(f"{command.type.value}: missing parameter {' or '.join(keys)}")
        return None

    def _render_navigate(self, command: Command, warnings: List[str]) -> Optional[str]:
        return f"await page.goto('{escape_ts(command.params['url'])}');"

    def _render_fill(self, command: Command, warnings: List[str]) -> Optional[str]:
        value = self._require(command, ("value",), warnings)
        if value is None:
            return None
        return f"await {self._locator(command)}.fill('{escape_ts(value)}');"

    def _render_press(self, command: Command, warnings: List[str]) -> Optional[str]:
        key = command.params.get("key") or "Enter"
        return f"await {self._locator(command)}.press('{escape_ts(key)}');"

    def _render_select_option(self, command: Command, warnings: List[str]) -> Optional[str]:
        value = self._require(command, ("value", "option"), warnings)
        if value is None:
            return None
        return f"await {self._locator(command)}.selectOption('{escape_ts(value)}');"

    def _render_wait(self, command: Command, warnings: List[str]) -> Optional[str]:
        timeout = command.params.get("timeout") or command.params.get("ms") or "1000"
        if not timeout.isdigit():
            warnings.append(f"wait: timeout '{timeout}' is not a number, using 1000")
            timeout = "1000"
        return f"await page.waitForTimeout({timeout});"

    def _render_wait_for_selector(self, command: Command, warnings: List[str]) -> Optional[str]:
        state = command.params.get("state") or "visible"
        return f"await {self._locator(command)}.waitFor({{ state: '{escape_ts(state)}' }});"

    def _render_assert_text(self, command: Command, warnings: List[str]) -> Optional[str]:
        expected = self._require(command, ("value", "expected", "text"), warnings)
        if expected is None:
            return None
        return f"await expect({self._locator(command)}).toHaveText('{escape_ts(expected)}');"

    def _render_assert_value(self, command: Command, warnings: List[str]) -> Optional[str]:
        expected = self._require(command, ("value", "expected"), warnings)
        if expected is None:
            return None
        return f"await expect({self._locator(command)}).toHaveValue('{escape_ts(expected)}');"

    def _render_assert_url(self, command: Command, warnings: List[str]) -> Optional[str]:
        if command.params.get("pattern"):
            return f"await expect(page).toHaveURL(/{escape_regex(command.params['pattern'])}/);"
        url = self._require(command, ("pattern", "url"), warnings)
        if url is None:
            return None
        return f"await expect(page).toHaveURL('{escape_ts(url)}');"

    def _render_assert_title(self, command: Command, warnings: List[str]) -> Optional[str]:
        title = self._require(command, ("title", "value", "expected"), warnings)
        if title is None:
            return None
        return f"await expect(page).toHaveTitle('{escape_ts(title)}');"

    def _render_screenshot(self, command: Command, warnings: List[str]) -> Optional[str]:
        path = command.params.get("path")
        if not path:
            return "await page.screenshot();"
        return f"await page.screenshot({{ path: '{escape_ts(path)}' }});"

    def _render_set_viewport(self, command: Command, warnings: List[str]) -> Optional[str]:
        width = command.params.get("width", "")
        height = command.params.get("height", "")
        if not (width.isdigit() and height.isdigit()):
            warnings.append("setViewport: width and height must be numbers")
            return None
        return f"await page.setViewportSize({{ width: {width}, height: {height} }});"

    def _render_fallback(self, options: ConversionOptions) -> str:
        base_url = options.base_url or get_settings().playwright_base_url
        template = self.environment.from_string(FALLBACK_TEST_TEMPLATE)
        return template.render(test_name=options.test_name, base_url=base_url)
