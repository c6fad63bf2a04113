import pytest

from relaybot.config import DebugConfig
from relaybot.debug import DebugConsole


@pytest.fixture
def console() -> DebugConsole:
    return DebugConsole(DebugConfig(shell_timeout_s=5, max_output_chars=200))


def test_match_prefers_longest_sigil(console: DebugConsole) -> None:
    assert console.match("=> 1 + 1") == ("return", "1 + 1")
    assert console.match(">  x") == ("eval", "x")
    assert console.match("  $ ls -la ") == ("shell", "ls -la")
    assert console.match(".ping") is None


def test_match_uses_configured_sigils() -> None:
    console = DebugConsole(DebugConfig(eval_sigil="!eval", return_sigil="", shell_sigil="!sh"))

    assert console.match("!eval 2") == ("eval", "2")
    assert console.match("!sh uptime") == ("shell", "uptime")
    assert console.match("=> 2") is None


@pytest.mark.asyncio
async def test_evaluate_expression_uses_namespace(console: DebugConsole) -> None:
    assert await console.evaluate("value * 2", {"value": 21}) == "42"


@pytest.mark.asyncio
async def test_evaluate_statements_return_none_repr(console: DebugConsole) -> None:
    namespace = {"box": []}

    assert await console.evaluate("box.append(1)\nbox.append(2)", namespace) == "None"
    assert namespace["box"] == [1, 2]


@pytest.mark.asyncio
async def test_evaluate_awaits_coroutines(console: DebugConsole) -> None:
    async def answer() -> str:
        return "done"

    assert await console.evaluate("answer()", {"answer": answer}) == "done"


@pytest.mark.asyncio
async def test_evaluate_error_is_returned_as_text(console: DebugConsole) -> None:
    assert await console.evaluate("missing_name", {}) == "name 'missing_name' is not defined"


@pytest.mark.asyncio
async def test_evaluate_output_is_truncated(console: DebugConsole) -> None:
    result = await console.evaluate("'x' * 300", {})

    assert result.startswith("x" * 200)
    assert result.endswith("(truncated, 300 chars total)")


@pytest.mark.asyncio
async def test_evaluate_returning_renders_json(console: DebugConsole) -> None:
    assert await console.evaluate_returning("[1, 2]", {}) == "[\n  1,\n  2\n]"


@pytest.mark.asyncio
async def test_evaluate_returning_falls_back_to_repr(console: DebugConsole) -> None:
    assert await console.evaluate_returning("{1}", {}) == "{1}"


@pytest.mark.asyncio
async def test_shell_success_returns_stdout(console: DebugConsole) -> None:
    assert await console.run_shell("echo hello") == "hello"


@pytest.mark.asyncio
async def test_shell_failure_returns_stderr(console: DebugConsole) -> None:
    assert await console.run_shell("echo broken >&2; exit 3") == "broken"


@pytest.mark.asyncio
async def test_shell_failure_without_stderr_reports_exit_code(console: DebugConsole) -> None:
    assert await console.run_shell("exit 4") == "Command failed with exit code 4"


@pytest.mark.asyncio
async def test_shell_empty_command(console: DebugConsole) -> None:
    assert await console.run_shell("   ") == "Error: Empty command."


@pytest.mark.asyncio
async def test_shell_timeout_kills_process() -> None:
    console = DebugConsole(DebugConfig(shell_timeout_s=0.1))

    assert await console.run_shell("sleep 5") == "Error: Command timed out after 0.1s."


@pytest.mark.asyncio
async def test_run_rejects_unknown_operation(console: DebugConsole) -> None:
    with pytest.raises(ValueError):
        await console.run("format-disk", "", {})
