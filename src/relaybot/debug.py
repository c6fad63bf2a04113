"""Privileged debug capability: expression evaluation and shell access.

This runs arbitrary Python and arbitrary shell commands with the bot's
privileges. The dispatcher only calls it for creators, and a deployment can
switch it off entirely with ``debug.enabled: false``.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import pprint
from collections.abc import Mapping
from typing import Any

import structlog

from relaybot.config import DebugConfig

logger = structlog.get_logger()


class DebugConsole:
    """Evaluates creator-supplied code. Errors come back as text, never raised."""

    def __init__(self, config: DebugConfig) -> None:
        self._config = config

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def match(self, text: str) -> tuple[str, str] | None:
        """Return ``(operation, payload)`` when ``text`` starts with a sigil.

        Longer sigils are tried first so ``=>`` is not shadowed by ``>``.
        """
        stripped = text.strip()
        sigils = {
            "return": self._config.return_sigil,
            "eval": self._config.eval_sigil,
            "shell": self._config.shell_sigil,
        }
        for operation, sigil in sorted(sigils.items(), key=lambda item: -len(item[1])):
            if sigil and stripped.startswith(sigil):
                return operation, stripped[len(sigil):].strip()
        return None

    async def run(self, operation: str, payload: str, namespace: Mapping[str, Any]) -> str:
        if operation == "return":
            return await self.evaluate_returning(payload, namespace)
        if operation == "eval":
            return await self.evaluate(payload, namespace)
        if operation == "shell":
            return await self.run_shell(payload)
        raise ValueError(f"Unknown debug operation: {operation}")

    async def evaluate(self, source: str, namespace: Mapping[str, Any]) -> str:
        """Evaluate an expression, or execute statements when it is not one."""
        scope = dict(namespace)
        try:
            try:
                code = compile(source, "<debug>", "eval")
            except SyntaxError:
                code = compile(source, "<debug>", "exec")
                exec(code, scope)
                result: Any = None
            else:
                result = eval(code, scope)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.info("debug.eval_error", error=str(e))
            return str(e)
        return self._truncate(result if isinstance(result, str) else pprint.pformat(result))

    async def evaluate_returning(self, source: str, namespace: Mapping[str, Any]) -> str:
        """Evaluate an expression and render the result as JSON."""
        scope = dict(namespace)
        try:
            result = eval(compile(source, "<debug>", "eval"), scope)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.info("debug.eval_error", error=str(e))
            return str(e)
        try:
            rendered = json.dumps(result, indent=2, ensure_ascii=False)
        except (TypeError, ValueError):
            rendered = pprint.pformat(result)
        return self._truncate(rendered)

    async def run_shell(self, command: str) -> str:
        """Run a shell command; stdout on success, stderr or exit code otherwise."""
        if not command.strip():
            return "Error: Empty command."

        logger.warning("debug.shell_execute", command=command)

        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )

            try:
                stdout, stderr = await asyncio.wait_for(
                    process.communicate(),
                    timeout=self._config.shell_timeout_s,
                )
            except TimeoutError:
                process.kill()
                await process.wait()
                return f"Error: Command timed out after {self._config.shell_timeout_s}s."
        except Exception as e:
            logger.error("debug.shell_error", command=command, error=str(e))
            return f"Error running command: {type(e).__name__}: {e}"

        stdout_str = stdout.decode("utf-8", errors="replace").strip()
        stderr_str = stderr.decode("utf-8", errors="replace").strip()
        logger.info("debug.shell_result", exit_code=process.returncode, output_length=len(stdout_str))

        if process.returncode != 0:
            return self._truncate(stderr_str or f"Command failed with exit code {process.returncode}")
        return self._truncate(stdout_str)

    def _truncate(self, text: str) -> str:
        limit = self._config.max_output_chars
        if len(text) > limit:
            return text[:limit] + f"\n... (truncated, {len(text)} chars total)"
        return text
