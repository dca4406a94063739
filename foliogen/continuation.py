"""
continuation.py — Bounded continuation loop for truncated generations.

State machine (one GenerationSession per request):

    GENERATING ──complete──────────────────────────────→ COMPLETE
        │
        └─incomplete─→ INCOMPLETE ──can continue & attempts left──→ CONTINUING ─→ GENERATING
                            │
                            └──otherwise──→ FAILED

Upstream failures inside an attempt are retried after a short fixed delay,
up to the same attempt ceiling. The loop carries the best partial document
seen so far; a FAILED session hands it back instead of raising.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import logging
from rich.console import Console

from .brief import DesignBrief
from .completeness import GenerationAttempt, assess
from .config import Settings
from .errors import AUTH, MALFORMED_REQUEST, GenerationTruncated, UpstreamError
from .invoker import GenerationInvoker
from .profile import PortfolioProfile

console = Console()
logger = logging.getLogger(__name__)

NON_RETRYABLE = {AUTH, MALFORMED_REQUEST}

FULL_DOC_RE = re.compile(r"^\s*(?:<!doctype\s+html|<html\b)", re.IGNORECASE)
LEADING_OPENERS = (
    re.compile(r"^\s*<!doctype[^>]*>", re.IGNORECASE),
    re.compile(r"^\s*<html[^>]*>", re.IGNORECASE),
    re.compile(r"^\s*<head[^>]*>.*?</head>", re.IGNORECASE | re.DOTALL),
    re.compile(r"^\s*<body[^>]*>", re.IGNORECASE),
)


class SessionState(str, Enum):
    GENERATING = "GENERATING"
    INCOMPLETE = "INCOMPLETE"
    CONTINUING = "CONTINUING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


class TerminalReason(str, Enum):
    COMPLETE = "COMPLETE"
    MAX_ATTEMPTS = "MAX_ATTEMPTS"
    NON_CONTINUABLE = "NON_CONTINUABLE"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    CANCELLED = "CANCELLED"


@dataclass
class GenerationSession:
    attempts: List[GenerationAttempt] = field(default_factory=list)
    final_text: str = ""
    terminal_reason: Optional[TerminalReason] = None
    state: SessionState = SessionState.GENERATING
    upstream_errors: List[str] = field(default_factory=list)
    history: List[SessionState] = field(default_factory=lambda: [SessionState.GENERATING])
    elapsed_seconds: float = 0.0

    @property
    def is_complete(self) -> bool:
        return self.terminal_reason == TerminalReason.COMPLETE

    @property
    def last_attempt(self) -> Optional[GenerationAttempt]:
        return self.attempts[-1] if self.attempts else None

    def move(self, state: SessionState) -> None:
        self.state = state
        self.history.append(state)

    def summary(self) -> Dict[str, Any]:
        last = self.last_attempt
        return {
            "attempts": len(self.attempts),
            "terminal_reason": self.terminal_reason.value if self.terminal_reason else None,
            "state": self.state.value,
            "estimated_completion": [a.estimated_completion for a in self.attempts],
            "last_issues": list(last.issues) if last else [],
            "upstream_errors": list(self.upstream_errors),
            "elapsed_seconds": round(self.elapsed_seconds, 2),
        }


def merge_continuation(partial: str, continuation: str) -> str:
    """Full documents replace the partial; tail fragments are appended to it."""
    if FULL_DOC_RE.match(continuation):
        return continuation.strip()
    tail = continuation.strip()
    for pattern in LEADING_OPENERS:
        tail = pattern.sub("", tail, count=1)
    return partial.rstrip() + tail


def _better(best: Optional[GenerationAttempt], current: GenerationAttempt) -> GenerationAttempt:
    if best is None or current.estimated_completion >= best.estimated_completion:
        return current
    return best


class ContinuationController:
    def __init__(
        self,
        invoker: GenerationInvoker,
        settings: Settings,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.invoker = invoker
        self.settings = settings
        self.sleep = sleep

    def _assess(self, text: str, attempt: int) -> GenerationAttempt:
        return assess(
            text,
            attempt,
            expected_min_length=self.settings.expected_min_length,
            min_continuable_length=self.settings.min_continuable_length,
            tolerance=self.settings.tag_balance_tolerance,
        )

    @staticmethod
    def _require_complete(attempt: GenerationAttempt) -> None:
        if not attempt.is_complete:
            raise GenerationTruncated(
                attempt.attempt_number, attempt.estimated_completion, attempt.issues
            )

    def _finish(
        self,
        session: GenerationSession,
        reason: TerminalReason,
        best: Optional[GenerationAttempt],
        started: float,
    ) -> GenerationSession:
        session.terminal_reason = reason
        session.elapsed_seconds = time.time() - started
        if reason == TerminalReason.COMPLETE:
            session.move(SessionState.COMPLETE)
            session.final_text = session.attempts[-1].raw_text
            console.print(
                f"  [green]✓ Document complete after {len(session.attempts)} attempt(s)[/green]"
            )
        else:
            session.move(SessionState.FAILED)
            session.final_text = best.raw_text if best else ""
            console.print(
                f"  [yellow]⚠ Generation ended incomplete ({reason.value}) — "
                f"keeping best partial ({len(session.final_text)} chars)[/yellow]"
            )
        return session

    def run(
        self,
        brief: DesignBrief,
        profile: PortfolioProfile,
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> GenerationSession:
        """Drive generation to completion or a terminal failure. Never raises."""
        console.print("\n[bold cyan]→ Generating portfolio HTML...[/bold cyan]")
        started = time.time()
        max_attempts = self.settings.max_attempts
        session = GenerationSession()

        attempt = 1
        best: Optional[GenerationAttempt] = None
        upstream_tries = 0

        while True:
            # ── GENERATING ───────────────────────────────────────────────────
            if should_cancel is not None and should_cancel():
                return self._finish(session, TerminalReason.CANCELLED, best, started)
            try:
                if best is None:
                    text = self.invoker.generate(brief, profile)
                else:
                    text = self.invoker.continue_from(best, brief, profile)
            except UpstreamError as e:
                upstream_tries += 1
                session.upstream_errors.append(str(e))
                logger.warning(f"Upstream error on attempt {attempt} (try {upstream_tries}): {e}")
                if e.kind not in NON_RETRYABLE and upstream_tries < max_attempts:
                    console.print(
                        f"  [yellow]⚠ Gemini call failed ({e.kind}). Retrying in "
                        f"{self.settings.retry_delay_seconds:g}s... "
                        f"({upstream_tries}/{max_attempts})[/yellow]"
                    )
                    self.sleep(self.settings.retry_delay_seconds)
                    continue
                return self._finish(session, TerminalReason.UPSTREAM_ERROR, best, started)

            upstream_tries = 0
            merged = text if best is None else merge_continuation(best.raw_text, text)
            current = self._assess(merged, attempt)
            session.attempts.append(current)
            best = _better(best, current)

            try:
                self._require_complete(current)
            except GenerationTruncated as truncated:
                # ── INCOMPLETE ───────────────────────────────────────────────
                session.move(SessionState.INCOMPLETE)
                logger.info(str(truncated))
                if not current.can_continue:
                    return self._finish(session, TerminalReason.NON_CONTINUABLE, best, started)
                if attempt >= max_attempts:
                    return self._finish(session, TerminalReason.MAX_ATTEMPTS, best, started)

                # ── CONTINUING ───────────────────────────────────────────────
                session.move(SessionState.CONTINUING)
                attempt += 1
                session.move(SessionState.GENERATING)
                continue

            return self._finish(session, TerminalReason.COMPLETE, best, started)
