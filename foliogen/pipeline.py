"""
pipeline.py — End-to-end portfolio generation for one request.

  profile ─→ fusion ─→ DesignBrief
                          │
                          ▼
            continuation loop (invoker + completeness)
                          │
             complete? ───┴─── no ─→ IncompleteResult (best partial + diagnostics)
                 │
                 ▼
          asset resolution ─→ quality validation
                                   │
                       score < threshold? ─→ auto-fix once ─→ resolve ─→ re-validate
                                   │
                                   ▼
                            PipelineResult

Usage:
    settings = Settings.from_env()
    result = PortfolioPipeline(settings).run(PortfolioProfile.from_dict(data))
    if result.incomplete:
        ...  # show result.partial_html and result.diagnostics
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import logging
from rich.console import Console
from rich.panel import Panel

from .assets import AssetCatalog, AssetResolver
from .brief import DesignBrief
from .config import Settings
from .continuation import ContinuationController, GenerationSession
from .fusion import FusionEngine
from .invoker import GenerationInvoker
from .profile import PortfolioProfile
from .quality import QualityAnalyzer, ValidationContext, ValidationReport, apply_fixes
from .vision import VisionAnalyzer

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    final_html: str
    brief: DesignBrief
    session: Dict[str, Any]
    validation: ValidationReport
    elapsed_seconds: float
    unresolved_assets: list = field(default_factory=list)
    incomplete: bool = False


@dataclass
class IncompleteResult:
    partial_html: str
    diagnostics: Dict[str, Any]
    brief: DesignBrief
    elapsed_seconds: float
    incomplete: bool = True


class PortfolioPipeline:
    def __init__(
        self,
        settings: Settings,
        client=None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.fusion = FusionEngine(settings, vision=VisionAnalyzer(settings, client=client))
        self.controller = ContinuationController(
            GenerationInvoker(settings, client=client), settings, sleep=sleep
        )
        self.analyzer = QualityAnalyzer(neutral_score=settings.neutral_validator_score)

    def _incomplete(
        self,
        session: GenerationSession,
        brief: DesignBrief,
        resolver: AssetResolver,
        started: float,
    ) -> IncompleteResult:
        partial = resolver.resolve(session.final_text).text if session.final_text else ""
        diagnostics = session.summary()
        diagnostics["degraded_signals"] = list(brief.degraded_signals)
        elapsed = time.time() - started
        logger.warning(
            f"Generation incomplete ({diagnostics['terminal_reason']}) after "
            f"{diagnostics['attempts']} attempt(s)"
        )
        return IncompleteResult(
            partial_html=partial,
            diagnostics=diagnostics,
            brief=brief,
            elapsed_seconds=elapsed,
        )

    def _validate(
        self,
        html: str,
        context: ValidationContext,
        resolver: AssetResolver,
    ):
        report = self.analyzer.analyze(html, context)
        if report.overall_score >= self.settings.autofix_threshold:
            return html, report

        console.print(
            f"  [yellow]⚠ Quality {report.overall_score} below "
            f"{self.settings.autofix_threshold}, applying auto-fixes...[/yellow]"
        )
        try:
            fixed, fixes = apply_fixes(html, report, context)
        except Exception as e:
            console.print(f"  [yellow]⚠ Auto-fix failed: {e}[/yellow]")
            logger.warning(f"Auto-fix failed: {e}")
            return html, report
        if not fixes:
            return html, report

        # fixes may have dropped client images into placeholder slots
        fixed = resolver.resolve(fixed).text
        revalidated = self.analyzer.analyze(fixed, context)
        revalidated.auto_fix_applied = True
        revalidated.fixes_applied = fixes
        console.print(
            f"  [green]✓ Auto-fix: {report.overall_score} → {revalidated.overall_score}[/green]"
        )
        return fixed, revalidated

    def run(
        self,
        profile: PortfolioProfile,
        should_cancel: Optional[Callable[[], bool]] = None,
    ):
        """Returns PipelineResult on success, IncompleteResult otherwise. Never raises for upstream failures."""
        started = time.time()
        console.print(Panel(
            f"[bold]{profile.personal.name or 'Untitled'}[/bold] — "
            f"{len(profile.projects)} project(s), {len(profile.reference_images)} reference image(s)",
            title="Portfolio generation",
        ))

        brief = self.fusion.fuse(profile)
        catalog = AssetCatalog.from_profile(profile)
        resolver = AssetResolver(catalog)

        session = self.controller.run(brief, profile, should_cancel=should_cancel)
        if not session.is_complete:
            return self._incomplete(session, brief, resolver, started)

        console.print("\n[bold cyan]→ Resolving assets...[/bold cyan]")
        resolution = resolver.resolve(session.final_text)
        context = ValidationContext(profile=profile, catalog=catalog, brief=brief)
        html, report = self._validate(resolution.text, context, resolver)

        elapsed = time.time() - started
        console.print(
            f"\n[bold green]✓ Portfolio ready[/bold green] in {elapsed:.1f}s "
            f"(quality {report.overall_score}/100, {report.status})"
        )
        return PipelineResult(
            final_html=html,
            brief=brief,
            session=session.summary(),
            validation=report,
            elapsed_seconds=elapsed,
            unresolved_assets=list(resolution.unresolved),
        )
