"""Report / analysis state machine for the single user session.

Three independent slots, one per detail level (report → sector → product),
each moving ``idle → loading → success | error``. Every ``begin()`` bumps the
slot's request sequence; a completion only lands if its sequence is still
current, so a slow earlier request can never overwrite a newer one.

Premium gating for the sector level queues a PendingAction behind the
upgrade prompt. ``apply_user()`` is the single entry point for profile
changes. It compares the previous and new tier explicitly and replays the
queued action once, on a non-premium → premium transition of the same
account. Signing in as a different account drops the queued action.

Modal failures close the modal and surface through ``notice``; the report
slot only ever reflects report generation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional

from ..agents.trend_agent.generator import (
    generate_product_analysis,
    generate_sector_analysis,
    generate_trend_report,
)
from ..constants import DEFAULT_LANGUAGE, DEFAULT_PERIOD_MONTHS, MODE_RELIABLE, TIER_FREE
from ..schemas.analysis_schema import DetailedSectorAnalysis
from ..schemas.auth_schema import UserProfile
from ..schemas.request_schema import PreferencesUpdate, ReportOptions
from ..schemas.session_schema import PendingAction, SessionSnapshot, SlotView
from ..schemas.trend_schema import TrendReport
from .gemini_client import GenerationError
from .i18n import Translator

logger = logging.getLogger(__name__)

ReportFn = Callable[[ReportOptions, date], Awaitable[Any]]
SectorFn = Callable[[str, ReportOptions, date], Awaitable[Any]]
ProductFn = Callable[[str, str, ReportOptions, date], Awaitable[Any]]


class GateOutcome(str, Enum):
    STARTED = "started"
    AUTH_REQUIRED = "auth_required"
    UPGRADE_REQUIRED = "upgrade_required"
    NOT_SUGGESTED = "not_suggested"


# ── Application context ──────────────────────────────────────────────────

@dataclass
class AppContext:
    """Explicit session state shared (read-only) by the three slots."""

    translator: Translator
    user: Optional[UserProfile] = None
    language: str = DEFAULT_LANGUAGE
    period_months: int = DEFAULT_PERIOD_MONTHS
    regions: str = ""
    keywords: str = ""
    excluded_keywords: str = ""
    industries: str = ""
    mode: str = MODE_RELIABLE

    @property
    def tier(self) -> str:
        return self.user.subscription if self.user else TIER_FREE

    def t(self, key: str, replacements: Optional[Mapping[str, Any]] = None) -> str:
        return self.translator.translate(key, self.language, replacements)

    def report_options(self) -> ReportOptions:
        return ReportOptions(
            period_months=self.period_months,
            tier=self.tier,
            language=self.language,
            regions=self.regions,
            keywords=self.keywords,
            excluded_keywords=self.excluded_keywords,
            industries=self.industries,
            mode=self.mode,
        )

    def apply_preferences(self, update: PreferencesUpdate) -> None:
        for name, value in update.model_dump(exclude_none=True).items():
            setattr(self, name, value)


# ── Slot ─────────────────────────────────────────────────────────────────

@dataclass
class GenerationSlot:
    name: str
    status: str = "idle"
    data: Optional[Any] = None
    error: Optional[str] = None
    is_open: bool = False
    _sequence: int = field(default=0, repr=False)

    def begin(self) -> int:
        self._sequence += 1
        self.status = "loading"
        self.data = None
        self.error = None
        self.is_open = True
        return self._sequence

    def is_current(self, token: int) -> bool:
        return token == self._sequence and self.status == "loading"

    def succeed(self, token: int, data: Any) -> bool:
        if not self.is_current(token):
            print(f"⏭️  [SESSION] Ignoring stale {self.name} result (request {token})")
            return False
        self.status = "success"
        self.data = data
        return True

    def fail(self, token: int, message: str) -> bool:
        if not self.is_current(token):
            print(f"⏭️  [SESSION] Ignoring stale {self.name} failure (request {token})")
            return False
        self.status = "error"
        self.data = None
        self.error = message
        return True

    def close(self) -> None:
        """Back to closed + empty; in-flight requests become stale."""
        self._sequence += 1
        self.status = "idle"
        self.data = None
        self.error = None
        self.is_open = False

    @property
    def is_loading(self) -> bool:
        return self.status == "loading"

    def view(self) -> SlotView:
        return SlotView(status=self.status, is_open=self.is_open, error=self.error, data=self.data)


# ── Session ──────────────────────────────────────────────────────────────

def _same_account(previous: Optional[UserProfile], profile: UserProfile) -> bool:
    if previous is None:
        return False
    return (previous.email or "").lower() == (profile.email or "").lower() and previous.name == profile.name


class ReportSession:
    def __init__(
        self,
        context: AppContext,
        *,
        report_fn: ReportFn = generate_trend_report,
        sector_fn: SectorFn = generate_sector_analysis,
        product_fn: ProductFn = generate_product_analysis,
        today_fn: Callable[[], date] = date.today,
    ) -> None:
        self.context = context
        self._report_fn = report_fn
        self._sector_fn = sector_fn
        self._product_fn = product_fn
        self._today_fn = today_fn

        self.report = GenerationSlot("report")
        self.sector_analysis = GenerationSlot("sector analysis")
        self.product_analysis = GenerationSlot("product analysis")

        self.pending_action: Optional[PendingAction] = None
        self.auth_prompt_open = False
        self.upgrade_prompt_open = False
        self.notice: Optional[str] = None

    # ── Error messages ───────────────────────────────────────────────

    def _describe(self, exc: Exception) -> str:
        if isinstance(exc, GenerationError):
            key = f"errors.{exc.kind}.{exc.context}"
            message = self.context.t(key)
            return str(exc) if message == key else message
        return self.context.t("errors.unexpected")

    # ── Report level ─────────────────────────────────────────────────

    async def generate_report(self) -> None:
        token = self.report.begin()
        options = self.context.report_options()
        print(f"🚀 [SESSION] Report generation #{token} started")
        try:
            data = await self._report_fn(options, self._today_fn())
        except GenerationError as exc:
            print(f"❌ [SESSION] Report generation #{token} failed: {exc}")
            self.report.fail(token, self._describe(exc))
            return
        except Exception as exc:
            logger.exception("Unexpected error during report generation")
            self.report.fail(token, self._describe(exc))
            return
        self.report.succeed(token, data)

    async def regenerate_report(self) -> None:
        await self.generate_report()

    def find_report_sector(self, sector_name: str):
        if isinstance(self.report.data, TrendReport):
            return self.report.data.find_sector(sector_name)
        return None

    # ── Sector level ─────────────────────────────────────────────────

    async def analyze_sector(self, sector_name: str, force: bool = False) -> GateOutcome:
        user = self.context.user
        if user is None:
            self.auth_prompt_open = True
            print(f"🔒 [SESSION] Sector analysis '{sector_name}' needs a signed-in user")
            return GateOutcome.AUTH_REQUIRED

        if not user.is_premium and not force:
            self.pending_action = PendingAction(kind="analyze_sector", payload=sector_name)
            self.upgrade_prompt_open = True
            print(f"🔒 [SESSION] Sector analysis '{sector_name}' queued behind upgrade prompt")
            return GateOutcome.UPGRADE_REQUIRED

        self.product_analysis.close()
        token = self.sector_analysis.begin()
        options = self.context.report_options()
        try:
            data = await self._sector_fn(sector_name, options, self._today_fn())
        except Exception as exc:
            self._fail_modal(self.sector_analysis, token, exc)
            return GateOutcome.STARTED
        self.sector_analysis.succeed(token, data)
        return GateOutcome.STARTED

    def close_sector_modal(self) -> None:
        self.sector_analysis.close()

    # ── Product level ────────────────────────────────────────────────

    async def analyze_product(self, product_name: str) -> GateOutcome:
        """Open the product modal from a suggestion of the open sector analysis.

        Not tier-gated, but only reachable while a sector analysis is showing
        and only for one of its suggestions; anything else makes no call.
        """
        sector = self.sector_analysis.data
        if not isinstance(sector, DetailedSectorAnalysis) or sector.find_suggestion(product_name) is None:
            print(f"🚫 [SESSION] Product '{product_name}' is not a suggestion of an open sector analysis")
            return GateOutcome.NOT_SUGGESTED

        self.sector_analysis.close()
        token = self.product_analysis.begin()
        options = self.context.report_options()
        try:
            data = await self._product_fn(product_name, sector.sector_name, options, self._today_fn())
        except Exception as exc:
            self._fail_modal(self.product_analysis, token, exc)
            return GateOutcome.STARTED
        self.product_analysis.succeed(token, data)
        return GateOutcome.STARTED

    def close_product_modal(self) -> None:
        self.product_analysis.close()

    def _fail_modal(self, slot: GenerationSlot, token: int, exc: Exception) -> None:
        if not isinstance(exc, GenerationError):
            logger.exception("Unexpected error during %s", slot.name, exc_info=exc)
        if not slot.is_current(token):
            print(f"⏭️  [SESSION] Ignoring stale {slot.name} failure (request {token})")
            return
        message = self._describe(exc)
        print(f"❌ [SESSION] {slot.name} failed: {exc}")
        slot.close()
        self.notice = message

    # ── Profile changes ──────────────────────────────────────────────

    async def apply_user(
        self,
        profile: Optional[UserProfile],
        *,
        sign_in: bool = False,
    ) -> Optional[GateOutcome]:
        """Install a new session profile and run the tier-transition check.

        ``sign_in`` marks a login / signup / provider login, where the new
        profile may belong to another account. Settings and upgrade updates
        keep the account even when the email changes.

        Returns the outcome of a replayed pending action, if one fired.
        """
        previous = self.context.user
        self.context.user = profile

        if profile is None:
            self.pending_action = None
            self.upgrade_prompt_open = False
            self.close_sector_modal()
            self.close_product_modal()
            return None

        self.auth_prompt_open = False
        if sign_in and not _same_account(previous, profile):
            if self.pending_action is not None:
                print(f"🗑️  [SESSION] Dropping pending action of the previous account ({self.pending_action.payload})")
            self.pending_action = None
            self.upgrade_prompt_open = False
            return None

        was_premium = previous is not None and previous.is_premium
        if profile.is_premium:
            self.upgrade_prompt_open = False
        if profile.is_premium and not was_premium:
            return await self._replay_pending_action()
        return None

    async def _replay_pending_action(self) -> Optional[GateOutcome]:
        action = self.pending_action
        if action is None or action.kind != "analyze_sector":
            return None
        # Cleared before running so a re-entrant profile change cannot fire it twice.
        self.pending_action = None
        print(f"🔁 [SESSION] Replaying pending sector analysis '{action.payload}'")
        return await self.analyze_sector(action.payload, force=True)

    # ── Prompts / notices ────────────────────────────────────────────

    def dismiss_auth_prompt(self) -> None:
        self.auth_prompt_open = False

    def dismiss_upgrade_prompt(self) -> None:
        self.upgrade_prompt_open = False

    def dismiss_notice(self) -> None:
        self.notice = None

    # ── View ─────────────────────────────────────────────────────────

    def snapshot(self) -> SessionSnapshot:
        ctx = self.context
        return SessionSnapshot(
            user=ctx.user,
            language=ctx.language,
            period_months=ctx.period_months,
            mode=ctx.mode,
            report=self.report.view(),
            sector_analysis=self.sector_analysis.view(),
            product_analysis=self.product_analysis.view(),
            auth_prompt_open=self.auth_prompt_open,
            upgrade_prompt_open=self.upgrade_prompt_open,
            pending_action=self.pending_action,
            notice=self.notice,
        )
