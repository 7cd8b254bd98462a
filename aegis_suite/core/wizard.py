"""
Recommendation wizard.

Holds the state of the multi-step "New Recommendation" flow independently of
the UI:

    client-info -> risk-profile -> investment-horizon -> asset-classes
                -> strategy -> preview

Submitting client info pre-fills suggested horizon, risk profile and strategy
from the rule engine; the advisor can override each one on its own step.
finish() turns the form into a Draft Recommendation and saves it. With
auto_save on, the draft is already written when the preview step is reached
and finish() updates that same record.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

import structlog

from . import store
from .asset_classes import DEFAULT_SELECTION, unknown_asset_classes
from .errors import WizardValidationError
from .investment import (
    HorizonType, RiskProfile, MIN_HORIZON_YEARS, MAX_HORIZON_YEARS, OBJECTIVES,
    classify_horizon, horizon_label, minimum_investment, parse_risk_profile,
    recommended_horizon, recommended_risk_profile, recommended_strategy,
)
from .strategies import DEFAULT_STRATEGY, build_allocation, get_strategy, strategy_name

log = structlog.get_logger(__name__)

MIN_NAME_LENGTH = 3
MIN_AGE, MAX_AGE = 18, 120
MIN_AMOUNT, MAX_AMOUNT = 1_000, 100_000_000


class WizardStep(Enum):
    CLIENT_INFO = "client-info"
    RISK_PROFILE = "risk-profile"
    INVESTMENT_HORIZON = "investment-horizon"
    ASSET_CLASSES = "asset-classes"
    STRATEGY = "strategy"
    PREVIEW = "preview"


STEP_ORDER: List[WizardStep] = list(WizardStep)

STEP_LABELS: Dict[WizardStep, str] = {
    WizardStep.CLIENT_INFO: "Client Info",
    WizardStep.RISK_PROFILE: "Risk Profile",
    WizardStep.INVESTMENT_HORIZON: "Investment Horizon",
    WizardStep.ASSET_CLASSES: "Asset Classes",
    WizardStep.STRATEGY: "Strategy",
    WizardStep.PREVIEW: "Preview",
}


@dataclass
class ClientInfo:
    name: str
    age: int
    objective: str
    amount: float


@dataclass
class RecommendationForm:
    risk_profile: RiskProfile = RiskProfile.MODERATE
    horizon_years: int = 5
    horizon_type: HorizonType = HorizonType.MEDIUM_TERM
    asset_classes: List[str] = field(default_factory=lambda: list(DEFAULT_SELECTION))
    strategy: str = DEFAULT_STRATEGY
    client: Optional[ClientInfo] = None
    notes: str = ""
    report_fee: Optional[float] = None


def validate_client_info(name: str, age, objective: str, amount) -> ClientInfo:
    errors = {}
    name = (name or "").strip()
    if len(name) < MIN_NAME_LENGTH:
        errors["name"] = f"Client name must have at least {MIN_NAME_LENGTH} characters"

    try:
        age = int(age)
    except (TypeError, ValueError):
        errors["age"] = "Age must be a whole number"
    else:
        if age < MIN_AGE:
            errors["age"] = f"Minimum age for investing is {MIN_AGE}"
        elif age > MAX_AGE:
            errors["age"] = "Please enter a valid age"

    objective = (objective or "").strip().lower()
    if not objective:
        errors["objective"] = "Please select an investment objective"
    elif objective not in OBJECTIVES:
        errors["objective"] = f"Unknown objective: {objective}"

    try:
        amount = float(amount)
    except (TypeError, ValueError):
        errors["amount"] = "Investment amount must be a number"
    else:
        if amount < MIN_AMOUNT:
            errors["amount"] = f"Minimum investment is {MIN_AMOUNT:,.2f}"
        elif amount > MAX_AMOUNT:
            errors["amount"] = f"Maximum investment is {MAX_AMOUNT:,.2f}"

    if errors:
        raise WizardValidationError(errors)
    return ClientInfo(name=name, age=age, objective=objective, amount=amount)


class RecommendationWizard:
    """State machine behind the New Recommendation screen."""

    def __init__(self, initial: Optional[RecommendationForm] = None, auto_save: bool = False):
        self.form = initial or RecommendationForm()
        self.auto_save = auto_save
        self.saved: Optional[store.Recommendation] = None
        self.step = WizardStep.CLIENT_INFO
        self._reached = 0
        self.warnings: List[str] = []

    # ---- navigation ----
    @property
    def index(self) -> int:
        return STEP_ORDER.index(self.step)

    def _move(self, step: WizardStep):
        self.step = step
        self._reached = max(self._reached, self.index)

    def next(self) -> WizardStep:
        self._check_step(self.step)
        if self.index < len(STEP_ORDER) - 1:
            self._move(STEP_ORDER[self.index + 1])
        return self.step

    def previous(self) -> WizardStep:
        if self.index > 0:
            self.step = STEP_ORDER[self.index - 1]
        return self.step

    def edit(self) -> WizardStep:
        """Jump from the preview back to the first data step."""
        self.step = WizardStep.RISK_PROFILE if self.form.client else WizardStep.CLIENT_INFO
        return self.step

    def go_to(self, step: WizardStep) -> WizardStep:
        if STEP_ORDER.index(step) > self._reached:
            raise ValueError(f"Step '{step.value}' has not been reached yet")
        self.step = step
        return self.step

    def step_status(self, step: WizardStep) -> str:
        i = STEP_ORDER.index(step)
        if i < self.index:
            return "complete"
        if i == self.index:
            return "current"
        return "upcoming"

    def _check_step(self, step: WizardStep):
        if step == WizardStep.CLIENT_INFO and self.form.client is None:
            raise WizardValidationError({"client": "Client information is required"})
        if step == WizardStep.ASSET_CLASSES:
            self._check_assets(self.form.asset_classes)

    @staticmethod
    def _check_assets(ids: List[str]):
        if not ids:
            raise WizardValidationError({"asset_classes": "Select at least one asset class"})
        unknown = unknown_asset_classes(ids)
        if unknown:
            raise WizardValidationError({"asset_classes": f"Unknown asset classes: {', '.join(unknown)}"})

    # ---- step submissions ----
    def submit_client_info(self, name: str, age, objective: str, amount) -> List[str]:
        """Validate client info, pre-fill suggestions, advance. Returns warnings."""
        info = validate_client_info(name, age, objective, amount)
        self.form.client = info

        years = recommended_horizon(info.age, info.objective)
        self.update_horizon(years)
        self.form.risk_profile = recommended_risk_profile(info.age, info.objective, self.form.horizon_years)
        self.form.strategy = recommended_strategy(self.form.risk_profile, info.objective)

        self.warnings = []
        minimum = minimum_investment(info.objective, info.age)
        if info.amount < minimum:
            self.warnings.append(
                f"Amount {info.amount:,.2f} is below the suggested minimum of {minimum:,.2f} "
                f"for {OBJECTIVES[info.objective].lower()}"
            )
        log.info("wizard.client_info", objective=info.objective,
                 profile=self.form.risk_profile.value, strategy=self.form.strategy)
        self._move(WizardStep.RISK_PROFILE)
        return self.warnings

    def submit_risk_profile(self, profile) -> WizardStep:
        self.form.risk_profile = parse_risk_profile(profile)
        self._move(WizardStep.INVESTMENT_HORIZON)
        return self.step

    def update_horizon(self, years: int, horizon_type: Optional[HorizonType] = None):
        years = max(MIN_HORIZON_YEARS, min(MAX_HORIZON_YEARS, int(years)))
        self.form.horizon_years = years
        self.form.horizon_type = horizon_type or classify_horizon(years)

    def submit_asset_classes(self, ids: List[str]) -> WizardStep:
        ids = list(dict.fromkeys(ids))
        self._check_assets(ids)
        self.form.asset_classes = ids
        self._move(WizardStep.STRATEGY)
        return self.step

    def submit_strategy(self, strategy_id: str) -> WizardStep:
        if get_strategy(strategy_id) is None:
            raise WizardValidationError({"strategy": "Please select an allocation strategy"})
        self.form.strategy = strategy_id
        self._move(WizardStep.PREVIEW)
        if self.auto_save:
            self._save()
            log.info("wizard.auto_saved", id=self.saved.id)
        return self.step

    def set_details(self, notes: str = "", report_fee=None):
        """Advisor notes and the optional report fee shown on the preview."""
        fee = None
        if report_fee not in (None, ""):
            try:
                fee = float(str(report_fee).replace(",", "").strip())
            except ValueError:
                raise WizardValidationError({"report_fee": "Report fee must be a number"})
            if fee < 0:
                raise WizardValidationError({"report_fee": "Report fee cannot be negative"})
        self.form.notes = (notes or "").strip()
        self.form.report_fee = fee

    # ---- output ----
    @property
    def horizon_text(self) -> str:
        return horizon_label(self.form.horizon_years, self.form.horizon_type)

    def preview(self) -> dict:
        f = self.form
        return {
            "client": f.client.name if f.client else "",
            "risk_profile": f.risk_profile.label,
            "horizon": self.horizon_text,
            "strategy": strategy_name(f.strategy),
            "asset_classes": list(f.asset_classes),
            "allocation": build_allocation(f.strategy, f.risk_profile),
        }

    def build_recommendation(self, now: Optional[datetime] = None) -> store.Recommendation:
        f = self.form
        if f.client is None:
            raise WizardValidationError({"client": "Client information is required"})
        now = now or datetime.now()
        return store.Recommendation(
            title=f"{f.risk_profile.label} - {now:%d/%m/%Y}",
            created_at=now.isoformat(timespec="seconds"),
            risk_profile=f.risk_profile.label,
            horizon=self.horizon_text,
            horizon_years=f.horizon_years,
            strategy=strategy_name(f.strategy),
            strategy_id=f.strategy,
            allocation=build_allocation(f.strategy, f.risk_profile),
            asset_classes=list(f.asset_classes),
            client_name=f.client.name,
            client_age=f.client.age,
            objective=f.client.objective,
            investment_amount=f.client.amount,
            status=store.STATUS_DRAFT,
            notes=f.notes,
            report_fee=f.report_fee,
        )

    def _save(self, now: Optional[datetime] = None) -> store.Recommendation:
        if self.saved is not None:
            # updating the auto-saved draft keeps its id and creation time
            now = datetime.fromisoformat(self.saved.created_at)
        rec = self.build_recommendation(now)
        if self.saved is not None:
            rec.id = self.saved.id
        self.saved = store.save_recommendation(rec)
        return self.saved

    def finish(self, now: Optional[datetime] = None) -> store.Recommendation:
        if self.step != WizardStep.PREVIEW:
            raise WizardValidationError({"step": "Complete every step before saving"})
        rec = self._save(now)
        log.info("wizard.finished", id=rec.id)
        return rec
