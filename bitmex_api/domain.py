"""Exchange models returned by the BitMEX REST API.

Importing this module registers every model with default_registry.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import Field

from bitmex_api.registry import ApiModel, default_registry


@default_registry.register
class Error(ApiModel):
    message: str | None = None
    code: float | None = None

    swagger_types = {
        "message": "String",
        "code": "Float",
    }


@default_registry.register
class ConnectedUsers(ApiModel):
    users: float | None = None
    bots: float | None = None

    swagger_types = {
        "users": "Float",
        "bots": "Float",
    }


@default_registry.register
class AnonymousModel0(ApiModel):
    """Push notification registration payload (opaque per platform)."""

    apns: Any = None
    gcm: Any = None

    swagger_types = {
        "apns": "x-any",
        "gcm": "x-any",
    }


@default_registry.register
class Margin(ApiModel):
    """Account margin status for one currency."""

    account: float | None = None
    currency: str | None = None
    risk_limit: float | None = Field(default=None, alias="riskLimit")
    prev_state: str | None = Field(default=None, alias="prevState")
    state: str | None = None
    action: str | None = None
    amount: float | None = None
    pending_credit: float | None = Field(default=None, alias="pendingCredit")
    pending_debit: float | None = Field(default=None, alias="pendingDebit")
    prev_realised_pnl: float | None = Field(default=None, alias="prevRealisedPnl")
    prev_unrealised_pnl: float | None = Field(default=None, alias="prevUnrealisedPnl")
    gross_comm: float | None = Field(default=None, alias="grossComm")
    gross_open_cost: float | None = Field(default=None, alias="grossOpenCost")
    gross_open_premium: float | None = Field(default=None, alias="grossOpenPremium")
    gross_exec_cost: float | None = Field(default=None, alias="grossExecCost")
    gross_mark_value: float | None = Field(default=None, alias="grossMarkValue")
    risk_value: float | None = Field(default=None, alias="riskValue")
    taxable_margin: float | None = Field(default=None, alias="taxableMargin")
    init_margin: float | None = Field(default=None, alias="initMargin")
    maint_margin: float | None = Field(default=None, alias="maintMargin")
    session_margin: float | None = Field(default=None, alias="sessionMargin")
    target_excess_margin: float | None = Field(default=None, alias="targetExcessMargin")
    var_margin: float | None = Field(default=None, alias="varMargin")
    realised_pnl: float | None = Field(default=None, alias="realisedPnl")
    unrealised_pnl: float | None = Field(default=None, alias="unrealisedPnl")
    indicative_tax: float | None = Field(default=None, alias="indicativeTax")
    unrealised_profit: float | None = Field(default=None, alias="unrealisedProfit")
    wallet_balance: float | None = Field(default=None, alias="walletBalance")
    margin_balance: float | None = Field(default=None, alias="marginBalance")
    margin_balance_pcnt: float | None = Field(default=None, alias="marginBalancePcnt")
    margin_leverage: float | None = Field(default=None, alias="marginLeverage")
    margin_used_pcnt: float | None = Field(default=None, alias="marginUsedPcnt")
    excess_margin: float | None = Field(default=None, alias="excessMargin")
    excess_margin_pcnt: float | None = Field(default=None, alias="excessMarginPcnt")
    available_margin: float | None = Field(default=None, alias="availableMargin")
    withdrawable_margin: float | None = Field(default=None, alias="withdrawableMargin")
    timestamp: date | None = None

    swagger_types = {
        "account": "Float",
        "currency": "String",
        "risk_limit": "Float",
        "prev_state": "String",
        "state": "String",
        "action": "String",
        "amount": "Float",
        "pending_credit": "Float",
        "pending_debit": "Float",
        "prev_realised_pnl": "Float",
        "prev_unrealised_pnl": "Float",
        "gross_comm": "Float",
        "gross_open_cost": "Float",
        "gross_open_premium": "Float",
        "gross_exec_cost": "Float",
        "gross_mark_value": "Float",
        "risk_value": "Float",
        "taxable_margin": "Float",
        "init_margin": "Float",
        "maint_margin": "Float",
        "session_margin": "Float",
        "target_excess_margin": "Float",
        "var_margin": "Float",
        "realised_pnl": "Float",
        "unrealised_pnl": "Float",
        "indicative_tax": "Float",
        "unrealised_profit": "Float",
        "wallet_balance": "Float",
        "margin_balance": "Float",
        "margin_balance_pcnt": "Float",
        "margin_leverage": "Float",
        "margin_used_pcnt": "Float",
        "excess_margin": "Float",
        "excess_margin_pcnt": "Float",
        "available_margin": "Float",
        "withdrawable_margin": "Float",
        "timestamp": "Date",
    }
