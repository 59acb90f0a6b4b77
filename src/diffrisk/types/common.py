"""Cross-module type aliases."""

from __future__ import annotations

from typing import Literal, TypeAlias

SignalClass: TypeAlias = Literal["critical", "behavioral", "maintainability"]
Confidence: TypeAlias = Literal["high", "medium", "low"]
RuleSeverity: TypeAlias = Literal["blocker", "warning", "info"]
RiskBand: TypeAlias = Literal["CRITICAL", "HIGH", "MED", "LOW"]
GateTier: TypeAlias = Literal["blocking", "advisory", "filtered"]
SuppressionScope: TypeAlias = Literal["local", "global"]
BlastRadiusMode: TypeAlias = Literal["graph", "fallback", "off"]
ProfileName: TypeAlias = Literal["minimal", "strict", "react", "vue", "angular", "backend"]
ActionType: TypeAlias = Literal["test", "review", "check", "verify", "refactor", "document"]
IgnoreSource: TypeAlias = Literal["always", "default", "test", "config", "user"]

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias = dict[str, JsonValue]
