"""Cohort incidence design deserialization."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping


class DesignError(ValueError):
    """Raised when an incidence design is structurally invalid."""


@dataclass(frozen=True)
class CohortRef:
    cohort_id: int
    name: str = ""


@dataclass(frozen=True)
class TargetDef:
    id: int
    name: str = ""


@dataclass(frozen=True)
class OutcomeDef:
    id: int
    cohort_id: int
    name: str = ""
    clean_window: int = 0
    exclude_cohort_id: int | None = None


@dataclass(frozen=True)
class TimeAtRiskDef:
    id: int
    start_with: str = "start"
    start_offset: int = 0
    end_with: str = "end"
    end_offset: int = 0


@dataclass(frozen=True)
class AnalysisSpec:
    targets: tuple[int, ...]
    outcomes: tuple[int, ...]
    tars: tuple[int, ...] = ()


def _as_int(value: Any, label: str) -> int:
    # bool is an int subclass but never a valid identifier.
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise DesignError(f"{label} must be an integer, got {value!r}")
    return value


def _as_int_tuple(values: Any, label: str) -> tuple[int, ...]:
    if values is None:
        return ()
    if isinstance(values, (int, float)) and not isinstance(values, bool):
        values = [values]
    if not isinstance(values, (list, tuple)):
        raise DesignError(f"{label} must be a list of integers, got {values!r}")
    return tuple(_as_int(v, label) for v in values)


def _mapping(value: Any, label: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise DesignError(f"'{label}' must be an object, got {value!r}")
    return value


def _section(doc: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    items = doc.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise DesignError(f"'{key}' must be a list")
    for item in items:
        if not isinstance(item, Mapping):
            raise DesignError(f"Entries of '{key}' must be objects, got {item!r}")
    return items


@dataclass(frozen=True)
class IncidenceDesign:
    analysis_list: tuple[AnalysisSpec, ...] = ()
    outcome_defs: tuple[OutcomeDef, ...] = ()
    cohort_defs: tuple[CohortRef, ...] = ()
    target_defs: tuple[TargetDef, ...] = ()
    time_at_risk_defs: tuple[TimeAtRiskDef, ...] = ()
    strata_settings: Mapping[str, Any] = field(default_factory=dict)
    subgroups: tuple[Mapping[str, Any], ...] = ()
    source: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, doc: Mapping[str, Any]) -> IncidenceDesign:
        if not isinstance(doc, Mapping):
            raise DesignError(f"Incidence design must be an object, got {type(doc).__name__}")

        cohort_defs = tuple(
            CohortRef(cohort_id=_as_int(c.get("cohortId"), "cohortDefs.cohortId"), name=str(c.get("cohortName", "")))
            for c in _section(doc, "cohortDefs")
        )
        target_defs = tuple(
            TargetDef(id=_as_int(t.get("id"), "targetDefs.id"), name=str(t.get("name", "")))
            for t in _section(doc, "targetDefs")
        )

        outcome_defs: list[OutcomeDef] = []
        seen_outcomes: set[int] = set()
        for o in _section(doc, "outcomeDefs"):
            outcome_id = _as_int(o.get("id"), "outcomeDefs.id")
            if outcome_id in seen_outcomes:
                raise DesignError(f"Duplicate outcome definition id: {outcome_id}")
            seen_outcomes.add(outcome_id)
            exclude = o.get("excludeCohortId")
            outcome_defs.append(
                OutcomeDef(
                    id=outcome_id,
                    cohort_id=_as_int(o.get("cohortId"), "outcomeDefs.cohortId"),
                    name=str(o.get("name", "")),
                    clean_window=_as_int(o.get("cleanWindow", 0), "outcomeDefs.cleanWindow"),
                    exclude_cohort_id=None if exclude is None else _as_int(exclude, "outcomeDefs.excludeCohortId"),
                )
            )

        tars: list[TimeAtRiskDef] = []
        for t in _section(doc, "timeAtRiskDefs"):
            start = _mapping(t.get("start"), "timeAtRiskDefs.start")
            end = _mapping(t.get("end"), "timeAtRiskDefs.end")
            tars.append(
                TimeAtRiskDef(
                    id=_as_int(t.get("id"), "timeAtRiskDefs.id"),
                    start_with=str(start.get("dateField", "start")).lower(),
                    start_offset=_as_int(start.get("offset", 0), "timeAtRiskDefs.start.offset"),
                    end_with=str(end.get("dateField", "end")).lower(),
                    end_offset=_as_int(end.get("offset", 0), "timeAtRiskDefs.end.offset"),
                )
            )

        analyses = tuple(
            AnalysisSpec(
                targets=_as_int_tuple(a.get("targets"), "analysisList.targets"),
                outcomes=_as_int_tuple(a.get("outcomes"), "analysisList.outcomes"),
                tars=_as_int_tuple(a.get("tars"), "analysisList.tars"),
            )
            for a in _section(doc, "analysisList")
        )

        strata = _mapping(doc.get("strataSettings"), "strataSettings")

        return cls(
            analysis_list=analyses,
            outcome_defs=tuple(outcome_defs),
            cohort_defs=cohort_defs,
            target_defs=target_defs,
            time_at_risk_defs=tuple(tars),
            strata_settings=dict(strata),
            subgroups=tuple(_section(doc, "subgroups")),
            source=dict(doc),
        )

    @classmethod
    def from_json(cls, text: str) -> IncidenceDesign:
        try:
            doc = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DesignError(f"Incidence design is not valid JSON: {exc}") from exc
        return cls.from_dict(doc)

    @classmethod
    def load(cls, value: str | Mapping[str, Any]) -> IncidenceDesign:
        if isinstance(value, str):
            return cls.from_json(value)
        return cls.from_dict(value)

    def as_json(self) -> str:
        return json.dumps(self.source, sort_keys=True)
