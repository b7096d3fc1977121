"""Explicit scope values passed into every resolve and recall call."""

from __future__ import annotations

from dataclasses import dataclass

from factrecall.domain.errors import ValidationError
from factrecall.domain.model.enums import FactScope, RecallScope, SearchMode


@dataclass(frozen=True, slots=True)
class ScopeContext:
    """The project a call is made from; ``None`` outside of any project."""

    project_path: str | None = None

    def project_path_for(self, scope: FactScope) -> str | None:
        """Return the project path a fact written in ``scope`` must carry."""

        if scope == FactScope.GLOBAL:
            return None
        if not self.project_path:
            raise ValidationError("Project scoped writes require a project path in the scope context")
        return self.project_path


NO_PROJECT = ScopeContext()


@dataclass(frozen=True, slots=True)
class ScopeFilter:
    """Row filter used when one physical store holds facts of several scopes."""

    scope: FactScope
    project_path: str | None = None

    @classmethod
    def for_recall(cls, scope: RecallScope, context: ScopeContext) -> ScopeFilter | None:
        if scope == RecallScope.PROJECT:
            return cls(scope=FactScope.PROJECT, project_path=context.project_path)
        if scope == RecallScope.GLOBAL:
            return cls(scope=FactScope.GLOBAL)
        return None

    def matches(self, scope: FactScope | str, project_path: str | None) -> bool:
        if self.scope == FactScope.GLOBAL:
            return scope == FactScope.GLOBAL
        return scope == FactScope.PROJECT and project_path == self.project_path


def _parse[TEnum: (RecallScope, FactScope, SearchMode)](
    value: object, enum_cls: type[TEnum], label: str
) -> TEnum:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(member.value for member in enum_cls)
    raise ValidationError(f"Invalid {label} {value!r}; expected one of: {allowed}")


def parse_recall_scope(value: object) -> RecallScope:
    return _parse(value, RecallScope, "scope")


def parse_fact_scope(value: object) -> FactScope:
    return _parse(value, FactScope, "fact scope")


def parse_search_mode(value: object) -> SearchMode:
    return _parse(value, SearchMode, "search mode")
