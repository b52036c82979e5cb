# === FILE: listing_scout/parser/selectors.py ===
"""Ordered, named location strategies per field.

A strategy is a pure callable ``PageDocument -> Optional[str]``.  For each
field the resolver walks its strategies in order (stable attribute selectors
first, legacy class names next, generic tag fallbacks last) and stops at the
first one producing non-empty trimmed text.  Later strategies are not called.

Strategies are described as data (:class:`StrategySpec`) so that selector
lists live in site profiles rather than in code.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Sequence

from bs4 import Tag
from pydantic import BaseModel, ConfigDict, model_validator

from listing_scout.errors import ExtractionError
from listing_scout.parser.fields import clean_text
from listing_scout.parser.html_parser import PageDocument

__all__ = (
    "Strategy",
    "CssText",
    "CssAttr",
    "Feature",
    "RegexText",
    "SplitText",
    "JsonLd",
    "StrategySpec",
    "Resolution",
    "SelectorResolver",
)


def _text(el: Optional[Tag]) -> Optional[str]:
    if el is None:
        return None
    return clean_text(el.get_text(" ", strip=True))


class Strategy:
    """Base class: subclasses implement :meth:`values`."""

    name: str = "strategy"

    def values(self, doc: PageDocument) -> List[str]:
        raise NotImplementedError

    def __call__(self, doc: PageDocument) -> Optional[str]:
        for value in self.values(doc):
            if value:
                return value
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class CssText(Strategy):
    """Text of the elements matching a CSS selector."""

    def __init__(self, selector: str, *, name: Optional[str] = None) -> None:
        self.selector = selector
        self.name = name or f"text:{selector}"

    def values(self, doc: PageDocument) -> List[str]:
        return [t for t in (_text(el) for el in doc.soup.select(self.selector)) if t]


class CssAttr(Strategy):
    """Attribute value of the elements matching a CSS selector."""

    def __init__(self, selector: str, attr: str, *, name: Optional[str] = None) -> None:
        self.selector = selector
        self.attr = attr
        self.name = name or f"attr:{selector}@{attr}"

    def values(self, doc: PageDocument) -> List[str]:
        out: List[str] = []
        for el in doc.soup.select(self.selector):
            raw = el.get(self.attr)
            if isinstance(raw, list):
                raw = " ".join(raw)
            value = clean_text(raw) if isinstance(raw, str) else None
            if value:
                out.append(value)
        return out


class Feature(Strategy):
    """Text anchored to a semantic marker inside repeated feature containers.

    A container qualifies when its text contains ``label`` (case-insensitive)
    and/or it holds an element matching ``marker`` (icon, test-id).  The value
    is the text of ``value`` inside the container, or the container itself.
    """

    def __init__(
        self,
        container: str,
        *,
        label: Optional[str] = None,
        marker: Optional[str] = None,
        value: Optional[str] = None,
        name: Optional[str] = None,
    ) -> None:
        self.container = container
        self.label = label.lower() if label else None
        self.marker = marker
        self.value = value
        self.name = name or f"feature:{container}[{label or marker}]"

    def values(self, doc: PageDocument) -> List[str]:
        out: List[str] = []
        for box in doc.soup.select(self.container):
            box_text = box.get_text(" ", strip=True)
            if self.label and self.label not in box_text.lower():
                continue
            if self.marker and box.select_one(self.marker) is None:
                continue
            target = box.select_one(self.value) if self.value else box
            text = _text(target)
            if text:
                out.append(text)
        return out


class RegexText(Strategy):
    """First capture group of ``pattern`` over element text or the page text."""

    def __init__(self, pattern: str, *, selector: Optional[str] = None, name: Optional[str] = None) -> None:
        self.pattern = re.compile(pattern, re.IGNORECASE)
        self.selector = selector
        self.name = name or f"regex:{pattern}"

    def _haystacks(self, doc: PageDocument) -> Iterable[str]:
        if self.selector is None:
            yield doc.text
            return
        for el in doc.soup.select(self.selector):
            yield el.get_text(" ", strip=True)

    def values(self, doc: PageDocument) -> List[str]:
        out: List[str] = []
        for hay in self._haystacks(doc):
            for m in self.pattern.finditer(hay):
                value = clean_text(m.group(1) if m.groups() else m.group(0))
                if value:
                    out.append(value)
        return out


class SplitText(Strategy):
    """Segment ``index`` of element text split on ``sep`` (``"House | 3 beds"``)."""

    def __init__(self, selector: str, *, sep: str = "|", index: int = 1, name: Optional[str] = None) -> None:
        self.selector = selector
        self.sep = sep
        self.index = index
        self.name = name or f"split:{selector}[{index}]"

    def values(self, doc: PageDocument) -> List[str]:
        out: List[str] = []
        for el in doc.soup.select(self.selector):
            text = el.get_text(" ", strip=True)
            if self.sep not in text:
                continue
            parts = [p.strip() for p in text.split(self.sep)]
            if len(parts) > self.index and parts[self.index]:
                out.append(parts[self.index])
        return out


class JsonLd(Strategy):
    """Dotted ``path`` looked up in the page's JSON-LD objects."""

    def __init__(self, path: str, *, name: Optional[str] = None) -> None:
        self.path = path.split(".")
        self.name = name or f"jsonld:{path}"

    @staticmethod
    def _objects(doc: PageDocument) -> Iterable[Dict[str, Any]]:
        for script in doc.soup.select("script[type='application/ld+json']"):
            raw = script.string or script.get_text(strip=True)
            if not raw:
                continue
            try:
                data = json.loads(raw)
            except ValueError:
                continue
            if isinstance(data, dict) and isinstance(data.get("@graph"), list):
                data = data["@graph"]
            for item in data if isinstance(data, list) else [data]:
                if isinstance(item, dict):
                    yield item

    def _lookup(self, obj: Any) -> Any:
        for key in self.path:
            if isinstance(obj, list):
                obj = obj[0] if obj else None
            if not isinstance(obj, dict):
                return None
            obj = obj.get(key)
        return obj

    def values(self, doc: PageDocument) -> List[str]:
        out: List[str] = []
        for obj in self._objects(doc):
            found = self._lookup(obj)
            if isinstance(found, (str, int, float)):
                value = clean_text(str(found))
                if value:
                    out.append(value)
        return out


class StrategySpec(BaseModel):
    """Data form of a strategy, as written in site profiles."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["text", "attr", "feature", "regex", "split", "jsonld"]
    name: Optional[str] = None
    selector: Optional[str] = None
    attr: Optional[str] = None
    container: Optional[str] = None
    label: Optional[str] = None
    marker: Optional[str] = None
    value: Optional[str] = None
    pattern: Optional[str] = None
    sep: str = "|"
    index: int = 1
    path: Optional[str] = None

    @model_validator(mode="after")
    def _check_required(self) -> StrategySpec:
        required = {
            "text": ("selector",),
            "attr": ("selector", "attr"),
            "feature": ("container",),
            "regex": ("pattern",),
            "split": ("selector",),
            "jsonld": ("path",),
        }[self.kind]
        missing = [f for f in required if getattr(self, f) is None]
        if missing:
            raise ValueError(f"strategy '{self.kind}' requires {', '.join(missing)}")
        if self.kind == "feature" and self.label is None and self.marker is None:
            raise ValueError("strategy 'feature' requires label or marker")
        return self

    def build(self) -> Strategy:
        if self.kind == "text":
            return CssText(self.selector, name=self.name)  # type: ignore[arg-type]
        if self.kind == "attr":
            return CssAttr(self.selector, self.attr, name=self.name)  # type: ignore[arg-type]
        if self.kind == "feature":
            return Feature(
                self.container,  # type: ignore[arg-type]
                label=self.label,
                marker=self.marker,
                value=self.value,
                name=self.name,
            )
        if self.kind == "regex":
            return RegexText(self.pattern, selector=self.selector, name=self.name)  # type: ignore[arg-type]
        if self.kind == "split":
            return SplitText(self.selector, sep=self.sep, index=self.index, name=self.name)  # type: ignore[arg-type]
        return JsonLd(self.path, name=self.name)  # type: ignore[arg-type]


@dataclass(slots=True, frozen=True)
class Resolution:
    """Outcome of resolving one field: the value and the strategy that won."""

    field: str
    value: Optional[str] = None
    strategy: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.value is not None


class SelectorResolver:
    """Applies each field's strategies in order, first success wins."""

    def __init__(self, strategies: Mapping[str, Sequence[Strategy]]) -> None:
        self._strategies: Dict[str, tuple[Strategy, ...]] = {k: tuple(v) for k, v in strategies.items()}

    @classmethod
    def from_specs(cls, specs: Mapping[str, Sequence[StrategySpec]]) -> SelectorResolver:
        return cls({fld: [s.build() for s in chain] for fld, chain in specs.items()})

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self._strategies)

    def strategies(self, field: str) -> tuple[Strategy, ...]:
        return self._strategies.get(field, ())

    def resolve(self, doc: PageDocument, field: str) -> Resolution:
        for strategy in self.strategies(field):
            try:
                value = clean_text(strategy(doc))
            except Exception as exc:
                raise ExtractionError(f"{field}: strategy {strategy.name} failed: {exc}", field=field) from exc
            if value:
                return Resolution(field=field, value=value, strategy=strategy.name)
        return Resolution(field=field)

    def value(self, doc: PageDocument, field: str) -> Optional[str]:
        return self.resolve(doc, field).value

    def resolve_many(self, doc: PageDocument, field: str) -> List[str]:
        """All values of the first strategy yielding any (list fields)."""
        for strategy in self.strategies(field):
            try:
                found = [v for v in (clean_text(x) for x in strategy.values(doc)) if v]
            except Exception as exc:
                raise ExtractionError(f"{field}: strategy {strategy.name} failed: {exc}", field=field) from exc
            if found:
                return list(dict.fromkeys(found))
        return []
