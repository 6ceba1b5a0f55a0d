"""
src/i18n/translator.py
───────────────────────
Locale-aware translation engine using JSON locale files.

Usage:
    from src.i18n.translator import t

    t("search.smartSearch")                   # → "Smart search"
    t("results.count", "es", count=3)         # → "3 programas encontrados"
    t("results.count", "es-MX", count=1)      # → "1 programa encontrado"  (es fallback)

Resolution order for a key: exact locale → shorter language prefixes
(``zh-Hant-TW`` → ``zh-Hant`` → ``zh``) → source locale. A key missing from
every catalog renders as the literal ``namespace.key`` so gaps are visible
instead of blank.

Catalogs are immutable and injected into ``LocaleResolver``; the module-level
``t()`` only wraps a resolver built from the bundled locale files.
"""
from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from config.locales import plural_suffix
from config.settings import settings
from config.taxonomy import CATEGORIES, GROUPS, area_label_key
from src.data.models import LocalizedProgram, Program, split_offer_lines, split_steps
from src.errors import TranslationMissing

logger = logging.getLogger(__name__)

_LOCALES_DIR = Path(__file__).parent / "locales"
_PLACEHOLDER = re.compile(r"\{(\w+)\}")
PLURAL_MARKER = "{s}"
PROGRAMS_NAMESPACE = "programs"

Params = Mapping[str, str | int | float]


@dataclass(frozen=True)
class TranslationEntry:
    namespace: str
    key: str
    locale: str
    template: str


def normalize_locale(code: str) -> str:
    """``es_mx`` → ``es-MX``, ``zh-hant`` → ``zh-Hant``."""
    parts = [p for p in code.replace("_", "-").strip().split("-") if p]
    if not parts:
        return ""
    out = [parts[0].lower()]
    for part in parts[1:]:
        if len(part) == 4 and part.isalpha():
            out.append(part.title())
        elif len(part) in (2, 3):
            out.append(part.upper())
        else:
            out.append(part)
    return "-".join(out)


def placeholders(template: str) -> set[str]:
    """Names of the ``{name}`` tokens in a template."""
    return set(_PLACEHOLDER.findall(template))


def _flatten(node: Mapping, prefix: str = "") -> dict[str, str]:
    flat: dict[str, str] = {}
    for name, value in node.items():
        path = f"{prefix}.{name}" if prefix else str(name)
        if isinstance(value, Mapping):
            flat.update(_flatten(value, path))
        elif isinstance(value, str):
            flat[path] = value
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            flat[path] = str(value)
        else:
            logger.debug("Ignoring non-string translation leaf %s", path)
    return flat


def _unflatten(flat: Mapping[str, str]) -> dict:
    tree: dict = {}
    for path, value in flat.items():
        node = tree
        *parents, leaf = path.split(".")
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value
    return tree


# ── Catalog ───────────────────────────────────────────────────────────────────

class TranslationCatalog:
    """
    Immutable, locale-keyed set of string templates.

    Each locale document is a nested mapping (namespaces → keys → templates),
    stored flattened under dotted keys. Missing keys and missing namespaces
    are expected; they surface as ``TranslationMissing`` from ``template()``.
    """

    def __init__(self, documents: Mapping[str, Mapping], source_locale: str = "en"):
        self._source = normalize_locale(source_locale)
        self._flat: Mapping[str, Mapping[str, str]] = MappingProxyType(
            {normalize_locale(loc): MappingProxyType(_flatten(doc)) for loc, doc in documents.items()}
        )
        self._by_lower = {loc.lower(): loc for loc in self._flat}

    @classmethod
    def from_directory(cls, path: Path = _LOCALES_DIR, source_locale: str = "en") -> TranslationCatalog:
        documents = {}
        for file in sorted(Path(path).glob("*.json")):
            with open(file, encoding="utf-8") as f:
                documents[file.stem] = json.load(f)
        return cls(documents, source_locale=source_locale)

    @property
    def source_locale(self) -> str:
        return self._source

    @property
    def locales(self) -> tuple[str, ...]:
        return tuple(sorted(self._flat))

    def match(self, locale: str) -> str | None:
        """Canonical code of an available catalog, matched case-insensitively."""
        return self._by_lower.get(normalize_locale(locale).lower())

    def template(self, locale: str, key: str) -> str:
        catalog = self._flat.get(locale)
        if catalog is None or key not in catalog:
            raise TranslationMissing(locale, key)
        return catalog[key]

    def keys(self, locale: str) -> frozenset[str]:
        return frozenset(self._flat.get(locale, {}))

    def source_keys(self) -> frozenset[str]:
        return self.keys(self._source)

    def missing_keys(self, locale: str) -> list[str]:
        """Source keys absent from ``locale`` (coverage report)."""
        return sorted(self.source_keys() - self.keys(self.match(locale) or locale))

    def entries(self, locale: str) -> Iterator[TranslationEntry]:
        for path, template in sorted(self._flat.get(locale, {}).items()):
            namespace, _, key = path.rpartition(".")
            yield TranslationEntry(namespace=namespace, key=key, locale=locale, template=template)

    def to_document(self, locale: str) -> dict:
        return _unflatten(self._flat.get(locale, {}))

    def subset(self, locales: Iterable[str]) -> TranslationCatalog:
        """Catalog restricted to ``locales`` plus the source locale."""
        wanted = {self.match(loc) for loc in locales} | {self._source}
        return TranslationCatalog(
            {loc: self.to_document(loc) for loc in self._flat if loc in wanted},
            source_locale=self._source,
        )


# ── Resolver ──────────────────────────────────────────────────────────────────

class LocaleResolver:
    """Resolve and render templates through the locale fallback chain."""

    def __init__(self, catalog: TranslationCatalog, debug: bool | None = None):
        self._catalog = catalog
        self._debug = settings.DEBUG if debug is None else debug

    @property
    def catalog(self) -> TranslationCatalog:
        return self._catalog

    def chain(self, locale: str | None, include_source: bool = True) -> tuple[str, ...]:
        """Available catalogs to try, most specific first."""
        parts = normalize_locale(locale or "").split("-")
        candidates = ["-".join(parts[:i]) for i in range(len(parts), 0, -1) if parts[0]]
        if include_source:
            candidates.append(self._catalog.source_locale)
        chain: list[str] = []
        for candidate in candidates:
            matched = self._catalog.match(candidate)
            if matched and matched not in chain:
                chain.append(matched)
        if not include_source and self._catalog.source_locale in chain:
            chain.remove(self._catalog.source_locale)
        return tuple(chain)

    def lookup(
        self,
        locale: str | None,
        namespace: str,
        key: str,
        include_source: bool = True,
    ) -> str | None:
        """First non-empty template along the chain, or None."""
        path = f"{namespace}.{key}" if namespace else key
        for candidate in self.chain(locale, include_source=include_source):
            try:
                template = self._catalog.template(candidate, path)
            except TranslationMissing:
                continue
            if template:
                return template
        return None

    def resolve(
        self,
        locale: str | None,
        namespace: str,
        key: str,
        params: Params | None = None,
    ) -> str:
        """Rendered template, or the ``namespace.key`` sentinel when missing everywhere."""
        template = self.lookup(locale, namespace, key)
        if template is None:
            sentinel = f"{namespace}.{key}" if namespace else key
            logger.debug("Translation missing for %s (locale %s)", sentinel, locale)
            return sentinel
        return self.render(template, params, locale or self._catalog.source_locale)

    def t(self, path: str, locale: str | None = None, **params) -> str:
        namespace, _, key = path.rpartition(".")
        return self.resolve(locale, namespace, key, params or None)

    def render(self, template: str, params: Params | None, locale: str) -> str:
        """
        Substitute ``{name}`` tokens from params.

        ``{s}`` becomes the locale's plural suffix when ``count`` is supplied
        and is not 1 (0 is plural). Unmatched tokens stay verbatim.
        """
        params = params or {}
        if PLURAL_MARKER in template and "count" in params:
            suffix = plural_suffix(normalize_locale(locale)) if _is_plural(params["count"]) else ""
            template = template.replace(PLURAL_MARKER, suffix)

        unmatched: list[str] = []

        def _substitute(match: re.Match) -> str:
            name = match.group(1)
            if name in params:
                return str(params[name])
            unmatched.append(name)
            return match.group(0)

        rendered = _PLACEHOLDER.sub(_substitute, template)
        if unmatched and self._debug:
            logger.warning("Unmatched placeholders %s in template %r", sorted(set(unmatched)), template)
        return rendered

    # ── Program text ──────────────────────────────────────────────────────────

    def label(self, path: str, locale: str | None, default: str) -> str:
        namespace, _, key = path.rpartition(".")
        return self.lookup(locale, namespace, key) or default

    def verified_label(self, program: Program, locale: str | None, now: datetime | None = None) -> str:
        """"Verified 3 days ago" style staleness label."""
        if program.verified_at is None:
            status = self.resolve(locale, "program", "verificationUnknown")
        else:
            now = now or datetime.now(tz=UTC)
            days = max(0, (now - program.verified_at).days)
            if days < 60:
                status = self.resolve(locale, "program", "verifiedDaysAgo", {"days": days, "count": days})
            elif days < 365:
                months = days // 30
                status = self.resolve(
                    locale, "program", "verifiedMonthsAgo", {"months": months, "count": months}
                )
            else:
                status = self.resolve(locale, "program", "verifiedStale")
        if program.verified_by:
            source = self.resolve(locale, "program", "verifiedBy", {"source": program.verified_by})
            return f"{status} · {source}"
        return status

    def localize_program(
        self,
        program: Program,
        locale: str | None,
        now: datetime | None = None,
        score: float = 0.0,
    ) -> LocalizedProgram:
        """
        Program text for ``locale``.

        Translations live under ``programs.<slug>`` in non-source catalogs;
        the record itself carries the source-language text and is the final
        fallback for every field.
        """
        namespace = f"{PROGRAMS_NAMESPACE}.{program.slug}"

        def _text(field: str) -> str | None:
            return self.lookup(locale, namespace, field, include_source=False)

        offers = _text("what_they_offer")
        steps = _text("how_to_get_it")
        return LocalizedProgram(
            slug=program.slug,
            locale=self.chain(locale)[0] if self.chain(locale) else self._catalog.source_locale,
            name=_text("name") or program.name,
            description=_text("description") or program.description,
            what_they_offer=split_offer_lines(offers) if offers else program.what_they_offer,
            how_to_get_it=split_steps(steps) if steps else program.how_to_get_it,
            timeframe=(
                _text("timeframe") or program.timeframe or self.resolve(locale, "program", "timeframeUnknown")
            ),
            link_text=_text("link_text") or program.link_text or self.resolve(locale, "program", "learnMore"),
            link=program.link,
            category_labels=tuple(
                self.label(CATEGORIES[c].label_key if c in CATEGORIES else f"categories.{c}", locale, c)
                for c in program.categories
            ),
            group_labels=tuple(
                self.label(GROUPS[g].label_key if g in GROUPS else f"groups.{g}", locale, g)
                for g in program.groups
            ),
            area_labels=tuple(self.label(area_label_key(a), locale, a) for a in program.areas),
            verified_label=self.verified_label(program, locale, now),
            score=score,
        )


def _is_plural(count) -> bool:
    try:
        return float(count) != 1
    except (TypeError, ValueError):
        return True


# ── Module-level convenience ──────────────────────────────────────────────────

@lru_cache(maxsize=1)
def default_catalog() -> TranslationCatalog:
    return TranslationCatalog.from_directory(_LOCALES_DIR, source_locale=settings.SOURCE_LANG)


@lru_cache(maxsize=1)
def default_resolver() -> LocaleResolver:
    return LocaleResolver(default_catalog())


def t(key: str, lang: str | None = None, **params) -> str:
    """
    Translate a dot-separated key with the bundled catalogs.

    Args:
        key: Dot-separated path, e.g. "search.noResults"
        lang: Locale; uses settings.DEFAULT_LANG if None
        **params: Placeholder values, e.g. count=3

    Returns:
        Rendered string, or the key itself if missing from every catalog.
    """
    return default_resolver().t(key, lang or settings.DEFAULT_LANG, **params)
