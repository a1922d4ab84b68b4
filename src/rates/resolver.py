"""Resolve the applicable award pay rate for a classification on a date."""

import logging
from collections.abc import Iterable
from datetime import date

from src.errors import AwardNotFound, ClassificationNotFound, NoApplicableRate, UpstreamMalformed
from src.fairwork.repository import AwardRepository
from src.rates.hierarchy import ClassificationTree, HierarchyError
from src.rates.modifiers import ModifierTable
from src.rates.models import Award, Classification, ClassificationSelector, PayRate, ResolvedRate

logger = logging.getLogger(__name__)


def select_snapshot(snapshots: Iterable[PayRate], as_of: date) -> PayRate | None:
    """Pick the rate snapshot that applies on ``as_of``.

    Prefers a snapshot whose [effective_from, effective_to) interval contains
    the date; failing that, the most recent one that started on or before
    it. Between snapshots starting on the same day the one running longest
    wins (open-ended beats any end date), so a later correction supersedes
    the earlier one. Returns None if nothing started on or before ``as_of``.
    """
    started = [(i, s) for i, s in enumerate(snapshots) if s.effective_from <= as_of]
    if not started:
        return None
    containing = [(i, s) for i, s in started if s.covers(as_of)]
    pool = containing or started

    def rank(item: tuple[int, PayRate]) -> tuple[date, date, int]:
        index, snap = item
        return (snap.effective_from, snap.effective_to or date.max, index)

    return max(pool, key=rank)[1]


def find_classification(award: Award, selector: ClassificationSelector) -> Classification:
    """Locate the classification a selector points at within ``award``.

    Raises:
        ClassificationNotFound: if nothing matches, or a year search matches
            more than one classification.
        UpstreamMalformed: if the award's classifications do not form a tree.
    """
    if selector.code:
        versions = award.versions_of(selector.code)
        if not versions:
            raise ClassificationNotFound(award.code, selector.describe())
        return max(versions, key=lambda c: c.valid_from)

    try:
        tree = ClassificationTree.from_classifications(award.classifications)
    except HierarchyError as e:
        logger.error("Award %s classifications are not a tree: %s", award.code, e)
        raise UpstreamMalformed(f"Award {award.code} classifications are not a tree: {e}") from e

    if selector.apprentice_year is None:
        raise ClassificationNotFound(award.code, selector.describe())
    if selector.parent_code is not None and selector.parent_code not in tree:
        raise ClassificationNotFound(award.code, selector.describe())

    matches = [
        node.classification
        for node in tree.descendants(selector.parent_code)
        if node.classification is not None
        and node.classification.year_of_experience == selector.apprentice_year
    ]
    if not matches:
        raise ClassificationNotFound(award.code, selector.describe())
    if len(matches) > 1:
        codes = ", ".join(c.code for c in matches)
        logger.info("Selector %s is ambiguous in award %s: %s", selector.describe(), award.code, codes)
        raise ClassificationNotFound(award.code, f"{selector.describe()} (ambiguous: {codes})")
    return matches[0]


class RateResolver:
    """Turns (award, classification selector, date) into a single pay rate.

    Award lookups go through the repository's cache. Apprentice modifiers are
    applied to the statutory base rate after the snapshot is chosen.
    """

    def __init__(self, repository: AwardRepository, modifiers: ModifierTable | None = None) -> None:
        self._repository = repository
        self._modifiers = modifiers or ModifierTable.empty()

    async def resolve(
        self,
        award_code: str,
        selector: ClassificationSelector,
        as_of: date,
    ) -> ResolvedRate:
        """Resolve a rate with full detail.

        Raises:
            AwardNotFound: the award code is unknown.
            ClassificationNotFound: no classification matches the selector.
            NoApplicableRate: no snapshot was in force on or before ``as_of``.
            UpstreamUnavailable, UpstreamMalformed: from the repository.
        """
        award = await self._repository.get_award(award_code)
        if award is None:
            logger.info("Award %s not found", award_code)
            raise AwardNotFound(award_code)

        classification = find_classification(award, selector)
        snapshots = await self._repository.get_pay_rates(award, classification.code, as_of)
        statutory = select_snapshot(snapshots, as_of)
        if statutory is None:
            logger.info(
                "No rate for %s/%s on %s (%d snapshots)",
                award_code, classification.code, as_of, len(snapshots),
            )
            raise NoApplicableRate(award_code, classification.code, as_of)

        adjusted, adjustments = self._modifiers.apply(award_code, selector, statutory.base_rate)
        pay_rate = statutory.model_copy(update={"base_rate": adjusted})

        logger.info(
            "Resolved %s/%s on %s: base %s, adjusted %s",
            award_code, classification.code, as_of, statutory.base_rate, adjusted,
        )
        return ResolvedRate(
            award_code=award_code,
            classification_code=classification.code,
            classification_name=classification.name,
            as_of=as_of,
            statutory_rate=statutory,
            pay_rate=pay_rate,
            adjustments=adjustments,
        )

    async def resolve_rate(
        self,
        award_code: str,
        selector: ClassificationSelector,
        as_of: date,
    ) -> PayRate:
        """The applicable pay rate, modifiers included."""
        resolved = await self.resolve(award_code, selector, as_of)
        return resolved.pay_rate
