"""Self-healing of asymmetric citation edges inside the selected set.

If A lists B in its bibliography and both are selected, B must list A as a
citing publication, and vice versa. Input data only guarantees this
eventually, so the repair runs before any counting and is idempotent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from refgraph.models import PublicationRecord
from refgraph.utils.structured_log import log_citation_repair

logger = logging.getLogger(__name__)


@dataclass
class CitationRepairReport:
    """Edges added by one repair pass, as (citing_doi, cited_doi) pairs."""

    added_cites_in: list[tuple[str, str]] = field(default_factory=list)
    added_cites_out: list[tuple[str, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.added_cites_in) + len(self.added_cites_out)


def repair_citation_links(
    selected: Sequence[PublicationRecord],
) -> tuple[list[PublicationRecord], CitationRepairReport]:
    """Return repaired copies of the selected publications plus a report.

    The input records are not modified. Running the repair on its own output
    adds nothing.
    """
    repaired = [publication.model_copy(deep=True) for publication in selected]
    by_doi = {publication.doi: publication for publication in repaired}
    report = CitationRepairReport()

    for publication in repaired:
        for doi in publication.cites_out:
            target = by_doi.get(doi)
            if target is not None and target is not publication and publication.doi not in target.cites_in:
                target.cites_in.append(publication.doi)
                report.added_cites_in.append((publication.doi, doi))
        for doi in publication.cites_in:
            source = by_doi.get(doi)
            if source is not None and source is not publication and publication.doi not in source.cites_out:
                source.cites_out.append(publication.doi)
                report.added_cites_out.append((doi, publication.doi))

    if report.total:
        logger.info(
            "Citation repair: added %d citing and %d cited links among %d selected publications",
            len(report.added_cites_in),
            len(report.added_cites_out),
            len(repaired),
        )
        log_citation_repair(
            len(report.added_cites_in),
            len(report.added_cites_out),
            report.added_cites_in + report.added_cites_out,
        )
    return repaired, report
