"""Top-suggestion hysteresis.

A live display should not swap its top passage every cycle because of score
noise. The previous top keeps its place unless the new top beats it by at
least ``margin``. The caller supplies the previous top on each call; nothing
is remembered here.
"""

from __future__ import annotations

from collections.abc import Sequence

from versecue.corpus.models import RankedCandidate, Suggestion


def stabilize(
    ranked: Sequence[RankedCandidate],
    previous_top: Suggestion | None,
    margin: float = 0.05,
) -> list[RankedCandidate]:
    """Return ``ranked`` with the previous top restored to first place when
    the new top's lead is under ``margin``.

    The new top's *score* is compared against the previous top's reported
    *confidence*. If the previous top is no longer ranked, the new order
    stands.
    """
    result = list(ranked)
    if previous_top is None or not result:
        return result

    top = result[0]
    if top.unit.id == previous_top.id:
        return result
    if top.score - previous_top.confidence >= margin:
        return result

    for i, candidate in enumerate(result):
        if candidate.unit.id == previous_top.id:
            result.insert(0, result.pop(i))
            break
    return result
