# core/diff.py
from typing import Iterable, List, Tuple


def diff_item_ids(
    previous: Iterable[str], confirmed: Iterable[str]
) -> Tuple[List[str], List[str]]:
    """
    Compare the ids an owner tracked before a sync with the ids the catalog
    confirmed.
    Returns:
      (added, pruned), each in first-seen order without duplicates.
    `added` should always be empty: the catalog only answers for ids it was asked about.
    """
    old_ids = list(dict.fromkeys(previous))
    new_ids = list(dict.fromkeys(confirmed))
    old_set = set(old_ids)
    new_set = set(new_ids)

    added = [iid for iid in new_ids if iid not in old_set]
    pruned = [iid for iid in old_ids if iid not in new_set]
    return added, pruned
