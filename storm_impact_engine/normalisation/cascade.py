"""
Ordered rewrite cascade for event labels the matcher rejects.

The cascade is a single left fold over CASCADE_RULES: every rule sees the label
produced by the rules before it, not the original text.
"""

import logging
from functools import reduce
from typing import Sequence, Tuple

from ..patterns.cascade_rules import CASCADE_RULES
from .preprocess import normalize_label

logger = logging.getLogger(__name__)

Rule = Tuple[str, str]


class RuleCascade:
    """Applies substring-triggered label rewrites in a fixed order."""

    def __init__(self, rules: Sequence[Rule] = CASCADE_RULES):
        self.rules: Tuple[Rule, ...] = tuple(
            (normalize_label(trigger), normalize_label(replacement))
            for trigger, replacement in rules
        )

    @staticmethod
    def _apply(state: Tuple[str, Tuple[str, ...]], rule: Rule) -> Tuple[str, Tuple[str, ...]]:
        label, fired = state
        trigger, replacement = rule
        if trigger in label:
            return replacement, fired + (trigger,)
        return state

    def trace(self, label: str) -> Tuple[str, Tuple[str, ...]]:
        """
        Run the cascade and report which rules fired.

        Args:
            label: Event label (upper-cased before rules are tested)

        Returns:
            Tuple of (final_label, triggers_fired_in_order)
        """
        final_label, fired = reduce(self._apply, self.rules, (normalize_label(label), ()))
        if fired:
            logger.debug("Rewrote %r to %r via %s", label, final_label, list(fired))
        return final_label, fired

    def rewrite(self, label: str) -> str:
        """Return the label after every rule has been applied in order."""
        return self.trace(label)[0]
