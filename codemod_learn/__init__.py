"""
codemod_learn — turn an uncommitted change into a before/after example
for codemod generation.

Public API for library usage::

    from codemod_learn import learn_diff, LearnResult

    result = learn_diff(submit=False)
"""

from .api import learn_diff, LearnResult

__all__ = ["learn_diff", "LearnResult"]
