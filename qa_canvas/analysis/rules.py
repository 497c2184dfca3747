"""
Keyword rule tables for ticket analysis.

Each rule maps a case-insensitive pattern to a signal with a weight. Category
signals drive configuration-conflict detection; ``complexity_high`` and
``complexity_low`` drive test complexity estimation. Add rules here rather
than in the analyzer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Pattern


@dataclass(frozen=True)
class KeywordRule:
    pattern: Pattern[str]
    signal: str
    weight: int = 1

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _rule(regex: str, signal: str, weight: int = 1) -> KeywordRule:
    return KeywordRule(pattern=re.compile(regex, re.IGNORECASE), signal=signal, weight=weight)


API = "api"
SECURITY = "security"
MOBILE = "mobile"
DATABASE = "database"
PERFORMANCE = "performance"
ACCESSIBILITY = "accessibility"
USER_STORY_TYPE = "user_story_type"
DEFECT_TYPE = "defect_type"
DATA_HEAVY = "data_heavy"
COMPLEXITY_HIGH = "complexity_high"
COMPLEXITY_LOW = "complexity_low"


# Applied to summary + description
CONTENT_RULES: List[KeywordRule] = [
    _rule(r"\bapis?\b", API),
    _rule(r"\bendpoints?\b", API),
    _rule(r"\brestful\b|\brest (api|endpoint|service)s?\b", API),
    _rule(r"\bgraphql\b", API),
    _rule(r"\bwebhooks?\b", API),
    _rule(r"\bmicroservices?\b", API),
    _rule(r"\bauth(entication|entic\w*|orization|orize\w*)?\b", SECURITY),
    _rule(r"\boauth\d*\b", SECURITY),
    _rule(r"\blog ?ins?\b", SECURITY),
    _rule(r"\bsign[- ]?in\b", SECURITY),
    _rule(r"\bpasswords?\b", SECURITY),
    _rule(r"\bcredentials?\b", SECURITY),
    _rule(r"\bsecur(e|ity)\b", SECURITY),
    _rule(r"\btokens?\b", SECURITY),
    _rule(r"\bpermissions?\b", SECURITY),
    _rule(r"\bencrypt\w*", SECURITY),
    _rule(r"\bsso\b", SECURITY),
    _rule(r"\bmobile\b", MOBILE),
    _rule(r"\bresponsive\b", MOBILE),
    _rule(r"\btablets?\b", MOBILE),
    _rule(r"\bphones?\b", MOBILE),
    _rule(r"\bios\b", MOBILE),
    _rule(r"\bandroid\b", MOBILE),
    _rule(r"\btouch\b", MOBILE),
    _rule(r"\bswipe\b", MOBILE),
    _rule(r"\bviewports?\b", MOBILE),
    _rule(r"\bdatabases?\b", DATABASE),
    _rule(r"\bsql\b", DATABASE),
    _rule(r"\bmigrations?\b", DATABASE),
    _rule(r"\bschema\b", DATABASE),
    _rule(r"\bqueries\b|\bquery\b", DATABASE),
    _rule(r"\bstored procedures?\b", DATABASE),
    _rule(r"\bperformance\b", PERFORMANCE),
    _rule(r"\bslow(ness)?\b", PERFORMANCE),
    _rule(r"\blatency\b", PERFORMANCE),
    _rule(r"\bthroughput\b", PERFORMANCE),
    _rule(r"\btimeouts?\b", PERFORMANCE),
    _rule(r"\bcach(e|ing)\b", PERFORMANCE),
    _rule(r"\bload (test|time)s?\b", PERFORMANCE),
    _rule(r"\baccessib(le|ility)\b", ACCESSIBILITY),
    _rule(r"\ba11y\b", ACCESSIBILITY),
    _rule(r"\bwcag\b", ACCESSIBILITY),
    _rule(r"\bscreen readers?\b", ACCESSIBILITY),
    _rule(r"\baria\b", ACCESSIBILITY),
    _rule(r"\bcontrast\b", ACCESSIBILITY),
    _rule(r"\balt text\b", ACCESSIBILITY),
    _rule(r"\bimport(s|ing)?\b", DATA_HEAVY),
    _rule(r"\bexport(s|ing)?\b", DATA_HEAVY),
    _rule(r"\bbatch\b", DATA_HEAVY),
    _rule(r"\bcsv\b", DATA_HEAVY),
]

# Applied to each component name
COMPONENT_RULES: List[KeywordRule] = [
    _rule(r"\bapi\b", API),
    _rule(r"\bbackend\b", API),
    _rule(r"\bauth\w*", SECURITY),
    _rule(r"\bmobile\b", MOBILE),
    _rule(r"\bios\b|\bandroid\b", MOBILE),
    _rule(r"\bdatabase\b|\bdb\b", DATABASE),
]

# Applied to the issue type
ISSUE_TYPE_RULES: List[KeywordRule] = [
    _rule(r"\bstory\b|\bfeature\b|\bepic\b", USER_STORY_TYPE),
    _rule(r"\bbug\b|\bdefect\b|\bincident\b", DEFECT_TYPE),
]

COMPLEXITY_RULES: List[KeywordRule] = [
    _rule(r"\bintegrations?\b", COMPLEXITY_HIGH, 2),
    _rule(r"\bmultiple (external )?systems\b", COMPLEXITY_HIGH, 2),
    _rule(r"\bcomplex(ity)?\b", COMPLEXITY_HIGH, 2),
    _rule(r"\bworkflows?\b", COMPLEXITY_HIGH, 1),
    _rule(r"\bend[- ]to[- ]end\b", COMPLEXITY_HIGH, 1),
    _rule(r"\btypos?\b", COMPLEXITY_LOW, 2),
    _rule(r"\btext fix\b", COMPLEXITY_LOW, 2),
    _rule(r"\bsimple\b", COMPLEXITY_LOW, 1),
    _rule(r"\bminor\b", COMPLEXITY_LOW, 1),
    _rule(r"\bwording\b", COMPLEXITY_LOW, 1),
]

PROBLEM = "problem"
ACTIONABLE = "actionable"

# Problem wording in a summary marks a ticket as describing a defect
PROBLEM_RULES: List[KeywordRule] = [
    _rule(r"\bbugs?\b", PROBLEM),
    _rule(r"\berrors?\b", PROBLEM),
    _rule(r"\bproblems?\b", PROBLEM),
    _rule(r"\bfail(s|ed|ing|ure)?\b", PROBLEM),
    _rule(r"\bbroken\b", PROBLEM),
    _rule(r"\bcrash(es|ed|ing)?\b", PROBLEM),
    _rule(r"\bnot working\b", PROBLEM),
    _rule(r"\bunable to\b", PROBLEM),
    _rule(r"\bcannot\b|\bcan't\b", PROBLEM),
    _rule(r"\bdoes not\b|\bdoesn't\b", PROBLEM),
    _rule(r"\bincorrect(ly)?\b", PROBLEM),
]

# Actionable language in comments and descriptions; weights rank candidate snippets
ACTIONABLE_RULES: List[KeywordRule] = [
    _rule(r"\bfix(es|ed|ing)?\b", ACTIONABLE, 2),
    _rule(r"\bresolv(e|es|ed|ing)\b", ACTIONABLE, 2),
    _rule(r"\bsolution\b", ACTIONABLE, 2),
    _rule(r"\bimplement(s|ed|ing)?\b", ACTIONABLE),
    _rule(r"\badd(s|ed|ing)?\b", ACTIONABLE),
    _rule(r"\bchang(e|es|ed|ing)\b", ACTIONABLE),
    _rule(r"\bupdat(e|es|ed|ing)\b", ACTIONABLE),
    _rule(r"\bmodif(y|ies|ied|ying)\b", ACTIONABLE),
]

# Description length thresholds for complexity estimation
LONG_DESCRIPTION_CHARS = 2000
LONG_DESCRIPTION_WEIGHT = 2
SHORT_DESCRIPTION_CHARS = 20
SHORT_DESCRIPTION_WEIGHT = 1


def signal_weights(rules: Iterable[KeywordRule], text: str) -> Dict[str, int]:
    """Sum rule weights per signal over the rules that match ``text``"""
    weights: Dict[str, int] = {}
    for rule in rules:
        if rule.matches(text):
            weights[rule.signal] = weights.get(rule.signal, 0) + rule.weight
    return weights


def signals(rules: Iterable[KeywordRule], texts: Iterable[str]) -> set:
    found = set()
    for text in texts:
        found.update(signal_weights(rules, text))
    return found
