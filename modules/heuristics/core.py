"""Pattern heuristics — fast local pre-classification from surface cues.

Pure functions, no I/O. ``detect_code_patterns`` extracts boolean cues from
the source text; ``heuristic_classify`` runs a fixed, ordered decision list
over them and returns the first matching class, or None.

Cues understand Python (``def``, ``//``, ``heapq``, ``deque.popleft``, tuple
swaps) and C-family syntax (``function``, ``Math.floor``, ``>>``,
destructuring swaps). Malformed, minified, unicode or very long input never
raises.
"""

from __future__ import annotations

import ast
import logging
import re

from domain.models import CodePatterns, ProblemClass

logger = logging.getLogger("auditor.heuristics")


def _term(*alternatives: str) -> re.Pattern[str]:
    """Compile whole-word alternatives where ``_`` also separates words."""
    body = "|".join(alternatives)
    return re.compile(rf"(?<![^\W_])(?:{body})(?![^\W_])", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Cue patterns
# ---------------------------------------------------------------------------

_ARROWS = re.compile(r"->|=>")
_COMPARISON = re.compile(r"<=|>=|==|!=|(?<![<>])[<>](?![<>=])")
_LOOP = re.compile(r"\b(?:for|while)\b|\bdo\s*\{")
_GRAPH = _term(
    "graph",
    "vertex",
    "vertices",
    "edges?",
    "nodes?",
    "neighbou?rs?",
    r"adjacen\w*",
    "adj",
)
_HASH_ACCESS = re.compile(
    r"\b(?:dict|set|defaultdict|Counter|OrderedDict|Map|Set|Object)\b"
    r"|\.get\(|\{\s*\}|\w+\[[^\]\n]+\]\s*=(?!=)"
)
_SWAP = re.compile(
    r"\w+\[[^\]\n]+\]\s*,\s*\w+\[[^\]\n]+\]\s*=(?!=)"  # a[i], a[j] = a[j], a[i]
    r"|\[\s*\w+\[[^\]\n]+\]\s*,\s*\w+\[[^\]\n]+\]\s*\]\s*=(?!=)"  # [a[i], a[j]] = ...
    r"|(?<![^\W_])swap\w*",
    re.IGNORECASE,
)
_QUEUE = re.compile(
    r"popleft|appendleft|\bdeque\b|\benqueue\b|\bdequeue\b|\.shift\(|\.pop\(0\)"
    r"|(?<![A-Za-z])(?<![Pp]riority_)[Qq]ueue(?![a-z])"
)
_STACK = re.compile(r"(?<![A-Za-z])[Ss]tack(?![a-z])|\.pop\(\)|\.push\(")

_DEF_NAME = re.compile(r"\b(?:def|function)\s+([^\W\d]\w*)")

# ---------------------------------------------------------------------------
# Rule vocabulary
# ---------------------------------------------------------------------------

_PRIORITY = _term("dijkstra", "priority", r"heap\w*", "pq")
_PATTERN_WORD = _term("pattern", "pat", "needle")
_TEXT_WORD = _term("text", "txt", "haystack")
_KMP_WORD = _term(r"failure\w*", r"prefix\w*", "lps", "kmp", "pi")
_MATRIX_WORD = re.compile(
    r"(?<![^\W_])(?:matrix|matrices|mat)(?![^\W_])|\[\s*\[|(?<![^\W_])rows?(?![^\W_]).*(?<![^\W_])cols?(?![^\W_])",
    re.IGNORECASE,
)
_MULTIPLY = re.compile(r"\*|@|(?<![^\W_])(?:multiply|matmul|dot)(?![^\W_])", re.IGNORECASE)
_TREE_WORD = _term("left", "right", "parent", "child", "children", "tree", "node", "root")
_SORT_WORD = _term(r"sort\w*")
_MIDPOINT_WORD = _term("mid", "middle", "low", "high", "lo", "hi", "left", "right")
_HALVING = re.compile(r"Math\.floor|>>\s*1|//\s*2|/\s*2")
_SEARCH_WORD = _term(r"find\w*", "indexOf", "index", r"search\w*", "includes", "contains", "locate")
_MEDIAN_WORD = _term("median", r"select\w*", "kth", "partition", "quickselect", "nth")


# ---------------------------------------------------------------------------
# Pattern detection
# ---------------------------------------------------------------------------


def _calls_itself(func: ast.FunctionDef | ast.AsyncFunctionDef) -> bool:
    """True if *func*'s body calls *func* by name or as ``self.name`` / ``cls.name``."""
    for node in ast.walk(func):
        if not isinstance(node, ast.Call) or node is func:
            continue
        target = node.func
        if isinstance(target, ast.Name) and target.id == func.name:
            return True
        if (
            isinstance(target, ast.Attribute)
            and target.attr == func.name
            and isinstance(target.value, ast.Name)
            and target.value.id in ("self", "cls")
        ):
            return True
    return False


def _has_recursion(code: str) -> bool:
    """Detect a function that calls itself.

    Python source is inspected with ``ast``; anything that does not parse
    falls back to "a defined name is called again after its definition".
    """
    try:
        tree = ast.parse(code)
    except (SyntaxError, ValueError, RecursionError):
        for match in _DEF_NAME.finditer(code):
            name = re.escape(match.group(1))
            if re.search(rf"(?<![\w.]){name}\s*\(", code[match.end() :]):
                return True
        return False

    return any(
        _calls_itself(node)
        for node in ast.walk(tree)
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef))
    )


def detect_code_patterns(code: str) -> CodePatterns:
    """Extract surface syntactic cues from *code*.

    Args:
        code: Source text of any language; may be empty or malformed.

    Returns:
        A ``CodePatterns`` with one flag per cue.
    """
    without_arrows = _ARROWS.sub(" ", code)
    return CodePatterns(
        has_comparisons=bool(_COMPARISON.search(without_arrows)),
        has_graph_structure=bool(_GRAPH.search(code)),
        has_recursion=_has_recursion(code),
        has_loops=bool(_LOOP.search(code)),
        has_hash_access=bool(_HASH_ACCESS.search(code)),
        has_array_swaps=bool(_SWAP.search(code)),
        has_queue_operations=bool(_QUEUE.search(code)),
        has_stack_operations=bool(_STACK.search(code)),
    )


# ---------------------------------------------------------------------------
# Decision list
# ---------------------------------------------------------------------------


def heuristic_classify(code: str, patterns: CodePatterns | None = None) -> ProblemClass | None:
    """Propose a problem class from surface cues; first matching rule wins.

    Args:
        code: Source text.
        patterns: Pre-computed cues; detected from *code* when omitted.

    Returns:
        The proposed class, or None when no rule matches.
    """
    p = patterns if patterns is not None else detect_code_patterns(code)
    result = _decide(code, p)
    logger.debug("Heuristic classification: %s", result.value if result else "no match")
    return result


def _decide(code: str, p: CodePatterns) -> ProblemClass | None:
    if p.has_graph_structure:
        if p.has_queue_operations:
            return ProblemClass.GRAPH_BFS
        if p.has_stack_operations or p.has_recursion:
            return ProblemClass.GRAPH_DFS
        if _PRIORITY.search(code):
            return ProblemClass.SHORTEST_PATH_DIJKSTRA

    if _PATTERN_WORD.search(code) and _TEXT_WORD.search(code):
        if _KMP_WORD.search(code):
            return ProblemClass.STRING_MATCH_KMP
        return ProblemClass.STRING_MATCH_NAIVE

    if _MATRIX_WORD.search(code) and _MULTIPLY.search(code):
        return ProblemClass.MATRIX_MULTIPLY

    if _TREE_WORD.search(code) and p.has_recursion and not _SORT_WORD.search(code):
        return ProblemClass.TREE_TRAVERSAL

    if p.has_array_swaps and p.has_comparisons and p.has_loops and _SORT_WORD.search(code):
        return ProblemClass.COMPARISON_SORT

    if _MIDPOINT_WORD.search(code) and _HALVING.search(code) and p.has_comparisons:
        return ProblemClass.BINARY_SEARCH

    if _SEARCH_WORD.search(code) and p.has_loops and not p.has_recursion:
        return ProblemClass.LINEAR_SEARCH

    if p.has_hash_access and not p.has_loops:
        return ProblemClass.HASH_LOOKUP

    if _MEDIAN_WORD.search(code):
        return ProblemClass.MEDIAN_FINDING

    return None
