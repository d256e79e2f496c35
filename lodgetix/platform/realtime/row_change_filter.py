"""
Row-change filter expressions.

Grammar: `<column>=<op>.<value>` clauses joined by ` AND `, for example
`eventid=eq.E1 AND ticketdefinitionid=eq.T1`. Supported ops are eq, neq,
lt, lte, gt, gte and in (`status=in.(reserved,sold)`).
"""

import re
from typing import Any, Callable

import attrs

from lodgetix.platform.exception.exceptions import DomainError


_CLAUSE = re.compile(r'^\s*(?P<column>[A-Za-z_][A-Za-z0-9_]*)=(?P<op>[a-z]+)\.(?P<value>.*?)\s*$')
_AND = re.compile(r'\s+AND\s+', re.IGNORECASE)


def _as_number(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, str], bool]:
    def check(actual: Any, expected: str) -> bool:
        if actual is None:
            return False
        left, right = _as_number(actual), _as_number(expected)
        if left is not None and right is not None:
            return compare(left, right)
        return compare(str(actual), expected)

    return check


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return '' if value is None else str(value)


_OPERATORS: dict[str, Callable[[Any, str], bool]] = {
    'eq': lambda actual, expected: _text(actual) == expected,
    'neq': lambda actual, expected: _text(actual) != expected,
    'lt': _ordered(lambda a, b: a < b),
    'lte': _ordered(lambda a, b: a <= b),
    'gt': _ordered(lambda a, b: a > b),
    'gte': _ordered(lambda a, b: a >= b),
    'in': lambda actual, expected: _text(actual)
    in {item.strip() for item in expected.strip('()').split(',')},
}


@attrs.define(frozen=True)
class FilterClause:
    column: str
    op: str
    value: str

    def matches(self, record: dict[str, Any]) -> bool:
        return _OPERATORS[self.op](record.get(self.column), self.value)


@attrs.define(frozen=True)
class RowChangeFilter:
    clauses: tuple[FilterClause, ...] = ()

    @classmethod
    def parse(cls, expression: str | None) -> 'RowChangeFilter':
        if not expression or not expression.strip():
            return cls()

        clauses = []
        for raw in _AND.split(expression.strip()):
            match = _CLAUSE.match(raw)
            if not match or match['op'] not in _OPERATORS:
                raise DomainError(f'Invalid row change filter clause: {raw!r}')
            clauses.append(
                FilterClause(column=match['column'], op=match['op'], value=match['value'])
            )
        return cls(clauses=tuple(clauses))

    def matches(self, record: dict[str, Any]) -> bool:
        return all(clause.matches(record) for clause in self.clauses)
