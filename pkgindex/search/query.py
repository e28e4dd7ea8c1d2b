"""
Predicate trees for document queries.

A query is a tree of ``Term`` leaves combined by ``And`` / ``Or`` nodes.
``compile_query`` turns a ``SearchOptions`` into one tree; the storage
engine decides how to evaluate it.

Combination rules per filter category:

- patterns:  content match, each term ANDed
- keywords:  content | restpath | package match, each keyword ANDed
- packages:  package match, terms ORed into one clause
- paths:     path match, each term ANDed
- restpaths: restpath match, each term ANDed
- suffixes:  suffix match, terms ORed into one clause

Categories are ANDed together. An empty category adds no clause, and an
``And`` with no children selects every document.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from pkgindex.models.search import SearchOptions


@dataclass(frozen=True)
class Term:
    """Match ``value`` against ``field``.

    Token matches succeed when the indexed field text contains ``value``;
    exact matches require the whole field to equal it.
    """

    field: str
    value: str
    exact: bool = False


@dataclass(frozen=True)
class And:
    children: Tuple["Predicate", ...] = ()


@dataclass(frozen=True)
class Or:
    children: Tuple["Predicate", ...] = ()


Predicate = Union[Term, And, Or]

MATCH_ALL = And()


def all_of(*predicates: Predicate) -> And:
    return And(tuple(predicates))


def any_of(field: str, values: Iterable[str]) -> Or:
    return Or(tuple(Term(field, v) for v in values))


def equals(field: str, value: str) -> Term:
    return Term(field, value, exact=True)


def compile_query(options: SearchOptions) -> And:
    """Build the predicate tree selecting documents for ``options``."""
    clauses = []

    clauses.extend(Term("content", word) for word in options.patterns)

    for word in options.keywords:
        clauses.append(any_of_fields(word, ("content", "restpath", "package")))

    if options.packages:
        clauses.append(any_of("package", options.packages))

    clauses.extend(Term("path", word) for word in options.paths)
    clauses.extend(Term("restpath", word) for word in options.restpaths)

    if options.suffixes:
        clauses.append(any_of("suffix", options.suffixes))

    return And(tuple(clauses))


def any_of_fields(value: str, fields: Iterable[str]) -> Or:
    return Or(tuple(Term(f, value) for f in fields))
