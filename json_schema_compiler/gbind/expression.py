"""
Regular expressions over the properties of a content model.

Each property occurrence is an ``Element``. Expressions know their first and
last elements, whether they accept the empty sequence, and which elements may
follow each other; that is all ``Graph`` needs to build the automaton.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class Expression(ABC):
    """A regular expression over elements."""

    @property
    @abstractmethod
    def nullable(self) -> bool:
        """Whether the expression matches the empty sequence."""

    @abstractmethod
    def first(self) -> dict[Element, None]:
        """Elements that can start a match, as an insertion ordered set."""

    @abstractmethod
    def last(self) -> dict[Element, None]:
        """Elements that can end a match, as an insertion ordered set."""

    @abstractmethod
    def build_follow(self, follow: dict[Element, dict[Element, None]]) -> None:
        """Record, for each element, the elements that may come right after it."""

    @abstractmethod
    def elements(self) -> list[Element]:
        """All elements, left to right."""


@dataclass(eq=False)
class Element(Expression):
    """One occurrence of a property. Two elements with the same name are distinct."""

    name: str

    @property
    def nullable(self) -> bool:
        return False

    def first(self) -> dict[Element, None]:
        return {self: None}

    def last(self) -> dict[Element, None]:
        return {self: None}

    def build_follow(self, follow: dict[Element, dict[Element, None]]) -> None:
        follow.setdefault(self, {})

    def elements(self) -> list[Element]:
        return [self]

    def __str__(self) -> str:
        return self.name


class Epsilon(Expression):
    """Matches only the empty sequence."""

    @property
    def nullable(self) -> bool:
        return True

    def first(self) -> dict[Element, None]:
        return {}

    def last(self) -> dict[Element, None]:
        return {}

    def build_follow(self, follow: dict[Element, dict[Element, None]]) -> None:
        pass

    def elements(self) -> list[Element]:
        return []

    def __str__(self) -> str:
        return "#epsilon"


EPSILON = Epsilon()


@dataclass(eq=False)
class Sequence(Expression):
    """``left`` followed by ``right``."""

    left: Expression
    right: Expression

    @property
    def nullable(self) -> bool:
        return self.left.nullable and self.right.nullable

    def first(self) -> dict[Element, None]:
        result = self.left.first()
        if self.left.nullable:
            result.update(self.right.first())
        return result

    def last(self) -> dict[Element, None]:
        result = self.right.last()
        if self.right.nullable:
            result.update(self.left.last())
        return result

    def build_follow(self, follow: dict[Element, dict[Element, None]]) -> None:
        self.left.build_follow(follow)
        self.right.build_follow(follow)
        right_first = self.right.first()
        for element in self.left.last():
            follow.setdefault(element, {}).update(right_first)

    def elements(self) -> list[Element]:
        return self.left.elements() + self.right.elements()

    def __str__(self) -> str:
        return f"{self.left},{self.right}"


@dataclass(eq=False)
class Choice(Expression):
    """Either ``left`` or ``right``."""

    left: Expression
    right: Expression

    @property
    def nullable(self) -> bool:
        return self.left.nullable or self.right.nullable

    def first(self) -> dict[Element, None]:
        result = self.left.first()
        result.update(self.right.first())
        return result

    def last(self) -> dict[Element, None]:
        result = self.left.last()
        result.update(self.right.last())
        return result

    def build_follow(self, follow: dict[Element, dict[Element, None]]) -> None:
        self.left.build_follow(follow)
        self.right.build_follow(follow)

    def elements(self) -> list[Element]:
        return self.left.elements() + self.right.elements()

    def __str__(self) -> str:
        return f"({self.left}|{self.right})"


@dataclass(eq=False)
class OneOrMore(Expression):
    """One or more repetitions of ``child``."""

    child: Expression

    @property
    def nullable(self) -> bool:
        return self.child.nullable

    def first(self) -> dict[Element, None]:
        return self.child.first()

    def last(self) -> dict[Element, None]:
        return self.child.last()

    def build_follow(self, follow: dict[Element, dict[Element, None]]) -> None:
        self.child.build_follow(follow)
        child_first = self.child.first()
        for element in self.child.last():
            follow.setdefault(element, {}).update(child_first)

    def elements(self) -> list[Element]:
        return self.child.elements()

    def __str__(self) -> str:
        return f"({self.child})+"


def sequence(*expressions: Expression) -> Expression:
    """Concatenate ``expressions``, dropping epsilons."""
    result: Expression = EPSILON
    for expression in expressions:
        if expression is EPSILON:
            continue
        result = expression if result is EPSILON else Sequence(result, expression)
    return result


def optional(expression: Expression) -> Expression:
    """Match ``expression`` or nothing."""
    if expression.nullable:
        return expression
    return Choice(expression, EPSILON)
