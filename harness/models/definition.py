"""Static description of a test before it runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from harness.models.types import TestCase

TestLogic = Callable[[TestCase], Awaitable[None]]
Validator = Callable[[TestCase], tuple[bool, str]]


@dataclass(frozen=True)
class TestDefinition:
    __test__ = False

    id: str
    description: str
    technique: str
    input: str
    expected: str
    logic: TestLogic
    validator: Validator | None = None
    category: str | None = None
    type_label: str | None = None
    name: str | None = None

    @property
    def title(self) -> str:
        return self.name or self.description

    def new_test_case(self) -> TestCase:
        return TestCase(
            id=self.id,
            description=self.description,
            technique=self.technique,
            category=self.category,
            type_label=self.type_label,
            input=self.input,
            expected=self.expected,
        )
