"""
validation.py

Responsibility: Validate the three mandatory invocation parameters before any
side effect happens.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from bootstrapper.errors import ValidationError

KEBAB_CASE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


class Stack(str, enum.Enum):
    FASTAPI = "fastapi"
    NODEJS = "nodejs"
    REACT = "react"
    FULLSTACK = "fullstack"

    @classmethod
    def choices(cls) -> list[str]:
        return [s.value for s in cls]


@dataclass(frozen=True)
class InvocationParams:
    name: str
    stack: Stack
    description: str


def is_kebab_case(name: str) -> bool:
    return bool(KEBAB_CASE.fullmatch(name))


def database_name(project_name: str) -> str:
    """`my-awesome-app` -> `my_awesome_app_db`."""
    return f"{project_name.replace('-', '_')}_db"


def validate_project_name(name: str) -> str:
    if not is_kebab_case(name):
        raise ValidationError("Project name must be in kebab-case (e.g., my-awesome-project)")
    return name


def validate_params(name: str | None, stack: str | None, description: str | None) -> InvocationParams:
    """
    Check presence first (in name, stack, description order), then the stack
    enumeration, then the name pattern. The first failure wins.
    """
    name = name or ""
    stack = (stack or "").strip()
    description = (description or "").strip()

    if not name:
        raise ValidationError("Project name is required")
    if not stack:
        raise ValidationError("Stack is required")
    if not description:
        raise ValidationError("Description is required")

    if stack not in Stack.choices():
        raise ValidationError(f"Invalid stack. Must be one of: {', '.join(Stack.choices())}")

    validate_project_name(name)
    return InvocationParams(name=name, stack=Stack(stack), description=description)
