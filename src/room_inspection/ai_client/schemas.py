"""Structured output schemas for the text oracle."""

from __future__ import annotations

GRADES = ["A", "B", "C"]


def refine_schema() -> dict:
    return {
        "name": "refine_result",
        "schema": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "title": {"type": "string"},
                "note": {"type": "string"},
                "grade": {"type": "string", "enum": GRADES},
            },
            "required": ["title", "note", "grade"],
        },
        "strict": True,
    }
