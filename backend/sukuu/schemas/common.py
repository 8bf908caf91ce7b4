from typing import Annotated

from pydantic import BeforeValidator


def blank_to_none(value: object) -> object:
    """Treat empty and whitespace-only strings as an absent value."""
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


# Applied to every optional text field so "" from a form means "not provided".
OptionalText = Annotated[str | None, BeforeValidator(blank_to_none)]

ACADEMIC_YEAR_PATTERN = r"^\d{4}-\d{4}$"
OptionalNumber = Annotated[float | None, BeforeValidator(blank_to_none)]
