"""
Validation window.

Result of one validator pass: the outcome for every block number that
was re-checked, in ascending order.
"""

from dataclasses import dataclass, field
from enum import StrEnum

from loguru import logger


class ValidationOutcome(StrEnum):
    """Outcome of re-checking one block number."""

    VALIDATED = "validated"  # Stored hash matches the node
    INVALID = "invalid"  # Missing or stale, overwritten from the node
    FETCH_ERROR = "fetch_error"  # Node fetch or overwrite failed, storage untouched


@dataclass(frozen=True)
class ValidationWindow:
    """Ordered (block_number, outcome) pairs from one validator pass."""

    results: tuple[tuple[int, ValidationOutcome], ...] = field(default=())

    @property
    def lower_bound(self) -> int | None:
        return self.results[0][0] if self.results else None

    @property
    def upper_bound(self) -> int | None:
        return self.results[-1][0] if self.results else None

    @property
    def block_numbers(self) -> list[int]:
        return [number for number, _ in self.results]

    def numbers_with(self, outcome: ValidationOutcome) -> list[int]:
        """Block numbers that ended with the given outcome."""
        return [number for number, result in self.results if result is outcome]

    def outcome_for(self, number: int) -> ValidationOutcome | None:
        for block_number, outcome in self.results:
            if block_number == number:
                return outcome
        return None

    def render(self) -> list[str]:
        """
        Render the window as report lines.

        Returns:
            Header line followed by one ``<number> <outcome>`` line per block
        """
        if not self.results:
            return ["Validating blocks: window empty"]
        lines = [f"Validating blocks {self.lower_bound} -- {self.upper_bound}"]
        lines.extend(f"{number} {outcome}" for number, outcome in self.results)
        return lines

    def log(self) -> None:
        """Write the rendered window to the operator log."""
        header, *rows = self.render()
        invalid = len(self.numbers_with(ValidationOutcome.INVALID))
        errors = len(self.numbers_with(ValidationOutcome.FETCH_ERROR))
        logger.info(f"[Validator] {header} (invalid={invalid}, errors={errors})")
        for row in rows:
            logger.info(f"[Validator] {row}")
