from dataclasses import dataclass

from wall_quote.core.config import DEFAULT_COST_RATE


def calculate_cost(width: float, height: float, rate: float = DEFAULT_COST_RATE) -> float:
    area = width * height
    return area * rate


@dataclass(frozen=True)
class CostCalculator:
    rate: float = DEFAULT_COST_RATE

    def cost(self, width: float, height: float) -> float:
        return calculate_cost(width, height, self.rate)
