"""Future PE scenario: seed inputs, editable assumptions, projection."""

from __future__ import annotations

import datetime
import logging

from valuation.analysis.assumptions import (
    AnnualizedAssumption,
    AssumptionCascade,
    build_earnings_schedule,
)
from valuation.analysis.pe_projection import ProjectionPoint, calculate_pe_projection
from valuation.analysis.scenario_inputs import FuturePEInputs
from valuation.config import ProjectionConfig

logger = logging.getLogger(__name__)


class FuturePEScenario:
    """One ticker's future PE what-if.

    Anchor dates start from the known next earnings date when there is
    one, otherwise from the current price date (or today).

    Args:
        inputs: Scenario seed.
        config: Projection configuration.
        today: Fallback base date when inputs carry no current date.
    """

    def __init__(
        self,
        inputs: FuturePEInputs,
        config: ProjectionConfig | None = None,
        today: datetime.date | None = None,
    ) -> None:
        self.inputs = inputs
        self.config = config or ProjectionConfig()
        self.base_date = inputs.current_date or today or datetime.date.today()

        dates = build_earnings_schedule(
            self.base_date,
            inputs.next_earnings_date,
            quarters=self.config.quarters,
            months_between=self.config.months_between_reports,
        )
        self.cascade = AssumptionCascade(
            inputs.current_eps, inputs.growth_rate_pct, dates,
        )
        logger.info(
            "%s: scenario with %d anchors from %s",
            inputs.ticker, len(dates), dates[0] if dates else None,
        )

    @property
    def ticker(self) -> str:
        return self.inputs.ticker

    def projection(self) -> list[ProjectionPoint]:
        """Daily PE projection for the current assumptions."""
        return calculate_pe_projection(
            self.inputs.price,
            self.inputs.current_eps,
            self.cascade.assumptions,
            start_date=self.base_date,
        )

    def annualized_assumptions(self) -> list[AnnualizedAssumption]:
        return self.cascade.annualized()

    def edit_growth_at(
        self, date: datetime.date | str, annual_growth_pct: object
    ) -> None:
        self.cascade.edit_growth_at(date, annual_growth_pct)
