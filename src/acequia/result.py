from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from acequia.allocation.controller import TerminationReason
    from acequia.allocation.engine import Transfer

TRANSFER_COLUMNS = ["hour", "canal_id", "donor_id", "recipient_id", "source_id", "amount", "flow_rate"]
HOURLY_COLUMNS = ["hour", "transfers", "volume", "dequeues", "loop_cap_hit", "unmet_deficit"]


@dataclass(frozen=True, slots=True)
class HourReport:
    hour: int
    transfers: tuple[Transfer, ...]
    dequeues: int
    loop_cap_hit: bool
    unmet_deficit: float  # network deficit left after the hour's matching

    @property
    def volume(self) -> float:
        return sum(t.amount for t in self.transfers)


@dataclass(frozen=True, slots=True)
class SimulationResult:
    termination: TerminationReason | None
    hours_run: int
    reports: tuple[HourReport, ...]
    final_deficit: float

    @property
    def transfers(self) -> list[Transfer]:
        return [t for report in self.reports for t in report.transfers]

    @property
    def total_transferred(self) -> float:
        return sum(t.amount for t in self.transfers)

    @property
    def loop_cap_hours(self) -> list[int]:
        """Hours whose matching was cut short by the dequeue cap."""
        return [r.hour for r in self.reports if r.loop_cap_hit]

    def to_dataframe(self) -> pd.DataFrame:
        """One row per executed transfer."""
        rows = [
            {
                "hour": t.hour,
                "canal_id": t.canal_id,
                "donor_id": t.donor_id,
                "recipient_id": t.recipient_id,
                "source_id": t.source_id,
                "amount": t.amount,
                "flow_rate": t.flow_rate,
            }
            for t in self.transfers
        ]
        return pd.DataFrame(rows, columns=TRANSFER_COLUMNS)

    def hourly_frame(self) -> pd.DataFrame:
        """One row per simulated hour, indexed by hour."""
        rows = [
            {
                "hour": r.hour,
                "transfers": len(r.transfers),
                "volume": r.volume,
                "dequeues": r.dequeues,
                "loop_cap_hit": r.loop_cap_hit,
                "unmet_deficit": r.unmet_deficit,
            }
            for r in self.reports
        ]
        return pd.DataFrame(rows, columns=HOURLY_COLUMNS).set_index("hour")

    def plot(self, save_to: str | None = None, figsize: tuple[int, int] = (10, 6)) -> None:
        """Plot volume moved and deficit left per hour."""
        import matplotlib.pyplot as plt
        import seaborn as sns

        if not self.reports:
            raise ValueError("No hours were simulated. Nothing to plot.")

        sns.set_context("paper", font_scale=1.3)
        frame = self.hourly_frame()

        fig, ax = plt.subplots(figsize=figsize)
        ax.bar(frame.index, frame["volume"], color="steelblue", alpha=0.7, label="Transferred")
        ax.plot(frame.index, frame["unmet_deficit"], color="darkred", marker="o", label="Unmet deficit")

        ax.set_xlabel("Hour")
        ax.set_ylabel("Volume (m³)")
        title = "Hourly Water Redistribution"
        if self.termination is not None:
            title += f" ({self.termination.value})"
        ax.set_title(title)
        ax.legend(loc="best")
        ax.grid(True, alpha=0.3)

        plt.tight_layout()
        sns.despine(fig=fig)

        if save_to:
            plt.savefig(save_to, dpi=150, bbox_inches="tight")
            plt.close(fig)
        else:
            plt.show()
