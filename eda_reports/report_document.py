"""
Markdown report document.

A `ReportDocument` collects headings, paragraphs, bullet lists, tables,
figures and model summaries in order, then writes a single Markdown file.
Figures are saved as PNG files next to the Markdown and referenced by
relative path; each figure is closed once saved.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import pandas as pd

from .config import REPORTS_DIR
from .regression import OlsFit


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")


@dataclass
class ReportDocument:
    """Ordered Markdown blocks plus the figures they reference."""

    name: str
    title: str
    output_dir: Optional[Path] = None
    blocks: List[str] = field(default_factory=list)
    figures: List[Path] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.output_dir is None:
            self.output_dir = REPORTS_DIR / self.name
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.blocks.append(f"# {self.title}\n")

    @property
    def path(self) -> Path:
        return self.output_dir / f"{self.name}.md"

    def heading(self, text: str, level: int = 2) -> None:
        self.blocks.append(f"{'#' * level} {text}\n")

    def paragraph(self, text: str) -> None:
        self.blocks.append(f"{text}\n")

    def bullets(self, items: List[str]) -> None:
        self.blocks.append("\n".join(f"- {item}" for item in items) + "\n")

    def table(self, df: pd.DataFrame, floatfmt: str = ".3f") -> None:
        """Add a DataFrame as a Markdown table (requires `tabulate`)."""
        self.blocks.append(df.to_markdown(floatfmt=floatfmt) + "\n")

    def figure(self, fig, caption: str, dpi: int = 120) -> Path:
        """Save `fig` as PNG next to the report and reference it."""
        filename = f"fig{len(self.figures) + 1:02d}_{_slug(caption)[:40]}.png"
        dest = self.output_dir / filename
        fig.savefig(dest, dpi=dpi, bbox_inches="tight")
        plt.close(fig)
        self.figures.append(dest)
        self.blocks.append(f"![{caption}]({filename})\n\n*{caption}*\n")
        print(f"    ✓ Saved figure '{caption}' to {dest}")
        return dest

    def model_summary(self, fit: OlsFit) -> None:
        """Add the coefficient table of `fit`, then its statsmodels summary text as a code block."""
        self.heading(f"Model: {fit.name}", level=3)
        self.table(fit.coefficient_table(), floatfmt=".4g")
        self.blocks.append(f"```\n{fit.summary_text}\n```\n")

    def render(self) -> str:
        return "\n".join(self.blocks)

    def write(self) -> Path:
        self.path.write_text(self.render(), encoding="utf-8")
        print(f"  ✓ Wrote report to {self.path}")
        return self.path
