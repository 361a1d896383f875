"""Render a group-intersection report as a heatmap image."""

from __future__ import annotations

import argparse
import os

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns


def load_intersections(csv_path: str) -> pd.DataFrame:
    """Read a group-intersections CSV into a square group x group frame."""
    df = pd.read_csv(csv_path, index_col="Name")
    # Column order follows the rows so the diagonal lines up.
    return df.reindex(columns=list(df.index)).astype(float)


def plot_intersections(df: pd.DataFrame, output_path: str) -> str:
    """Save a heatmap of *df* to *output_path* and return the path.

    Rows are the reference group: a cell reads "share of the row group's
    members who are also in the column group".
    """
    size = max(6, len(df) * 0.8)
    plt.figure(figsize=(size + 2, size))
    sns.heatmap(
        df, annot=len(df) <= 20, fmt=".2f", cmap="Blues",
        vmin=0, vmax=1, square=True, cbar_kws={"label": "Share of row group"},
    )
    plt.title("Group Membership Overlap", fontsize=14, pad=20)
    plt.xlabel("Also in", fontsize=12)
    plt.ylabel("Members of", fontsize=12)
    plt.xticks(rotation=45, ha="right")
    plt.yticks(rotation=0)
    plt.tight_layout()
    plt.savefig(output_path, dpi=300, bbox_inches="tight")
    plt.close()
    return output_path


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Plot a group-intersections CSV as a heatmap")
    parser.add_argument("csv_path", help="Path to a *-group-intersections.csv report")
    parser.add_argument("--output", "-o", help="Image path (default: CSV path with .png)")
    args = parser.parse_args(argv)

    output = args.output or os.path.splitext(args.csv_path)[0] + ".png"
    plot_intersections(load_intersections(args.csv_path), output)
    print(f"Heatmap has been saved as '{output}'")


if __name__ == "__main__":
    main()
