#!/usr/bin/env python3
"""
Student Registry Chart Renderer
=========================================================
Renders the dashboard charts for a roster: programme breakdown,
level distribution, GPA bands and a combined dashboard panel.

Usage:
    python visualize_registry.py --sample
    python visualize_registry.py --data students_export.csv
    python visualize_registry.py --data students.csv --output-dir ./charts
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import asdict, fields
from pathlib import Path
from typing import Sequence

import matplotlib
matplotlib.use("Agg")  # headless rendering
import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.gridspec import GridSpec

from student_registry import (
    DashboardStats,
    RegistryError,
    ReportRow,
    Student,
    StudentRegistry,
    compute_dashboard,
    generate_gpa_distribution,
    import_csv,
    level_sort_key,
)

logger = logging.getLogger(__name__)


# ── Theme ─────────────────────────────────────────────────────────────────

THEME_COLORS = {
    "primary": "#1B3A5C",      # dark navy
    "secondary": "#2E86AB",    # bright blue
    "accent": "#F18F01",       # orange
    "success": "#2CA58D",      # teal/green
    "danger": "#C1292E",       # red
    "warning": "#F4D35E",      # yellow
    "light": "#E8EEF2",       # light gray-blue
    "text": "#2C3E50",         # dark text
}

# Excellent -> Poor
BAND_COLORS = [
    THEME_COLORS["success"],
    THEME_COLORS["secondary"],
    THEME_COLORS["warning"],
    THEME_COLORS["accent"],
    THEME_COLORS["danger"],
]


def apply_theme():
    """Apply theme styling to matplotlib."""
    plt.rcParams.update({
        "font.family": "sans-serif",
        "font.sans-serif": ["Helvetica Neue", "Arial", "DejaVu Sans"],
        "font.size": 11,
        "axes.titlesize": 14,
        "axes.titleweight": "bold",
        "axes.labelsize": 12,
        "axes.facecolor": "#FAFBFC",
        "axes.edgecolor": "#DEE2E6",
        "axes.grid": True,
        "grid.alpha": 0.3,
        "grid.color": "#CED4DA",
        "figure.facecolor": "white",
        "figure.dpi": 150,
        "savefig.dpi": 200,
        "savefig.bbox": "tight",
        "savefig.pad_inches": 0.3,
    })


# ── Data ──────────────────────────────────────────────────────────────────

def roster_frame(students: Sequence[Student]) -> pd.DataFrame:
    """One row per student, status as plain text."""
    columns = [f.name for f in fields(Student)]
    records = [{**asdict(s), "status": s.status.value} for s in students]
    return pd.DataFrame(records, columns=columns)


def level_counts(df: pd.DataFrame) -> pd.Series:
    """Headcount per level in numeric level order."""
    counts = df["level"].value_counts()
    return counts.reindex(sorted(counts.index, key=level_sort_key))


# ── Chart Builders ────────────────────────────────────────────────────────

def chart_programme_breakdown(stats: DashboardStats, output_dir: Path):
    """Ranked horizontal bars of the dashboard's programme series."""
    if not stats.programme_counts:
        return None
    ranked = pd.Series(stats.programme_counts).sort_values()
    shares = ranked / stats.total * 100

    fig, ax = plt.subplots(figsize=(10, max(3, 0.6 * len(ranked) + 1.5)))
    ax.barh(ranked.index, ranked.values, color=THEME_COLORS["primary"], alpha=0.85)
    ax.bar_label(
        ax.containers[0],
        labels=[f"{n} ({pct:.1f}%)" for n, pct in zip(ranked.values, shares.values)],
        padding=4, fontsize=9, color=THEME_COLORS["text"],
    )
    ax.set_xlabel("Students")
    ax.set_xlim(0, ranked.max() * 1.25)
    ax.grid(axis="y", visible=False)
    ax.set_title(f"{stats.total} students across {len(ranked)} programmes",
                 fontsize=10, fontweight="normal", color=THEME_COLORS["text"])

    fig.suptitle(
        "Students by Programme",
        fontsize=16, fontweight="bold", color=THEME_COLORS["primary"], y=1.02,
    )

    path = output_dir / "programme_breakdown.png"
    fig.savefig(path)
    plt.close(fig)
    return path


def chart_level_distribution(df: pd.DataFrame, output_dir: Path):
    """Bar chart of students per level."""
    if df.empty:
        return None
    counts = level_counts(df)

    fig, ax = plt.subplots(figsize=(10, 6))
    bars = ax.bar(
        range(len(counts)), counts.values,
        color=THEME_COLORS["secondary"], alpha=0.85,
        edgecolor="white", linewidth=0.5,
    )

    for bar, val in zip(bars, counts.values):
        ax.text(
            bar.get_x() + bar.get_width() / 2, bar.get_height() + 0.05,
            f"{val}", ha="center", va="bottom",
            fontsize=9, fontweight="bold", color=THEME_COLORS["text"],
        )

    ax.set_xticks(range(len(counts)))
    ax.set_xticklabels([f"Level {lvl}" for lvl in counts.index])
    ax.set_ylabel("Number of Students")

    fig.suptitle(
        "Students by Level",
        fontsize=16, fontweight="bold", color=THEME_COLORS["primary"], y=1.02,
    )

    path = output_dir / "level_distribution.png"
    fig.savefig(path)
    plt.close(fig)
    return path


def chart_gpa_distribution(rows: Sequence[ReportRow], output_dir: Path):
    """Horizontal bars for the five GPA bands of the distribution report."""
    bands = [r for r in rows if not r.is_total]
    if not bands:
        return None

    labels = [r.category for r in bands]
    counts = [int(r.value) for r in bands]

    fig, ax = plt.subplots(figsize=(10, 5))
    bars = ax.barh(range(len(labels)), counts, color=BAND_COLORS[:len(labels)],
                   edgecolor="white", linewidth=0.5)

    ax.set_yticks(range(len(labels)))
    ax.set_yticklabels(labels)
    ax.set_xlabel("Students")
    ax.invert_yaxis()

    for bar, row in zip(bars, bands):
        ax.text(
            bar.get_width() + 0.05, bar.get_y() + bar.get_height() / 2,
            f"{row.value} ({row.percentage})", va="center", fontsize=8, fontweight="bold",
        )

    fig.suptitle(
        "GPA Distribution",
        fontsize=16, fontweight="bold", color=THEME_COLORS["primary"], y=1.02,
    )

    path = output_dir / "gpa_distribution.png"
    fig.savefig(path)
    plt.close(fig)
    return path


def chart_dashboard(stats: DashboardStats, df: pd.DataFrame, output_dir: Path):
    """Multi-panel dashboard combining key metrics."""
    if df.empty:
        return None

    fig = plt.figure(figsize=(14, 10))
    gs = GridSpec(2, 2, figure=fig, hspace=0.4, wspace=0.3)

    # ── Panel 1: Programme pie ────────────────────────────────────
    ax1 = fig.add_subplot(gs[0, 0])
    ax1.pie(
        list(stats.programme_counts.values()),
        labels=[f"{p} ({c})" for p, c in stats.programme_counts.items()],
        colors=plt.cm.Set3(range(len(stats.programme_counts))),
        startangle=90, textprops={"fontsize": 8},
    )
    ax1.set_title("Students by Programme")

    # ── Panel 2: Level bars ───────────────────────────────────────
    ax2 = fig.add_subplot(gs[0, 1])
    ax2.bar(range(len(stats.level_counts)), list(stats.level_counts.values()),
            color=THEME_COLORS["secondary"], alpha=0.8)
    ax2.set_xticks(range(len(stats.level_counts)))
    ax2.set_xticklabels(list(stats.level_counts), fontsize=8)
    ax2.set_title("Students by Level")

    # ── Panel 3: GPA histogram ────────────────────────────────────
    ax3 = fig.add_subplot(gs[1, 0])
    ax3.hist(df["gpa"], bins=[0.0, 0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5, 4.0],
             color=THEME_COLORS["primary"], alpha=0.8, edgecolor="white")
    ax3.axvline(x=stats.average_gpa, color=THEME_COLORS["accent"], linestyle="--",
                label=f"Mean {stats.average_gpa:.2f}")
    ax3.set_xlim(0.0, 4.0)
    ax3.legend(fontsize=8)
    ax3.set_title("GPA Spread")

    # ── Panel 4: Key Metrics Summary ──────────────────────────────
    ax4 = fig.add_subplot(gs[1, 1])
    ax4.axis("off")
    metrics = [
        ("Total Students", f"{stats.total}"),
        ("Active", f"{stats.active}"),
        ("Inactive", f"{stats.inactive}"),
        ("Average GPA", f"{stats.average_gpa:.2f}"),
        ("Programmes", f"{len(stats.programme_counts)}"),
        ("Levels", f"{len(stats.level_counts)}"),
    ]
    for i, (label, value) in enumerate(metrics):
        y = 0.9 - i * 0.14
        ax4.text(0.05, y, label, fontsize=10, fontweight="bold",
                 color=THEME_COLORS["text"], transform=ax4.transAxes)
        ax4.text(0.85, y, value, fontsize=11, fontweight="bold",
                 color=THEME_COLORS["primary"], ha="right", transform=ax4.transAxes)
    ax4.set_title("Key Metrics", pad=10)

    fig.suptitle(
        "Student Dashboard",
        fontsize=18, fontweight="bold", color=THEME_COLORS["primary"], y=1.01,
    )

    path = output_dir / "dashboard.png"
    fig.savefig(path)
    plt.close(fig)
    return path


def render_all(registry: StudentRegistry, output_dir: Path) -> list[tuple[str, Path]]:
    """Render every chart for the registry. Returns (name, path) of those drawn."""
    output_dir.mkdir(parents=True, exist_ok=True)
    students = registry.all()
    df = roster_frame(students)
    stats = compute_dashboard(students)

    charts = [
        ("Programme Breakdown", chart_programme_breakdown(stats, output_dir)),
        ("Level Distribution", chart_level_distribution(df, output_dir)),
        ("GPA Distribution", chart_gpa_distribution(generate_gpa_distribution(students), output_dir)),
        ("Dashboard", chart_dashboard(stats, df, output_dir)),
    ]
    generated = [(name, path) for name, path in charts if path]
    logger.info("Rendered %d charts into %s", len(generated), output_dir)
    return generated


# ── CLI ───────────────────────────────────────────────────────────────────

def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Student Registry Chart Renderer")
    parser.add_argument("--data", help="Roster CSV to import")
    parser.add_argument("--sample", action="store_true", help="Include the demo roster")
    parser.add_argument(
        "--output-dir",
        default="./output/charts",
        help="Directory to save charts",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if not args.data and not args.sample:
        parser.error("nothing to draw: pass --data PATH and/or --sample")

    registry = StudentRegistry()
    try:
        if args.sample:
            registry.load_sample_data()
        if args.data:
            result = import_csv(registry, args.data)
            print(f"  {result.message}")
    except (RegistryError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    out = Path(args.output_dir)
    apply_theme()

    print("Generating charts...")
    generated = render_all(registry, out)

    print(f"\nGenerated {len(generated)} charts:")
    for name, path in generated:
        print(f"  {name:25s} -> {path}")

    print(f"\nAll charts saved to: {out}/")
    return 0


if __name__ == "__main__":
    sys.exit(main())
