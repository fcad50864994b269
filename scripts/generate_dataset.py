"""Generate a synthetic fetal-health (CTG) dataset for offline runs."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import pandas as pd


@dataclass
class DatasetConfig:
    samples: int = 2126
    seed: int = 29
    # normal, suspect, pathological
    class_shares: tuple[float, float, float] = (0.778, 0.139, 0.083)
    outfile: Path = field(default_factory=lambda: Path("data/fetal_health.csv"))


def simulate_row(rng: np.random.Generator, label: int) -> dict:
    # Suspect and pathological traces get lower variability and more decelerations.
    risk = (label - 1) / 2
    baseline = int(np.clip(rng.normal(133 - 4 * risk, 9), 106, 160))
    accelerations = float(np.clip(rng.normal(0.004 * (1 - risk), 0.003), 0, 0.019))
    fetal_movement = float(np.clip(rng.exponential(0.01), 0, 0.481))
    uterine_contractions = float(np.clip(rng.normal(0.0045 - 0.002 * risk, 0.003), 0, 0.015))
    light_decelerations = float(np.clip(rng.exponential(0.002 + 0.002 * risk), 0, 0.015))
    severe_decelerations = float(0.001 if rng.random() < 0.01 * risk else 0.0)
    prolongued_decelerations = float(np.clip(rng.exponential(0.0002 + 0.001 * risk), 0, 0.005))
    abnormal_stv = int(np.clip(rng.normal(43 + 22 * risk, 13), 12, 87))
    mean_stv = float(np.clip(rng.normal(1.4 - 0.7 * risk, 0.7), 0.2, 7.0))
    abnormal_ltv = int(np.clip(rng.normal(5 + 35 * risk, 12), 0, 91))
    mean_ltv = float(np.clip(rng.normal(8.5 - 3 * risk, 4.5), 0, 50.7))

    hist_min = int(np.clip(rng.normal(94 - 5 * risk, 28), 50, 159))
    hist_width = int(np.clip(rng.normal(70, 38), 3, 180))
    hist_max = int(np.clip(hist_min + hist_width, 122, 238))
    hist_mode = int(np.clip(rng.normal(138 - 8 * risk, 15), 60, 187))
    hist_mean = int(np.clip(hist_mode - rng.normal(2, 5), 73, 182))
    hist_median = int(np.clip((hist_mode + hist_mean) / 2, 77, 186))

    return {
        "baseline value": float(baseline),
        "accelerations": round(accelerations, 3),
        "fetal_movement": round(fetal_movement, 3),
        "uterine_contractions": round(uterine_contractions, 3),
        "light_decelerations": round(light_decelerations, 3),
        "severe_decelerations": severe_decelerations,
        "prolongued_decelerations": round(prolongued_decelerations, 3),
        "abnormal_short_term_variability": float(abnormal_stv),
        "mean_value_of_short_term_variability": round(mean_stv, 1),
        "percentage_of_time_with_abnormal_long_term_variability": float(abnormal_ltv),
        "mean_value_of_long_term_variability": round(mean_ltv, 1),
        "histogram_width": float(hist_max - hist_min),
        "histogram_min": float(hist_min),
        "histogram_max": float(hist_max),
        "histogram_number_of_peaks": float(rng.poisson(4)),
        "histogram_number_of_zeroes": float(rng.poisson(0.3)),
        "histogram_mode": float(hist_mode),
        "histogram_mean": float(hist_mean),
        "histogram_median": float(hist_median),
        "histogram_variance": float(np.clip(round(rng.gamma(1.5, 12 + 10 * risk)), 0, 269)),
        "histogram_tendency": float(rng.choice([-1.0, 0.0, 1.0], p=[0.08, 0.52, 0.40])),
        "fetal_health": float(label),
    }


def main(config: DatasetConfig) -> None:
    rng = np.random.default_rng(config.seed)
    labels = rng.choice([1, 2, 3], size=config.samples, p=list(config.class_shares))
    df = pd.DataFrame([simulate_row(rng, int(label)) for label in labels])
    config.outfile.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(config.outfile, index=False)
    counts = df["fetal_health"].value_counts().sort_index().to_dict()
    print(f"Dataset written to {config.outfile} with {len(df)} rows, class counts {counts}")


if __name__ == "__main__":
    main(DatasetConfig())
