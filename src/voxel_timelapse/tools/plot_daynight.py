import logging

import matplotlib
import matplotlib.pyplot as plt
import numpy as np

from voxel_timelapse.daynight import DayNightModel

logger = logging.getLogger(__name__)

# Time-of-day markers drawn on every panel
MARKERS = [(0.25, "sunrise"), (0.5, "noon"), (0.75, "sunset")]


def plot_cycle(model=None, path=None, samples=241):
    """
    Plot sun elevation, sun intensity and sky color over one day.

    Args:
        model: DayNightModel to sample (defaults to the stock model)
        path: Save the figure here; shows it interactively when None
        samples: Number of time_of_day samples

    Returns:
        matplotlib Figure
    """
    if path is not None:
        matplotlib.use("Agg")
    model = model if model is not None else DayNightModel()
    times, intensity, sky, elevation = model.sample_cycle(samples)

    fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(10, 8), sharex=True)

    ax1.plot(times, elevation, color="tab:orange")
    ax1.axhline(0.0, color="gray", linewidth=0.8)
    ax1.set_ylabel("sun elevation")
    ax1.set_title("Day/Night Cycle")

    ax2.plot(times, intensity, color="tab:red")
    ax2.set_ylabel("sun intensity")

    # Sky color as a strip, one column per sample
    ax3.imshow(np.clip(sky, 0.0, 1.0)[None, :, :], aspect="auto",
               extent=(times[0], times[-1], 0.0, 1.0))
    ax3.set_yticks([])
    ax3.set_ylabel("sky")
    ax3.set_xlabel("time of day")

    for ax in (ax1, ax2, ax3):
        for t, label in MARKERS:
            ax.axvline(t, color="k", linestyle=":", linewidth=0.8)
        ax.set_xlim(0.0, 1.0)
    ax1.set_xticks([0.0] + [t for t, _ in MARKERS] + [1.0])

    fig.tight_layout()
    if path is not None:
        fig.savefig(path)
        plt.close(fig)
        logger.info("Saved day/night plot to %s", path)
    else:
        plt.show()
    return fig


if __name__ == "__main__":
    plot_cycle()
