from __future__ import annotations

import multiprocessing as mp
from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # Use non-interactive backend for headless environments
import matplotlib.pyplot as plt
import numpy as np

from mcpricer import EuropeanCallPricer, SimulationParameters, compare_strategies

OUTPUT_DIR = Path("img")
N_PATHS_TO_DISPLAY = 25


def progress(completed: int, total: int):
    step = max(1, total // 10)
    if completed % step == 0 or completed == total:
        print(f"Progress: {completed}/{total} ({100 * completed / total:.0f}%)")


def create_pricing_visualizations(pricer, seeds, result):
    """Plot sample paths, the payoff distribution and the running estimate."""
    params = pricer.params
    fig, axes = plt.subplots(2, 2, figsize=(15, 12))
    fig.suptitle("European Call Monte Carlo Analysis", fontsize=16, fontweight="bold")

    # 1. Sample price paths
    ax1 = axes[0, 0]
    t = np.linspace(0.0, params.n_updates * params.dt, params.n_updates + 1)
    for seed in seeds[:N_PATHS_TO_DISPLAY]:
        ax1.plot(t, pricer.price_path(seed), linewidth=0.8, alpha=0.6)
    ax1.axhline(params.strike_price, color="red", linestyle="--", linewidth=2,
                label=f"Strike = {params.strike_price:.2f}")
    ax1.set_xlabel("Time (years)")
    ax1.set_ylabel("Price")
    ax1.set_title(f"{N_PATHS_TO_DISPLAY} Simulated GBM Paths")
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    # 2. Distribution of discounted payoffs in the money
    ax2 = axes[0, 1]
    payoffs = result.discounted_payoffs
    itm = payoffs[payoffs > 0]
    ax2.hist(itm, bins=60, alpha=0.7, density=True, color="skyblue", edgecolor="black")
    ax2.axvline(result.average_payoff, color="orange", linestyle="--", linewidth=2,
                label=f"Mean (all paths) = {result.average_payoff:.4f}")
    ax2.set_xlabel("Discounted payoff")
    ax2.set_ylabel("Density")
    ax2.set_title(f"In-the-money Payoffs ({100 * itm.size / payoffs.size:.1f}% of paths)")
    ax2.legend()
    ax2.grid(True, alpha=0.3)

    # 3. Convergence of the running estimate
    ax3 = axes[1, 0]
    n = np.arange(1, payoffs.size + 1)
    running = np.cumsum(payoffs) / n
    ax3.plot(n, running, color="blue", linewidth=1.5)
    ci = result.stats["ci_mean"]
    ax3.axhspan(ci["low"], ci["high"], alpha=0.2, color="yellow",
                label=f"{int(ci['confidence'] * 100)}% CI [{ci['low']:.4f}, {ci['high']:.4f}]")
    ax3.set_xscale("log")
    ax3.set_xlabel("Number of paths")
    ax3.set_ylabel("Running average payoff")
    ax3.set_title("Convergence of the Estimate")
    ax3.legend()
    ax3.grid(True, alpha=0.3)

    # 4. Terminal price distribution
    ax4 = axes[1, 1]
    terminals = np.array([pricer.simulate_path(s) for s in seeds[:5_000]])
    ax4.hist(terminals, bins=60, alpha=0.7, density=True, color="lightgreen", edgecolor="black")
    ax4.axvline(params.strike_price, color="red", linestyle="--", linewidth=2, label="Strike")
    ax4.set_xlabel("Terminal price")
    ax4.set_ylabel("Density")
    ax4.set_title("Terminal Price Distribution (first 5,000 paths)")
    ax4.legend()
    ax4.grid(True, alpha=0.3)

    plt.tight_layout()
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    filepath = OUTPUT_DIR / "european_call_analysis.png"
    fig.savefig(filepath, dpi=150, bbox_inches="tight")
    print(f"Saved plot to {filepath}")
    plt.close(fig)


def main():
    params = SimulationParameters(n_paths=40_000, n_workers=8)
    pricer = EuropeanCallPricer(params)
    seeds = pricer.generate_seeds()

    print("Comparing serial and parallel strategies…")
    results = compare_strategies(params, seeds=seeds, parallel_backend="process")

    print("\nRunning thread backend with progress reporting…")
    result = pricer.run(seeds=seeds, backend="thread", progress_callback=progress)
    same = result.average_payoff == results["serial"].average_payoff
    print(f"Thread run matches serial run: {same}")

    print("\n" + "*" * 50)
    print("STRATEGY TIMINGS:")
    for name, res in results.items():
        print(f"  {name} ({res.backend}): {res.execution_time:.3f} s")
    print("*" * 50 + "\n")

    print(result.result_to_string())
    create_pricing_visualizations(pricer, seeds, result)


if __name__ == "__main__":
    mp.freeze_support()
    main()
