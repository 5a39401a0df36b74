import math

import numpy as np
import pytest
from scipy.stats import norm

from mcpricer import EuropeanCallPricer, PricingResult, SeedTable, SimulationParameters, compare_strategies


def _black_scholes_call(S0, K, r, sigma, T=1.0):
    d1 = (math.log(S0 / K) + (r + 0.5 * sigma * sigma) * T) / (sigma * math.sqrt(T))
    d2 = d1 - sigma * math.sqrt(T)
    return S0 * norm.cdf(d1) - K * math.exp(-r * T) * norm.cdf(d2)


class TestEuropeanCallPricer:
    """Test per-path helpers and run orchestration"""

    def test_default_parameters(self):
        """Test the pricer falls back to default parameters"""
        assert EuropeanCallPricer().params == SimulationParameters()

    def test_generate_seeds_sized_to_paths(self, pricer):
        """Test one seed per configured path"""
        assert len(pricer.generate_seeds()) == pricer.params.n_paths

    def test_path_payoff_pipeline(self, pricer):
        """Test path_payoff composes simulate_path and discounted_payoff"""
        terminal = pricer.simulate_path(77)
        assert pricer.path_payoff(77) == pricer.discounted_payoff(terminal)
        assert pricer.discounted_payoff(terminal) == pricer.payoff(terminal) * pricer.params.discount_factor
        assert pricer.price_path(77)[-1] == terminal

    def test_run_sequential(self, pricer, fixed_seeds):
        """Test a basic sequential run"""
        res = pricer.run(seeds=fixed_seeds, backend="sequential")
        assert isinstance(res, PricingResult)
        assert res.n_paths == 64
        assert res.backend == "sequential"
        assert res.n_workers == 1
        assert res.discounted_payoffs.shape == (64,)
        assert res.average_payoff == pytest.approx(res.discounted_payoffs.mean())
        assert res.execution_time >= 0

    @pytest.mark.parametrize("backend", ["thread", "process"])
    def test_serial_and_parallel_identical(self, pricer, fixed_seeds, backend):
        """Test parallel strategies reproduce the serial result exactly"""
        seq = pricer.run(seeds=fixed_seeds, backend="sequential")
        par = pricer.run(seeds=fixed_seeds, backend=backend, n_workers=2)
        np.testing.assert_array_equal(seq.discounted_payoffs, par.discounted_payoffs)
        assert seq.average_payoff == par.average_payoff
        assert par.backend == backend
        assert par.n_workers == 2

    def test_price_all_paths(self, pricer, fixed_seeds):
        """Test the average-only entry point"""
        avg = pricer.price_all_paths(fixed_seeds, backend="thread")
        assert avg == pricer.run(seeds=fixed_seeds, backend="sequential").average_payoff

    def test_run_generates_seeds_when_missing(self, pricer):
        """Test an entropy-seeded table is created per run"""
        res = pricer.run(backend="sequential")
        assert res.metadata["seed_entropy"] is not None

    def test_fixed_table_has_no_entropy(self, pricer, fixed_seeds):
        """Test metadata of an injected table"""
        res = pricer.run(seeds=fixed_seeds, backend="sequential")
        assert res.metadata["seed_entropy"] is None
        assert res.metadata["simulation_name"] == "TestPricer"
        assert res.metadata["parameters"]["n_paths"] == 64
        assert set(res.metadata) == {"simulation_name", "timestamp", "seed_entropy", "parameters"}
        assert res.n_paths == 64

    def test_seed_table_length_mismatch(self, pricer):
        """Test a table of the wrong length is refused"""
        with pytest.raises(ValueError, match="expected n_paths=64"):
            pricer.run(seeds=SeedTable.from_values(range(10)))

    def test_invalid_backend(self, pricer, fixed_seeds):
        """Test an unknown backend is refused"""
        with pytest.raises(ValueError, match="backend must be one of"):
            pricer.run(seeds=fixed_seeds, backend="gpu")

    @pytest.mark.parametrize("n_workers, match", [(0, "positive"), (5, "divisible")])
    def test_invalid_worker_override(self, pricer, fixed_seeds, n_workers, match):
        """Test worker overrides must partition the paths evenly"""
        with pytest.raises(ValueError, match=match):
            pricer.run(seeds=fixed_seeds, backend="thread", n_workers=n_workers)

    def test_invalid_confidence(self, pricer, fixed_seeds):
        """Test confidence must lie in (0, 1)"""
        with pytest.raises(ValueError, match="confidence"):
            pricer.run(seeds=fixed_seeds, confidence=1.5)

    def test_auto_small_job_runs_sequentially(self, pricer, fixed_seeds):
        """Test "auto" falls back to sequential below the threshold"""
        res = pricer.run(seeds=fixed_seeds, backend="auto")
        assert res.backend == "sequential"

    def test_auto_resolution(self, monkeypatch):
        """Test "auto" resolves by worker count, job size and platform"""
        import mcpricer.pricer as pricer_mod

        big = EuropeanCallPricer(SimulationParameters(n_paths=40_000, n_workers=4))
        assert big._resolve_backend_type("auto", 1) == "sequential"
        monkeypatch.setattr(pricer_mod, "is_windows_platform", lambda: False)
        assert big._resolve_backend_type("auto", 4) == "thread"
        monkeypatch.setattr(pricer_mod, "is_windows_platform", lambda: True)
        assert big._resolve_backend_type("auto", 4) == "process"
        assert big._resolve_backend_type("thread", 4) == "thread"

    def test_stats_attached(self, pricer, fixed_seeds):
        """Test the standard error and CI bracket the estimate"""
        res = pricer.run(seeds=fixed_seeds, backend="sequential")
        ci = res.stats["ci_mean"]
        assert res.stats["se"] > 0
        assert ci["low"] < res.average_payoff < ci["high"]

    def test_progress_callback(self, pricer, fixed_seeds):
        """Test the progress callback reaches completion"""
        calls = []
        pricer.run(seeds=fixed_seeds, backend="thread", progress_callback=lambda c, t: calls.append((c, t)))
        assert calls[-1] == (64, 64)

    def test_failure_aborts_without_result(self, pricer, fixed_seeds, monkeypatch):
        """Test a worker failure surfaces instead of a partial average"""
        def _boom(self, seed):
            raise ArithmeticError("bad path")

        monkeypatch.setattr(EuropeanCallPricer, "path_payoff", _boom)
        with pytest.raises(ArithmeticError, match="bad path"):
            pricer.run(seeds=fixed_seeds, backend="thread")

    def test_result_to_string(self, pricer, fixed_seeds):
        """Test the summary text"""
        text = pricer.run(seeds=fixed_seeds, backend="sequential").result_to_string()
        assert "TestPricer" in text
        assert "Number of paths: 64" in text
        assert "Option payoff" in text
        assert "CI" in text

    def test_converges_to_black_scholes(self):
        """Test the estimate is close to the analytic price"""
        params = SimulationParameters(
            spot_price=100.0, risk_free_rate=0.05, volatility=0.2, strike_price=100.0,
            n_steps=12, n_paths=20_000, discount_factor=math.exp(-0.05), n_workers=4,
        )
        pricer = EuropeanCallPricer(params)
        res = pricer.run(seeds=pricer.generate_seeds(entropy=2024), backend="thread")
        assert res.average_payoff == pytest.approx(_black_scholes_call(100.0, 100.0, 0.05, 0.2), abs=5 * res.stats["se"])


class TestEndToEndScenarios:
    """Test the deterministic zero-volatility scenarios"""

    def test_at_the_money_without_volatility(self):
        """Test a flat path at the strike pays nothing"""
        params = SimulationParameters(
            spot_price=100.0, strike_price=100.0, risk_free_rate=0.0, volatility=0.0,
            n_steps=1, n_paths=1, discount_factor=1.0, n_workers=1,
        )
        pricer = EuropeanCallPricer(params)
        seeds = pricer.generate_seeds()
        assert pricer.simulate_path(seeds[0]) == 100.0
        res = pricer.run(seeds=seeds, backend="sequential")
        assert res.average_payoff == 0.0

    def test_drift_only_in_the_money(self):
        """Test deterministic drift yields spot * exp(r) and a positive payoff"""
        params = SimulationParameters(
            spot_price=100.0, strike_price=50.0, risk_free_rate=0.05, volatility=0.0,
            n_steps=365, n_paths=1, discount_factor=1.0, n_workers=1,
        )
        pricer = EuropeanCallPricer(params)
        seeds = pricer.generate_seeds()
        terminal = pricer.simulate_path(seeds[0])
        assert terminal == pytest.approx(100.0 * math.exp(0.05), rel=1e-10)
        res = pricer.run(seeds=seeds)
        assert res.average_payoff > 0
        assert res.average_payoff == pytest.approx(100.0 * math.exp(0.05) - 50.0, rel=1e-10)


class TestCompareStrategies:
    """Test the timed serial-vs-parallel comparison"""

    def test_report_lines(self, small_params, fixed_seeds):
        """Test timer and payoff lines are reported in order"""
        lines = []
        results = compare_strategies(small_params, seeds=fixed_seeds, report=lines.append)
        assert lines[0] == "Timer serial started"
        assert lines[1].startswith("Timer serial finished: ") and lines[1].endswith(" ms")
        assert lines[2].startswith("Option payoff = ")
        assert lines[3] == "Timer parallel started"
        assert lines[4].startswith("Timer parallel finished: ")
        assert lines[5].startswith("Option payoff = ")
        assert len(lines) == 6
        assert set(results) == {"serial", "parallel"}

    def test_same_seeds_same_price(self, small_params, fixed_seeds):
        """Test both legs agree exactly on a shared table"""
        results = compare_strategies(small_params, seeds=fixed_seeds, report=None)
        assert results["serial"].backend == "sequential"
        assert results["parallel"].backend == "thread"
        assert results["serial"].average_payoff == results["parallel"].average_payoff

    def test_parallel_backend_override(self, small_params, fixed_seeds):
        """Test the parallel leg can use processes"""
        results = compare_strategies(small_params, seeds=fixed_seeds, parallel_backend="process", report=None)
        assert results["parallel"].backend == "process"
        np.testing.assert_array_equal(
            results["serial"].discounted_payoffs, results["parallel"].discounted_payoffs
        )
