# -*- coding: utf-8 -*-
"""
Implements the Tauchen (1986) Method to discretise an AR(1) process into a finite-state
Markov Chain. As for productivity, the log of the underlying random variable follows

    log(z_t) = mu + rho*log(z_{t-1}) + eps_t,     eps_t ~ N(0, sigma^2)

and the grid is returned in levels z = exp(log(z)).

Tauchen, G. (1986): "Finite state Markov-chain approximations to univariate and
vector autoregressions", Economics Letters 20(2), 177-181.
"""

#%% Libraries
from dataclasses import dataclass

import numpy as np
import pandas as pd
import scipy.special
import statsmodels.api as sm

#%% Parameters

class InvalidParameter(ValueError):
    """Raised when the AR(1) parameters do not describe a stationary process."""


@dataclass(frozen=True)
class AR1Parameters:
    """
    Parameters of the log-AR(1) process and of its discretisation.

    Attributes
    ----------
    n : int
        Number of gridpoints. Must be ≥ 2.
    mu : float
        Constant of the AR(1) process in logs.
    rho : float
        Persistence. Must satisfy |ρ| < 1.
    sigma : float
        Standard deviation of the innovations. Must be positive.
    lam : float
        Number of unconditional standard deviations covered on each side of
        the unconditional mean (the truncation width, often called m or λ).
    """
    n: int
    mu: float
    rho: float
    sigma: float
    lam: float = 3.0

    @property
    def sigma_z(self):
        """Unconditional standard deviation of log(z)."""
        return self.sigma / np.sqrt(1 - self.rho**2)

    @property
    def mu_z(self):
        """Unconditional mean of log(z)."""
        return self.mu / (1 - self.rho)


def check_parameters(params):
    """
    Fail fast on parameters for which the discretisation is undefined.

    Raises
    ------
    InvalidParameter
        If n is not an integer ≥ 2, a parameter is not finite, sigma ≤ 0,
        |rho| ≥ 1 or lam ≤ 0.
    """
    n = params.n
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise InvalidParameter(f"n must be an integer, got {n!r}")
    if n < 2:
        raise InvalidParameter(f"n must be at least 2, got {n}")

    for name in ("mu", "rho", "sigma", "lam"):
        value = getattr(params, name)
        if not np.isfinite(value):
            raise InvalidParameter(f"{name} must be finite, got {value!r}")

    if params.sigma <= 0:
        raise InvalidParameter(f"sigma must be positive, got {params.sigma}")
    if abs(params.rho) >= 1:
        raise InvalidParameter(f"|rho| must be smaller than 1, got {params.rho}")
    if params.lam <= 0:
        raise InvalidParameter(f"lam must be positive, got {params.lam}")

#%% Tauchen Method

def discretize(params, validate=True, dtype=np.float64):
    """
    Constructs the grid and the Markov Transition Matrix of a log-AR(1) process
    using the Tauchen method.

    The grid is evenly spaced in logs on [mu_z - lam*sigma_z, mu_z + lam*sigma_z].
    The probability of moving to state j is the normal mass of the interval of
    half a step around log(z_j); the first and last states collect the tails.
    The last column is obtained as one minus the mass of all other columns,
    so every row sums to one by construction.

    Parameters
    ----------
    params : AR1Parameters
        Process and grid parameters.
    validate : bool, optional
        Check the parameters before computing. If False, invalid parameters
        propagate as NaN/Inf into the output instead of raising. Default: True.
    dtype : numpy dtype, optional
        Floating point precision of the output. Default: np.float64.

    Returns
    -------
    Z : numpy.ndarray
        Array of shape (n,) containing the gridpoints in levels, in ascending order.
    P : numpy.ndarray
        Markov Transition Matrix of shape (n, n), where P[i,j] is the probability
        of transitioning from state i to state j.

    Raises
    ------
    InvalidParameter
        If validate is True and the parameters are invalid.
    """
    if validate:
        check_parameters(params)

    real = np.dtype(dtype).type
    n = int(params.n)
    mu = real(params.mu)
    rho = real(params.rho)
    sigma = real(params.sigma)
    lam = real(params.lam)
    sqrt2 = np.sqrt(real(2))

    with np.errstate(divide='ignore', invalid='ignore'):
        # grid for log(z)
        sigma_z = sigma / np.sqrt(1 - rho**2)
        mu_z = mu / (1 - rho)
        zmin = mu_z - lam*sigma_z
        zmax = mu_z + lam*sigma_z
        zstep = (zmax - zmin) / real(n - 1)
        Z = np.exp(zmin + zstep*np.arange(n, dtype=dtype))

        # origin states in logs; every row i is computed at once
        x = np.log(Z)
        half_step = real(0.5)*zstep/sigma

        P = np.empty((n, n), dtype=dtype)

        # lower tail collects all mass below the first midpoint
        normarg = (zmin - mu - rho*x)/sigma + half_step
        P[:, 0] = real(0.5) + real(0.5)*scipy.special.erf(normarg/sqrt2)
        P[:, n-1] = 1 - P[:, 0]

        # interior states, subtracting each from the upper tail in column order
        for j in range(1, n-1):
            normarg = (x[j] - mu - rho*x)/sigma
            P[:, j] = (real(0.5)*scipy.special.erf((normarg + half_step)/sqrt2)
                       - real(0.5)*scipy.special.erf((normarg - half_step)/sqrt2))
            P[:, n-1] -= P[:, j]

    if validate:
        assert np.allclose(P.sum(axis=1), 1), "Rows of P must sum to 1."

    return Z, P

def tauchen(n, mu, rho, sigma, lam=3.0, **kwargs):
    """
    Shortcut for discretize(AR1Parameters(n, mu, rho, sigma, lam), **kwargs).
    """
    return discretize(AR1Parameters(n, mu, rho, sigma, lam), **kwargs)

#%% Flat Storage

def flat_index(i, j, n):
    """
    Position of P[i,j] in a column-major buffer of length n*n.
    """
    return i + n*j

def flatten(P):
    """
    Stores the Markov Transition Matrix column by column, i.e.
    flat[i + n*j] = P[i,j].
    """
    return np.ravel(P, order='F')

def unflatten(flat, n):
    """Inverse of flatten()."""
    return np.reshape(flat, (n, n), order='F')

#%% Markov Chain Diagnostics

def stationary_markov(P, tol=1e-14, maxit=10_000):
    """
    Computes the stationary distribution of a discrete-state Markov chain via
    iterative matrix multiplication.

    Parameters
    ----------
    P : numpy.ndarray
        Markov Transition Matrix of shape (n, n), rows summing to one.
    tol : float, optional
        Iteration stops when the supremum norm between successive iterations
        is < tol. Default: 1e-14.
    maxit : int, optional
        Maximum number of iterations. Default: 10_000.

    Returns
    -------
    numpy.ndarray
        The stationary distribution vector of shape (n,).
    """
    # Initialise a uniform distribution over all states
    n = P.shape[0]
    pi = np.full(n, 1/n)

    # update distribution using P until successive iterations differ by less than tol
    for _ in range(maxit):
        pi_new = P.T @ pi
        #Check convergence
        if np.max(np.abs(pi_new - pi)) < tol:
            return pi_new
        pi = pi_new

    print("Stationary Distribution did not converge.")
    return pi

def markov_moments(Z, P, pi=None):
    """
    Moments of log(z) implied by the discretised process.

    Parameters
    ----------
    Z : numpy.ndarray
        Gridpoints in levels, shape (n,).
    P : numpy.ndarray
        Markov Transition Matrix, shape (n, n).
    pi : numpy.ndarray, optional
        Stationary distribution. Computed from P if not given.

    Returns
    -------
    dict
        {'mean': E[log z], 'std': sd(log z), 'autocorr': corr(log z_t, log z_{t+1})}
        under the stationary distribution. Compare with mu_z, sigma_z and rho.
    """
    if pi is None:
        pi = stationary_markov(P)
    x = np.log(Z)

    mean = pi @ x
    var = pi @ (x - mean)**2
    # E[x_t * x_{t+1}] = sum_i pi_i x_i E[x_{t+1} | x_i]
    cross = pi @ (x * (P @ x))
    autocorr = (cross - mean**2) / var

    return {'mean': mean, 'std': np.sqrt(var), 'autocorr': autocorr}

def simulate_markov(P, n_steps, initial_state=0, seed=2718281828):
    """
    Simulate a path of state indices from the Markov chain.

    Parameters
    ----------
    P : numpy.ndarray
        Markov Transition Matrix of shape (n, n).
    n_steps : int
        Number of periods to simulate, including the initial state.
    initial_state : int, optional
        Index of the starting state. Default: 0.
    seed : int or None, optional
        Random seed for reproducibility. If None, randomness is uncontrolled.

    Returns
    -------
    path : numpy.ndarray
        Integer array of length n_steps with the visited state indices.
    """
    # Set the seed if provided
    if seed is not None:
        np.random.seed(seed)

    # Cumulative probabilities per row; the last entry is forced to one so that
    # rounding in the tail never leaves a draw without a state
    cdf = np.cumsum(P, axis=1)
    cdf[:, -1] = 1.0

    draws = np.random.random_sample(n_steps - 1)

    path = np.empty(n_steps, dtype=int)
    path[0] = initial_state
    for t in range(n_steps - 1):
        path[t+1] = np.searchsorted(cdf[path[t]], draws[t], side='right')

    return path

def estimate_ar1(log_path, verbose=False):
    """
    Estimates log(z_{t+1}) = c + rho*log(z_t) + e_{t+1} by OLS on a simulated path.

    Parameters
    ----------
    log_path : numpy.ndarray
        Simulated series of log(z).
    verbose : bool, optional
        Print the regression summary. Default: False.

    Returns
    -------
    intercept : float
    slope : float
        Estimated persistence.
    sigma_hat : float
        Standard deviation of the residuals.
    """
    df = pd.DataFrame({'x': log_path[:-1], 'x_next': log_path[1:]})

    X = sm.add_constant(df['x'])  # Adds a column of 1s for the intercept
    y = df['x_next']

    # Fit the regression model
    results = sm.OLS(y, X).fit()

    if verbose:
        print(results.summary())

    intercept = results.params['const']
    slope = results.params['x']
    sigma_hat = np.sqrt(results.scale)

    return intercept, slope, sigma_hat

#%% Run
if __name__ == "__main__":
    params = AR1Parameters(n=5, mu=0.0, rho=0.9, sigma=0.1, lam=3.0)
    Z, P = discretize(params)

    print(" ========================\n",
          "==== TAUCHEN (1986) ====\n",
          "========================")

    np.set_printoptions(precision=6, suppress=True)
    print(f"sigma_z = {params.sigma_z:.4f}, mu_z = {params.mu_z:.4f}")
    print("Z (levels):\n", Z)
    print("P:\n", P)
    print("Row sums:\n", P.sum(axis=1))
