# -*- coding: utf-8 -*-
"""
Discretises a log-AR(1) productivity process with the Tauchen Method and checks
how well the finite-state Markov Chain reproduces the continuous process.

    1. Grid and Markov Transition Matrix
    2. Moments of the Markov Chain vs. the AR(1) process
    3. Simulation and OLS re-estimation of the persistence
"""

#%% Libraries
import numpy as np
import matplotlib.pyplot as plt
# Set global font size
plt.rcParams.update({'font.size': 12})

#Functions that implement the Tauchen Method
import Tauchen

#%% Set Parameters

#Number of gridpoints
n_z = 9
#Constant of log(z)
mu = 0.0
#Persistence
rho = 0.9
#Standard deviation of the innovations
sigma = 0.1
#Truncation width in unconditional standard deviations
lam = 3.0

#Number of simulated periods
T = 10_000

#%% Grid: Exogenous State Variable

params = Tauchen.AR1Parameters(n=n_z, mu=mu, rho=rho, sigma=sigma, lam=lam)

#Tauchen Method to get grid 'z_grid' (levels) and Markov Transition Matrix 'Pi'
z_grid, Pi = Tauchen.discretize(params)

np.set_printoptions(precision=4, suppress=True)
print("z_grid:\n", z_grid)
print("Pi:\n", Pi)

#%% Moments

#Stationary Distribution of Markov Chain
pi = Tauchen.stationary_markov(Pi)

moments = Tauchen.markov_moments(z_grid, Pi, pi)

print(" ============================ \n",
      "         Moments of log(z)     \n",
      "============================")
print(f" Mean:            chain = {moments['mean']:.4f}, AR(1) = {params.mu_z:.4f}")
print(f" Std. deviation:  chain = {moments['std']:.4f}, AR(1) = {params.sigma_z:.4f}")
print(f" Autocorrelation: chain = {moments['autocorr']:.4f}, AR(1) = {rho:.4f}")

#%% Simulation

#Start in the state closest to the unconditional mean
initial_state = np.argmin(np.abs(np.log(z_grid) - params.mu_z))
path = Tauchen.simulate_markov(Pi, T, initial_state=initial_state)
log_z_chain = np.log(z_grid[path])

#Continuous AR(1) with the same seed for comparison
np.random.seed(2718281828)
eps = sigma*np.random.standard_normal(T)
log_z_ar1 = np.empty(T)
log_z_ar1[0] = params.mu_z
for t in range(T-1):
    log_z_ar1[t+1] = mu + rho*log_z_ar1[t] + eps[t+1]

#Re-estimate the persistence from the simulated chain
intercept, rho_hat, sigma_hat = Tauchen.estimate_ar1(log_z_chain, verbose=True)
print(f"Estimated: rho = {rho_hat:.4f}, sigma = {sigma_hat:.4f}")

#%% Plot Results

#---- Transition Matrix ----
plt.figure(figsize=(8, 6))
plt.imshow(Pi, cmap='viridis', origin='upper')
plt.colorbar(label="$P(z_j | z_i)$")
plt.title("Markov Transition Matrix")
plt.xlabel("Next state $j$")
plt.ylabel("Current state $i$")
plt.tight_layout()
plt.show()

#---- Simulated Paths ----
plt.figure(figsize=(10, 6))
plt.plot(log_z_ar1[:250], label="AR(1)")
plt.plot(log_z_chain[:250], label="Markov Chain", drawstyle='steps-post')
plt.title("Accuracy of the Tauchen Method")
plt.xlabel("Period $t$")
plt.ylabel("$\\log(z_t)$")
plt.legend()
plt.grid(True)
plt.tight_layout()
plt.show()
