"""Learning-rate schedules.

Each factory returns a policy `(base_rate, iteration) -> rate`; iterations
count from 1.
"""

import math


def fixed():
    def policy(base_rate, iteration):
        return base_rate
    return policy


def step(gamma=0.9, step_size=100):
    def policy(base_rate, iteration):
        return base_rate * gamma ** math.floor(iteration / step_size)
    return policy


def exp(gamma=0.999):
    def policy(base_rate, iteration):
        return base_rate * gamma ** iteration
    return policy


def inv(gamma=0.001, power=2):
    def policy(base_rate, iteration):
        return base_rate * (1 + gamma * iteration) ** -power
    return policy
