"""Ganglion cell spiking output: slot recurrence, gating and event ordering."""
