"""Core check pipeline: probe, threshold evaluation, cooldown gate and dispatch."""
